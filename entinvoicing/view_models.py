import enum

from entinvoicing.forms import InvoiceForm
from entinvoicing.models import Invoice


class InvoiceFormScope(enum.Enum):
    """Which affordances the shared invoice form shows."""

    ADD = "add"
    EDIT = "edit"


class InvoiceViewModel:
    """Request scoped projection of an invoice bound to :class:`InvoiceForm`.

    When built around a stored invoice on a plain GET, the form is filled
    from that invoice.  On submission the form holds the posted values and
    :meth:`to_invoice` turns them into a detached :class:`Invoice`.  Only the
    edit scope carries an identifier; adding always produces a new invoice.
    """

    def __init__(
        self,
        scope=InvoiceFormScope.ADD,
        invoice=None,
        invoice_id=None,
        form=None,
    ):
        self.scope = scope
        self.invoice = invoice
        self.invoice_id = invoice.id if invoice is not None else invoice_id
        self.form = form if form is not None else InvoiceForm()
        if invoice is not None and not self.form.is_submitted():
            self._fill_form(invoice)

    @property
    def is_edit(self):
        return self.scope is InvoiceFormScope.EDIT

    def _fill_form(self, invoice):
        form = self.form
        form.invoice_id.data = invoice.id
        form.payer.data = invoice.payer
        form.amount.data = invoice.amount
        form.description.data = invoice.description
        form.date_issued.data = invoice.date_issued
        form.date_due.data = invoice.date_due

    def validate(self):
        return self.form.validate_on_submit()

    def to_invoice(self):
        form = self.form
        return Invoice(
            id=self.invoice_id if self.is_edit else None,
            payer=form.payer.data.strip(),
            amount=form.amount.data,
            description=(form.description.data or "").strip() or None,
            date_issued=form.date_issued.data,
            date_due=form.date_due.data,
        )
