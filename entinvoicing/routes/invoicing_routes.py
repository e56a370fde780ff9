from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user

from entinvoicing import limiter, local_today
from entinvoicing.binder import get_invoice_binder
from entinvoicing.forms import PayInvoiceForm
from entinvoicing.utils.activity import log_activity
from entinvoicing.utils.authz import manager_required
from entinvoicing.view_models import InvoiceFormScope, InvoiceViewModel

invoicing = Blueprint("invoicing", __name__)


def _render_invoice_form(view_model):
    return render_template("invoicing/invoice_form.html", view_model=view_model)


def _render_receivables(binder):
    return render_template(
        "invoicing/receivables.html",
        receivables=binder.receivables(),
        today=local_today(),
        pay_form=PayInvoiceForm(formdata=None),
    )


@invoicing.route("/invoices/add", methods=["GET", "POST"])
@limiter.limit("30 per minute", methods=["POST"])
def add_invoice():
    """Enter invoices one after another."""
    view_model = InvoiceViewModel(InvoiceFormScope.ADD)
    if view_model.validate():
        invoice = view_model.to_invoice()
        if current_user.is_authenticated:
            invoice.created_by_id = current_user.id
        get_invoice_binder().add_invoice(invoice)
        log_activity(f"Added invoice {invoice.id}")
        flash(f"Invoice {invoice.id} added successfully!", "success")
        # Back to a blank form for the next invoice.
        return redirect(url_for("invoicing.add_invoice"))

    return _render_invoice_form(view_model)


@invoicing.route("/invoices/receivables")
@manager_required
def receivables():
    """List the invoices that have not been paid yet."""
    return _render_receivables(get_invoice_binder())


@invoicing.route("/invoices/<int:invoice_id>/edit", methods=["GET", "POST"])
@manager_required
def edit_invoice(invoice_id):
    """Edit an invoice and show the receivables once saved."""
    binder = get_invoice_binder()
    if request.method == "GET":
        view_model = InvoiceViewModel(
            InvoiceFormScope.EDIT, invoice=binder.get_invoice(invoice_id)
        )
        return _render_invoice_form(view_model)

    view_model = InvoiceViewModel(InvoiceFormScope.EDIT, invoice_id=invoice_id)
    if view_model.validate():
        binder.update_invoice(view_model.to_invoice())
        log_activity(f"Edited invoice {invoice_id}")
        # Rendered directly rather than redirected; refreshing the page
        # re-submits the edit.
        return _render_receivables(binder)

    return _render_invoice_form(view_model)


@invoicing.route("/invoices/<int:invoice_id>/paid", methods=["POST"])
@manager_required
def invoice_paid(invoice_id):
    """Mark an invoice as paid."""
    form = PayInvoiceForm()
    if not form.validate_on_submit():
        abort(400)
    get_invoice_binder().pay_invoice(invoice_id)
    log_activity(f"Marked invoice {invoice_id} paid")
    current_app.logger.info(
        "Invoice %s paid by %s", invoice_id, current_user.username
    )
    return redirect(url_for("invoicing.receivables"))
