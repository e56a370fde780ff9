"""Exceptions raised by the invoice repository and binder."""


class InvoiceNotFoundError(LookupError):
    """No invoice is stored under the requested identifier."""

    def __init__(self, invoice_id):
        super().__init__(f"Invoice {invoice_id} not found")
        self.invoice_id = invoice_id


class InvoiceAlreadyPersistedError(ValueError):
    """A new invoice was expected but the given one already has an id."""

    def __init__(self, invoice_id):
        super().__init__(f"Invoice {invoice_id} has already been saved")
        self.invoice_id = invoice_id
