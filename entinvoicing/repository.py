"""SQLAlchemy backed store for invoices."""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from entinvoicing.errors import InvoiceAlreadyPersistedError, InvoiceNotFoundError
from entinvoicing.models import Invoice

EDITABLE_FIELDS = ("payer", "amount", "description", "date_issued", "date_due")


class InvoiceRepository:
    """Persist invoices through a Flask-SQLAlchemy ``db`` handle.

    The session is scoped to the active application context, so a single
    repository instance can be shared by concurrent requests.
    """

    def __init__(self, db) -> None:
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.session.commit()
        except SQLAlchemyError:
            self.db.session.rollback()
            raise

    def add(self, invoice: Invoice) -> Invoice:
        if invoice.id is not None:
            raise InvoiceAlreadyPersistedError(invoice.id)
        self.db.session.add(invoice)
        self._commit()
        return invoice

    def get(self, invoice_id: int) -> Invoice:
        invoice = self.db.session.get(Invoice, invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def update(self, invoice: Invoice) -> Invoice:
        stored = self.get(invoice.id)
        for field in EDITABLE_FIELDS:
            setattr(stored, field, getattr(invoice, field))
        self._commit()
        return stored

    def pay(self, invoice_id: int) -> Invoice:
        invoice = self.get(invoice_id)
        if not invoice.paid:
            invoice.paid = True
            invoice.date_paid = datetime.utcnow()
            self._commit()
        return invoice

    def unpaid(self) -> List[Invoice]:
        return (
            Invoice.query.filter_by(paid=False)
            .order_by(Invoice.date_issued, Invoice.id)
            .all()
        )
