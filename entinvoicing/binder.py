"""Invoice binder: the single access point the controller uses for invoices."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from flask import current_app

from entinvoicing import CACHE_OBJ_INVBINDER
from entinvoicing.errors import InvoiceAlreadyPersistedError
from entinvoicing.models import Invoice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceSummary:
    """Read-only row of the receivables list."""

    id: int
    payer: str
    amount: Decimal
    date_issued: date
    date_due: Optional[date]
    description: Optional[str] = None
    date_created: Optional[datetime] = None

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceSummary":
        return cls(
            id=invoice.id,
            payer=invoice.payer,
            amount=invoice.amount,
            date_issued=invoice.date_issued,
            date_due=invoice.date_due,
            description=invoice.description,
            date_created=invoice.date_created,
        )

    def is_overdue(self, today: date) -> bool:
        """Whether the due date lies before ``today``, the caller's local date."""
        if self.date_due is None:
            return False
        return self.date_due < today


class InvoiceBinder:
    """Facade over an invoice repository.

    The binder keeps no invoice data of its own; every call is forwarded to
    the repository, which stays the single source of truth.  Repository
    errors are not handled here.
    """

    def __init__(self, repository) -> None:
        self.repository = repository

    def add_invoice(self, invoice: Invoice) -> None:
        if invoice.id is not None:
            raise InvoiceAlreadyPersistedError(invoice.id)
        self.repository.add(invoice)
        logger.info("Added invoice %s for %s", invoice.id, invoice.payer)

    def get_invoice(self, invoice_id: int) -> Invoice:
        return self.repository.get(invoice_id)

    def update_invoice(self, invoice: Invoice) -> None:
        self.repository.update(invoice)
        logger.info("Updated invoice %s", invoice.id)

    def pay_invoice(self, invoice_id: int) -> None:
        self.repository.pay(invoice_id)
        logger.info("Invoice %s marked paid", invoice_id)

    def receivables(self) -> List[InvoiceSummary]:
        """Return the outstanding (unpaid) invoices."""
        return [
            InvoiceSummary.from_invoice(invoice)
            for invoice in self.repository.unpaid()
        ]


def get_invoice_binder() -> InvoiceBinder:
    """Return the binder cached for the current app, creating it on a miss."""
    app = current_app._get_current_object()

    def _create() -> InvoiceBinder:
        logger.info("Creating invoice binder")
        return InvoiceBinder(app.extensions["invoice_repository"])

    cache = app.extensions["process_cache"]
    return cache.get_or_create(
        CACHE_OBJ_INVBINDER,
        _create,
        timeout=app.config["INVOICE_BINDER_TIMEOUT"],
    )
