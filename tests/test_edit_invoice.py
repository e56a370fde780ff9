from datetime import date
from decimal import Decimal

from entinvoicing import db
from entinvoicing.models import ActivityLog, Invoice, UserRole
from tests.utils import create_invoice, create_user, invoice_form_data, login_as


def _login_manager(client, app):
    manager_id = create_user(app, "boss", role=UserRole.MANAGER)
    login_as(client, manager_id)
    return manager_id


def test_edit_form_is_prefilled_with_stored_invoice(client, app):
    invoice_id = create_invoice(
        app,
        payer="Stark Industries",
        amount=Decimal("2500.00"),
        description="Arc reactor maintenance",
        date_issued=date(2026, 4, 1),
        date_due=date(2026, 5, 1),
    )
    _login_manager(client, app)

    resp = client.get(f"/invoices/{invoice_id}/edit")
    assert resp.status_code == 200
    assert b'data-scope="edit"' in resp.data
    assert f"Edit Invoice #{invoice_id}".encode() in resp.data
    assert f'value="{invoice_id}"'.encode() in resp.data
    assert b'value="Stark Industries"' in resp.data
    assert b'value="2500.00"' in resp.data
    assert b'value="2026-04-01"' in resp.data
    assert b'value="2026-05-01"' in resp.data
    assert b"Arc reactor maintenance" in resp.data


def test_edit_unknown_invoice_is_not_found(client, app):
    _login_manager(client, app)
    resp = client.get("/invoices/999/edit")
    assert resp.status_code == 404
    assert b"There is no invoice #999." in resp.data


def test_edit_saves_and_renders_receivables(client, app):
    invoice_id = create_invoice(app)
    manager_id = _login_manager(client, app)

    resp = client.post(
        f"/invoices/{invoice_id}/edit",
        data=invoice_form_data(
            invoice_id=str(invoice_id), payer="Acme Corp", amount="120.50"
        ),
    )
    # The receivables page is rendered in place, not redirected to.
    assert resp.status_code == 200
    assert b"<h1>Receivables</h1>" in resp.data
    assert b"Acme Corp" in resp.data

    with app.app_context():
        invoice = db.session.get(Invoice, invoice_id)
        assert invoice.payer == "Acme Corp"
        assert invoice.amount == Decimal("120.50")
        assert invoice.date_due == date(2026, 2, 15)
        assert invoice.description == "Consulting"
        assert not invoice.paid
        log = ActivityLog.query.filter_by(
            activity=f"Edited invoice {invoice_id}"
        ).one()
        assert log.user_id == manager_id


def test_edit_does_not_touch_paid_status(client, app):
    invoice_id = create_invoice(app, paid=True)
    _login_manager(client, app)

    resp = client.post(
        f"/invoices/{invoice_id}/edit",
        data=invoice_form_data(payer="Still Paid"),
    )
    assert resp.status_code == 200

    with app.app_context():
        invoice = db.session.get(Invoice, invoice_id)
        assert invoice.payer == "Still Paid"
        assert invoice.paid


def test_invalid_edit_rerenders_edit_form(client, app):
    invoice_id = create_invoice(app)
    _login_manager(client, app)

    resp = client.post(
        f"/invoices/{invoice_id}/edit",
        data=invoice_form_data(payer="Renamed", amount="not money"),
    )
    assert resp.status_code == 200
    assert b'data-scope="edit"' in resp.data
    assert b'value="Renamed"' in resp.data
    assert b'value="not money"' in resp.data

    with app.app_context():
        assert db.session.get(Invoice, invoice_id).payer == "Acme"


def test_edit_of_missing_invoice_is_not_found(client, app):
    _login_manager(client, app)
    resp = client.post("/invoices/404/edit", data=invoice_form_data())
    assert resp.status_code == 404
