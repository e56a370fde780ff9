from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from entinvoicing import local_today
from entinvoicing.models import UserRole
from tests.utils import create_invoice, create_user, login_as


def _login_manager(client, app):
    manager_id = create_user(app, "boss", role=UserRole.MANAGER)
    login_as(client, manager_id)


def test_receivables_lists_only_unpaid_invoices(client, app):
    unpaid_id = create_invoice(app, payer="Initech")
    paid_id = create_invoice(app, payer="Umbrella", paid=True)
    _login_manager(client, app)

    resp = client.get("/invoices/receivables")
    assert resp.status_code == 200
    assert f'id="invoice-{unpaid_id}"'.encode() in resp.data
    assert b"Initech" in resp.data
    assert f'id="invoice-{paid_id}"'.encode() not in resp.data
    assert b"Umbrella" not in resp.data


def test_receivables_totals_outstanding_amounts(client, app):
    create_invoice(app, amount=Decimal("100.00"))
    create_invoice(app, amount=Decimal("50.25"))
    _login_manager(client, app)

    resp = client.get("/invoices/receivables")
    assert b"150.25" in resp.data


def test_receivables_flags_overdue_invoices(client, app):
    yesterday = datetime.now(timezone.utc).date() - timedelta(days=1)
    overdue_id = create_invoice(
        app, date_issued=yesterday - timedelta(days=30), date_due=yesterday
    )
    _login_manager(client, app)

    resp = client.get("/invoices/receivables")
    assert f'id="invoice-{overdue_id}" class="danger"'.encode() in resp.data


def test_receivables_empty_state(client, app):
    _login_manager(client, app)
    resp = client.get("/invoices/receivables")
    assert resp.status_code == 200
    assert b"No outstanding invoices." in resp.data


def test_overdue_follows_configured_timezone(client, app):
    app.config["DEFAULT_TIMEZONE"] = "Pacific/Kiritimati"
    today_there = datetime.now(ZoneInfo("Pacific/Kiritimati")).date()
    due_yesterday_id = create_invoice(
        app,
        date_issued=today_there - timedelta(days=10),
        date_due=today_there - timedelta(days=1),
    )
    due_today_id = create_invoice(
        app, date_issued=today_there - timedelta(days=10), date_due=today_there
    )
    _login_manager(client, app)

    resp = client.get("/invoices/receivables")
    assert f'id="invoice-{due_yesterday_id}" class="danger"'.encode() in resp.data
    assert f'id="invoice-{due_today_id}" class=""'.encode() in resp.data


def test_local_today_uses_configured_timezone(app):
    app.config["DEFAULT_TIMEZONE"] = "Etc/GMT+12"
    with app.test_request_context():
        expected = datetime.now(ZoneInfo("Etc/GMT+12")).date()
        assert local_today() == expected


def test_local_today_falls_back_to_utc_for_unknown_zone(app):
    app.config["DEFAULT_TIMEZONE"] = "Nowhere/Special"
    with app.test_request_context():
        assert local_today() == datetime.now(timezone.utc).date()
