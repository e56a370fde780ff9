"""Utility helpers shared across the test-suite."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Any

from werkzeug.security import generate_password_hash

from entinvoicing import SESSION_OBJ_USER, db
from entinvoicing.models import Invoice, User, UserRole

MANAGER_USERNAME = "manager"
MANAGER_PASS = "managerpass"

_CSRF_RE = re.compile(r'name=["\']csrf_token["\'][^>]*value=["\']([^"\']+)["\']', re.IGNORECASE)


def extract_csrf_token(response: Any, *, required: bool = True) -> str:
    """Return the first CSRF token found in ``response`` HTML content."""

    if hasattr(response, "data"):
        html: str = response.data.decode("utf-8")
    elif isinstance(response, (bytes, bytearray)):
        html = response.decode("utf-8")
    else:
        html = str(response)
    match = _CSRF_RE.search(html)
    if not match:
        if required:
            raise AssertionError("CSRF token not found in response")
        return ""
    return match.group(1)


def login(client, username: str, password: str):
    """Helper to login a user in tests, respecting CSRF protection."""

    login_page = client.get("/auth/login")
    token = extract_csrf_token(login_page, required=False)
    form_data = {"username": username, "password": password}
    if token:
        form_data["csrf_token"] = token
    return client.post(
        "/auth/login",
        data=form_data,
        follow_redirects=True,
    )


def login_as(client, user_id: int) -> None:
    """Mark ``user_id`` as logged in without going through the login form."""

    with client.session_transaction() as session:
        session[SESSION_OBJ_USER] = str(user_id)
        session["_fresh"] = True


def create_user(app, username: str, password: str = "pass", role=UserRole.CLERK, active=True) -> int:
    with app.app_context():
        user = User(
            username=username,
            password=generate_password_hash(password),
            role=role,
            active=active,
        )
        db.session.add(user)
        db.session.commit()
        return user.id


def create_invoice(app, **fields) -> int:
    values = {
        "payer": "Acme",
        "amount": Decimal("100.00"),
        "date_issued": date(2026, 1, 15),
    }
    values.update(fields)
    with app.app_context():
        invoice = Invoice(**values)
        db.session.add(invoice)
        db.session.commit()
        return invoice.id


def invoice_form_data(**overrides) -> dict:
    data = {
        "payer": "Acme",
        "amount": "100.00",
        "date_issued": "2026-01-15",
        "date_due": "2026-02-15",
        "description": "Consulting",
    }
    data.update(overrides)
    return data
