from __future__ import annotations

import os
import sys

import pytest

from entinvoicing import create_app, create_manager_user, db

# Ensure the package is importable when tests change directories
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, BASE_DIR)


@pytest.fixture
def app(tmp_path):
    os.environ.setdefault("SECRET_KEY", "testsecret")
    os.environ.setdefault("MANAGER_USERNAME", "manager")
    os.environ.setdefault("MANAGER_PASS", "managerpass")

    # Ensure a clean database for each test within the temp directory
    db_path = tmp_path / "invoicing.db"
    app = create_app(
        ["--demo"],
        config={
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "RATELIMIT_ENABLED": False,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        },
    )

    with app.app_context():
        db.create_all()
        create_manager_user()

        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
