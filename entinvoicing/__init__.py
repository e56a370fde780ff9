import logging
import os
import secrets
import sys
from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from flask import Flask, Response, current_app, g, render_template, request
from flask_bootstrap import Bootstrap
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError
from werkzeug.security import generate_password_hash

load_dotenv()
db = SQLAlchemy()
login_manager = LoginManager()
login_manager.login_view = "auth.login"
storage_uri = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
limiter = Limiter(key_func=get_remote_address, storage_uri=storage_uri)

# Process cache key holding the shared invoice binder.
CACHE_OBJ_INVBINDER = "InvoiceBinderCache"
# Flask-Login keeps the authenticated user's id under this session key.
SESSION_OBJ_USER = "_user_id"
# Flash category of the error message shown on the login page.
TEMP_OBJ_ERRMSG = "danger"

DEFAULT_INVOICE_BINDER_TIMEOUT = 20 * 60


def _get_bool_env(var_name: str, default: bool = False) -> bool:
    """Return a boolean environment variable value."""

    value = os.getenv(var_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_CSP_TEMPLATE = (
    "default-src 'self'; "
    "img-src 'self' data:; "
    "style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'nonce-{nonce}'; "
    "font-src 'self' data:; "
    "frame-ancestors 'self'; "
    "form-action 'self'; "
    "object-src 'none'; "
    "base-uri 'self'"
)
NAV_LINKS = {
    "invoicing.add_invoice": "Add Invoice",
    "invoicing.receivables": "Receivables",
}


@login_manager.user_loader
def load_user(user_id):
    """Retrieve a user by ID for Flask-Login."""
    from entinvoicing.models import User

    return db.session.get(User, int(user_id))


def create_manager_user():
    """Ensure a manager account exists for the application."""
    from entinvoicing.models import User, UserRole

    db.create_all()

    manager_exists = User.query.filter_by(role=UserRole.MANAGER).first()
    if not manager_exists:
        username = os.getenv("MANAGER_USERNAME", "manager")
        raw_password = os.getenv("MANAGER_PASS")
        if raw_password is None:
            raise RuntimeError("MANAGER_PASS environment variable not set")
        manager = User(
            username=username,
            password=generate_password_hash(raw_password),
            role=UserRole.MANAGER,
            active=True,
        )
        db.session.add(manager)
        db.session.commit()
        logging.getLogger(__name__).info("Manager user %s created", username)


def configured_timezone(app):
    """Return the ``DEFAULT_TIMEZONE`` of ``app``, falling back to UTC."""
    try:
        return ZoneInfo(app.config.get("DEFAULT_TIMEZONE") or "UTC")
    except ZoneInfoNotFoundError:
        return ZoneInfo("UTC")


def local_today():
    """Return the current date in the application's time zone."""
    return datetime.now(configured_timezone(current_app)).date()


def _database_uri(base_dir: str) -> str:
    # DATABASE_PATH may point at a file or at a directory (e.g. a mounted
    # volume), in which case the SQLite file is stored inside it.
    default_db_path = os.path.join(base_dir, "invoicing.db")
    db_path = os.getenv("DATABASE_PATH", default_db_path)
    if os.path.isdir(db_path):
        db_path = os.path.join(db_path, "invoicing.db")
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return f"sqlite:///{os.path.abspath(db_path)}"


def create_app(args: list, config: dict | None = None):
    """Application factory used by Flask.

    ``config`` overrides values read from the environment; the test-suite
    uses it to point the app at a temporary database.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    default_secure_cookies = "--demo" not in args
    session_cookie_secure = _get_bool_env(
        "SESSION_COOKIE_SECURE", default=default_secure_cookies
    )
    app.config.update(
        SESSION_COOKIE_SECURE=session_cookie_secure,
        REMEMBER_COOKIE_SECURE=session_cookie_secure,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(minutes=30),
        ENFORCE_HTTPS=_get_bool_env("ENFORCE_HTTPS", default=False),
        INVOICE_BINDER_TIMEOUT=int(
            os.getenv(
                "INVOICE_BINDER_TIMEOUT", str(DEFAULT_INVOICE_BINDER_TIMEOUT)
            )
        ),
        DEFAULT_TIMEZONE=os.getenv("DEFAULT_TIMEZONE", "UTC"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        BOOTSTRAP_SERVE_LOCAL=True,
        DEMO="--demo" in args,
    )
    app.config["SQLALCHEMY_DATABASE_URI"] = _database_uri(os.getcwd())
    if config:
        app.config.update(config)
    if app.config.get("TESTING"):
        app.config.setdefault("RATELIMIT_ENABLED", False)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    from flask_migrate import Migrate

    Migrate(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    Bootstrap(app)

    from entinvoicing.repository import InvoiceRepository
    from entinvoicing.utils.cache import ProcessCache

    app.extensions["process_cache"] = ProcessCache(
        default_timeout=app.config["INVOICE_BINDER_TIMEOUT"]
    )
    app.extensions["invoice_repository"] = InvoiceRepository(db)

    def format_datetime(value, fmt="%Y-%m-%d %H:%M"):
        if value is None:
            return ""
        if sys.platform.startswith("win"):
            fmt = fmt.replace("%-", "%#")
        # Calendar dates (issue/due dates) carry no time zone.
        if isinstance(value, date) and not isinstance(value, datetime):
            return value.strftime(fmt)
        tz = configured_timezone(app)
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt_timezone.utc)
        return value.astimezone(tz).strftime(fmt)

    app.jinja_env.filters["format_datetime"] = format_datetime

    @app.context_processor
    def inject_nav_links():
        """Provide navigation labels to templates."""
        return dict(NAV_LINKS=NAV_LINKS, TEMP_OBJ_ERRMSG=TEMP_OBJ_ERRMSG)

    @app.before_request
    def set_csp_nonce():
        """Generate a nonce for inline scripts allowed by the CSP."""

        g.csp_nonce = secrets.token_urlsafe(16)

    @app.after_request
    def apply_security_headers(response):
        """Attach standard security headers to every response."""
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.is_secure or app.config.get("ENFORCE_HTTPS", False):
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        nonce = getattr(g, "csp_nonce", "")
        if not nonce:
            nonce = secrets.token_urlsafe(16)
            g.csp_nonce = nonce
        csp_template = app.config.get(
            "CONTENT_SECURITY_POLICY", DEFAULT_CSP_TEMPLATE
        )
        response.headers.setdefault(
            "Content-Security-Policy", csp_template.format(nonce=nonce)
        )
        return response

    @app.context_processor
    def inject_csp_nonce():
        """Expose the CSP nonce to templates for inline scripts."""

        return {"csp_nonce": getattr(g, "csp_nonce", "")}

    @app.before_request
    def block_http_options():
        """Return a 405 for HTTP OPTIONS requests to reduce information leakage."""
        if request.method == "OPTIONS":
            return Response(status=405)

    with app.app_context():
        # Create the schema on start so the app runs even when migrations
        # have not been applied yet.
        from . import models  # noqa: F401

        db.create_all()

        from entinvoicing.routes.auth_routes import auth
        from entinvoicing.routes.invoicing_routes import invoicing
        from entinvoicing.routes.main_routes import main

        app.register_blueprint(auth, url_prefix="/auth")
        app.register_blueprint(main)
        app.register_blueprint(invoicing)

        CSRFProtect(app)

        @app.errorhandler(CSRFError)
        def handle_csrf_error(error):
            """Render a helpful page when CSRF validation fails."""
            return (
                render_template(
                    "errors/csrf_error.html",
                    reason=error.description,
                ),
                400,
            )

        from entinvoicing.errors import InvoiceNotFoundError

        @app.errorhandler(InvoiceNotFoundError)
        def handle_invoice_not_found(error):
            """Answer unknown invoice ids with a 404 page."""
            app.logger.info("Invoice %s not found", error.invoice_id)
            return (
                render_template(
                    "errors/not_found.html", invoice_id=error.invoice_id
                ),
                404,
            )

    return app
