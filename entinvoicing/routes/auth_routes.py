from urllib.parse import urlparse

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash

from entinvoicing import TEMP_OBJ_ERRMSG, limiter
from entinvoicing.forms import LoginForm
from entinvoicing.models import User
from entinvoicing.utils.activity import log_activity

auth = Blueprint("auth", __name__)


def _safe_next_url(target):
    """Return ``target`` only when it points back at this host."""
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc:
        return None
    return target


def _landing_page(user):
    if user.is_manager:
        return url_for("invoicing.receivables")
    return url_for("invoicing.add_invoice")


@auth.route("/login", methods=["GET", "POST"])
@limiter.limit("10 per minute", methods=["POST"])
def login():
    """Authenticate a user and start their session."""
    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(username=form.username.data).first()

        if not user or not check_password_hash(user.password, form.password.data):
            flash("Please check your login details and try again.", TEMP_OBJ_ERRMSG)
            return redirect(url_for("auth.login"))
        elif not user.active:
            flash("Please contact system admin to activate account.", TEMP_OBJ_ERRMSG)
            return redirect(url_for("auth.login"))

        login_user(user)
        log_activity("Logged in", user.id)
        next_url = _safe_next_url(request.args.get("next"))
        return redirect(next_url or _landing_page(user))

    return render_template("auth/login.html", form=form)


@auth.route("/logout")
@login_required
def logout():
    """Log the current user out."""
    user_id = current_user.id
    logout_user()
    log_activity("Logged out", user_id)
    return redirect(url_for("auth.login"))
