"""Role based access control for views."""

from __future__ import annotations

from functools import wraps

from flask import current_app, flash, redirect, url_for
from flask_login import current_user

from entinvoicing import TEMP_OBJ_ERRMSG
from entinvoicing.models import UserRole

UNAUTHORIZED_MESSAGE = "Unauthorized access by {username}. The user is not a {role}."


def role_required(role: UserRole):
    """Only let users holding ``role`` reach the decorated view.

    Anonymous visitors get the regular Flask-Login treatment.  Logged in
    users with another role are sent back to the login page with an error
    message naming them.
    """

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return current_app.login_manager.unauthorized()
            if current_user.role != role:
                message = UNAUTHORIZED_MESSAGE.format(
                    username=current_user.username, role=role.value
                )
                current_app.logger.warning(message)
                flash(message, TEMP_OBJ_ERRMSG)
                return redirect(url_for("auth.login"))
            return view(*args, **kwargs)

        return wrapped

    return decorator


manager_required = role_required(UserRole.MANAGER)
