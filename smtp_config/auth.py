"""Sign-in for the operator who may send SMTP test messages.

The application has a single operator account described by the
``ADMIN_EMAIL`` and ``ADMIN_PASSWORD_HASH`` settings. There is no user
database:

- ``/login`` checks the submitted credentials against those settings and
  starts a session via :func:`flask_login.login_user`.
- ``/logout`` ends the session with :func:`flask_login.logout_user`.
"""

from __future__ import annotations

from typing import Optional, Union

from flask import (
    Blueprint,
    Response,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_limiter.util import get_remote_address
from flask_login import UserMixin, login_required, login_user, logout_user
from flask_wtf import FlaskForm
from werkzeug.security import check_password_hash
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired

from . import limiter

auth_bp = Blueprint("auth", __name__)


class OperatorUser(UserMixin):
    """Session identity for the configured operator."""

    def __init__(self, email: str) -> None:
        self.id = email
        self.email = email


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired()])
    password = PasswordField("Password", validators=[DataRequired()])


def _operator_email() -> str:
    return (current_app.config.get("ADMIN_EMAIL") or "").strip().lower()


def load_operator(user_id: Optional[str]) -> Optional[OperatorUser]:
    """Return the operator for ``user_id`` or ``None`` if it does not match.

    Args:
        user_id: Identifier stored in the session by :mod:`flask_login`.

    Returns:
        Optional[OperatorUser]: The operator when ``user_id`` equals the
        configured ``ADMIN_EMAIL``; ``None`` otherwise so stale sessions are
        rejected after the setting changes.
    """

    operator = _operator_email()
    if not operator or (user_id or "").strip().lower() != operator:
        return None
    return OperatorUser(operator)


def check_operator_credentials(email: str, password: str) -> Optional[OperatorUser]:
    """Validate submitted credentials against the configured operator.

    Args:
        email: Address typed on the login form.
        password: Plain-text password typed on the login form.

    Returns:
        Optional[OperatorUser]: The operator on success, ``None`` when either
        value is wrong or the operator is not configured.

    External Dependencies:
        * Uses :func:`werkzeug.security.check_password_hash` against
          ``ADMIN_PASSWORD_HASH``.
    """

    operator = _operator_email()
    password_hash = current_app.config.get("ADMIN_PASSWORD_HASH") or ""
    if not operator or not password_hash:
        return None
    if (email or "").strip().lower() != operator:
        return None
    if not check_password_hash(password_hash, password or ""):
        return None
    return OperatorUser(operator)


def _login_rate_limit_value() -> str:
    """Return the configured rate limit string for :func:`login` requests."""

    value = current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    return str(value or "5 per minute")


def _login_rate_limit_key() -> str:
    """Scope login attempts by remote IP and submitted email address."""

    base_ip = request.remote_addr or get_remote_address()
    candidate = (request.form.get("email") or "").strip().lower()
    if candidate:
        return f"{base_ip}:{candidate}"
    return base_ip


@auth_bp.route("/login", methods=["GET", "POST"])
@limiter.limit(
    _login_rate_limit_value, key_func=_login_rate_limit_key, methods=["POST"]
)
def login() -> Union[str, Response]:
    """Authenticate the operator and start a session.

    Returns:
        Renders ``login.html`` on GET or failed login.
        Redirects to ``admin.smtp_settings`` on success.
    """
    form = LoginForm()
    if form.validate_on_submit():
        user = check_operator_credentials(form.email.data, form.password.data)
        if user is not None:
            login_user(user)
            current_app.logger.info("Operator %s signed in.", user.email)
            return redirect(url_for("admin.smtp_settings"))
        current_app.logger.warning(
            "Failed sign-in attempt for %r from %s.",
            form.email.data,
            request.remote_addr,
        )
        flash("Invalid credentials", "danger")
    return render_template("login.html", form=form)


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout() -> Response:
    logout_user()
    flash("Signed out.", "info")
    return redirect(url_for("auth.login"))
