"""SMTP Config Flask application factory."""

from __future__ import annotations

from typing import Union

from flask import Flask, redirect, url_for
from flask.typing import ResponseReturnValue
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from .config import TransportConfig

login_manager = LoginManager()
login_manager.login_view = "auth.login"
login_manager.login_message_category = "info"
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)


@login_manager.user_loader
def load_user(user_id):
    from .auth import load_operator

    return load_operator(user_id)


def create_app(config_class: Union[str, type] = "smtp_config.config.Config") -> Flask:
    """Application factory for the SMTP test tool.

    Args:
        config_class: Import path or class used to configure the app.

    Returns:
        A fully initialized :class:`~flask.Flask` application. The ``SMTP_*``
        settings are frozen into a :class:`TransportConfig` stored on
        ``app.config['SMTP_TRANSPORT']``.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    transport = TransportConfig.from_mapping(app.config)
    app.config["SMTP_TRANSPORT"] = transport

    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    if not transport.host:
        app.logger.info("SMTP_HOST is not set; outgoing mail uses the local relay.")
    if not app.config.get("ADMIN_EMAIL") or not app.config.get("ADMIN_PASSWORD_HASH"):
        app.logger.warning(
            "ADMIN_EMAIL or ADMIN_PASSWORD_HASH is not set; nobody can sign in "
            "to the SMTP test page."
        )

    # Blueprints
    from .admin import admin_bp
    from .auth import auth_bp
    from .cli import register_cli

    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")
    register_cli(app)

    @app.route("/", methods=["GET"])
    def index() -> ResponseReturnValue:
        return redirect(url_for("admin.smtp_settings"))

    return app


__all__ = ["create_app", "csrf", "limiter", "login_manager"]
