"""Flask CLI commands for operating the mail configuration."""

from __future__ import annotations

import click
from flask import Flask
from werkzeug.security import generate_password_hash

from .mailer import send_test_email


def register_cli(app: Flask) -> None:
    """Attach the ``send-test-email`` and ``hash-password`` commands to ``app``."""

    @app.cli.command("send-test-email")
    @click.argument("recipient")
    def send_test_email_command(recipient: str) -> None:
        """Send the SMTP test message to RECIPIENT."""

        result = send_test_email(recipient)
        click.echo(result.title)
        for line in result.content:
            click.echo(line)
        if result.error:
            raise click.exceptions.Exit(1)

    @app.cli.command("hash-password")
    @click.password_option()
    def hash_password_command(password: str) -> None:
        """Print a password hash for ADMIN_PASSWORD_HASH."""

        click.echo(generate_password_hash(password))
