"""WSGI entry point for SMTP Config.

``flask --app flask_app run`` and WSGI servers pick up :data:`app`; running
the module directly starts the development server.
"""

from __future__ import annotations

import os
from typing import Final

from smtp_config import create_app

TRUE_VALUES: Final[set[str]] = {"1", "true", "t", "yes", "y", "on"}


def resolve_debug_flag(env_var: str = "FLASK_DEBUG") -> bool:
    """Return ``True`` only when ``env_var`` holds a recognised truthy value."""

    return (os.getenv(env_var) or "").strip().lower() in TRUE_VALUES


app = create_app()
app.config["DEBUG"] = resolve_debug_flag()


if __name__ == "__main__":
    app.run(debug=app.debug, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
