"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for API endpoints.

    ``CORS_ORIGINS`` is a comma-separated allow-list; ``FRONTEND_URL`` is
    always appended so the OAuth frontend can call the API with credentials.
    A blank value or ``"*"`` allows any origin without credential support.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "") or ""
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]

    frontend = (app.config.get("FRONTEND_URL") or "").rstrip("/")
    if not wildcard and frontend and frontend not in origins:
        origins.append(frontend)

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
