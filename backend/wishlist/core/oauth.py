"""Authlib OAuth client registry for the supported identity providers."""

from __future__ import annotations

import logging
from typing import Any

from authlib.integrations.flask_client import OAuth
from flask import Flask, current_app

log = logging.getLogger(__name__)

EXTENSION_KEY = "authlib.integrations.flask_client"

# Provider endpoints; credentials come from ``<NAME>_CLIENT_ID`` / ``_SECRET``.
PROVIDERS: dict[str, dict[str, Any]] = {
    "google": {
        "server_metadata_url": "https://accounts.google.com/.well-known/openid-configuration",
        "client_kwargs": {"scope": "openid email profile"},
    },
    "facebook": {
        "access_token_url": "https://graph.facebook.com/v19.0/oauth/access_token",
        "authorize_url": "https://www.facebook.com/v19.0/dialog/oauth",
        "api_base_url": "https://graph.facebook.com/v19.0/",
        "client_kwargs": {"scope": "email public_profile"},
    },
    "github": {
        "access_token_url": "https://github.com/login/oauth/access_token",
        "authorize_url": "https://github.com/login/oauth/authorize",
        "api_base_url": "https://api.github.com/",
        "client_kwargs": {"scope": "read:user user:email"},
    },
}


def init_app(app: Flask) -> OAuth:
    """Create an OAuth registry bound to ``app`` and register configured providers.

    A provider is registered only when both its client id and secret are set;
    the others are logged and their routes answer 404.
    """
    oauth = OAuth(app)
    for name, endpoints in PROVIDERS.items():
        client_id = app.config.get(f"{name.upper()}_CLIENT_ID")
        client_secret = app.config.get(f"{name.upper()}_CLIENT_SECRET")
        if not (client_id and client_secret):
            log.warning("OAuth provider not configured - missing credentials", extra={"provider": name})
            continue
        oauth.register(name=name, client_id=client_id, client_secret=client_secret, **endpoints)
    return oauth


def get_client(name: str) -> Any | None:
    """Return the registered Authlib client for ``name`` or ``None``."""
    oauth: OAuth | None = current_app.extensions.get(EXTENSION_KEY)
    if oauth is None or name not in PROVIDERS:
        return None
    return oauth.create_client(name)
