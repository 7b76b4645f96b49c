"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

import logging

from flask import Flask

from wishlist.core.config import BaseConfig, get_config
from wishlist.core.logger import configure_logging, init_app as init_logging
from wishlist.services._shared.ports import RefreshTokenStore

log = logging.getLogger(__name__)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    refresh_store: RefreshTokenStore | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object or import path; defaults to ``APP_ENV``.
    :param refresh_store: Overrides the refresh-token store picked from config.
    :raises ConfigurationError: When the signing secret is missing or too short.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Fail before wiring anything else when the secret is unusable.
    from wishlist.infra.jwt.pyjwt_token_provider import JWTTokenProvider

    token_provider = JWTTokenProvider(
        app.config.get("JWT_SECRET"),
        access_expires=app.config.get("JWT_ACCESS_EXPIRY", "15m"),
        refresh_expires=app.config.get("JWT_REFRESH_EXPIRY", "30d"),
    )

    from wishlist.core import proxy

    proxy.init_app(app)

    from wishlist.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from wishlist.core import cors

    cors.init_app(app)

    from wishlist.core import oauth

    oauth.init_app(app)

    _init_services(app, token_provider=token_provider, refresh_store=refresh_store)

    from wishlist.api import init_app as init_api

    init_api(app)

    from wishlist.core import errors

    errors.init_app(app)

    from wishlist import cli as app_cli

    app_cli.init_app(app)

    return app


def _init_services(
    app: Flask,
    *,
    token_provider,
    refresh_store: RefreshTokenStore | None,
) -> None:
    """Build one :class:`AuthService` per app and publish it on ``app.extensions``."""
    from wishlist.api.deps import AUTH_SERVICE_KEY, TOKEN_PROVIDER_KEY
    from wishlist.core.extensions import get_redis
    from wishlist.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
    from wishlist.infra.sql.sql_refresh_token_store import SQLRefreshTokenStore
    from wishlist.services.auth.service import AuthService

    if refresh_store is None:
        if app.config.get("REDIS_URL"):
            refresh_store = RedisRefreshTokenStore(get_redis())
        else:
            refresh_store = SQLRefreshTokenStore()
    log.info("Refresh-token store: %s", type(refresh_store).__name__)

    app.extensions[TOKEN_PROVIDER_KEY] = token_provider
    app.extensions[AUTH_SERVICE_KEY] = AuthService(
        token_provider=token_provider,
        refresh_store=refresh_store,
    )
