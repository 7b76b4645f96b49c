from __future__ import annotations

import pytest

from wishlist import create_app
from wishlist.api.deps import AUTH_SERVICE_KEY, TOKEN_PROVIDER_KEY
from wishlist.core.config import ConfigurationError, TestingConfig
from wishlist.infra.sql.sql_refresh_token_store import SQLRefreshTokenStore
from wishlist.services._shared.ports import InMemoryRefreshTokenStore


class ShortSecretConfig(TestingConfig):
    JWT_SECRET = "too-short"


class MissingSecretConfig(TestingConfig):
    JWT_SECRET = None


@pytest.mark.parametrize("config", [ShortSecretConfig, MissingSecretConfig])
def test_refuses_to_start_without_a_usable_secret(config):
    with pytest.raises(ConfigurationError):
        create_app(config)


def test_wires_auth_service(app):
    service = app.extensions[AUTH_SERVICE_KEY]
    assert service.tokens is app.extensions[TOKEN_PROVIDER_KEY]
    assert isinstance(service.refresh_store, SQLRefreshTokenStore)


def test_refresh_store_can_be_injected():
    store = InMemoryRefreshTokenStore()
    other = create_app(TestingConfig, refresh_store=store)
    assert other.extensions[AUTH_SERVICE_KEY].refresh_store is store
