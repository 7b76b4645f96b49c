"""Versioned API blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair under ``base_prefix``.

    An empty relative prefix mounts the blueprint at the version root, so
    ``("/api/v1", [(health_bp, ""), (auth_bp, "/auth")])`` yields
    ``/api/v1/health`` and ``/api/v1/auth/...``.
    """
    root = base_prefix.rstrip("/")
    for bp, rel_prefix in entries:
        rel = rel_prefix.strip("/")
        prefix = f"{root}/{rel}" if rel else root
        app.register_blueprint(bp, url_prefix=prefix if prefix.startswith("/") else f"/{prefix}")


def init_app(app: Flask) -> None:
    """Register every API version on ``app``."""

    from wishlist.api.v1 import API_VERSION as V1
    from wishlist.api.v1 import REGISTRY as V1_REGISTRY

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
