"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

OAUTH_PROVIDERS = ("google", "facebook", "github")


class RefreshTokenSchema(Schema):
    """Body of ``/auth/refresh`` and ``/auth/logout``.

    The token is optional and untyped at this layer: the service reports a
    missing token as a 400 and a non-string one as an invalid token (401),
    never as a validation error.
    """

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.Raw(data_key="refreshToken", load_default=None, allow_none=True)


class AccessTokenSchema(Schema):
    """Response payload of a successful refresh."""

    access_token = fields.String(data_key="accessToken", required=True)


class MeSchema(Schema):
    """Identity attached to the request by the bearer token."""

    id = fields.String(attribute="user_id", required=True)
    email = fields.String(allow_none=True)
    provider = fields.String(allow_none=True)


class EmailLoginQuerySchema(Schema):
    """Query string of ``/auth/test-login``."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None, validate=validate.Length(max=254))
    provider = fields.String(load_default="google", validate=validate.OneOf(OAUTH_PROVIDERS))
