"""Authentication and token Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from authsvc.services.tokens.dto import TokenKind

_OPTIONAL_ID = {"load_default": None, "allow_none": True, "validate": validate.Length(max=255)}

# ------------------------------- Inputs ------------------------------------ #


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    first_name = fields.String(load_default=None, validate=validate.Length(max=100))
    last_name = fields.String(load_default=None, validate=validate.Length(max=100))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    device_id = fields.String(**_OPTIONAL_ID)
    client_id = fields.String(**_OPTIONAL_ID)


class RefreshSchema(Schema):
    """Input payload exchanging a refresh token for an access token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))
    device_id = fields.String(**_OPTIONAL_ID)
    client_id = fields.String(**_OPTIONAL_ID)


class TokenInSchema(Schema):
    """Input payload carrying a single encoded token."""

    token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(TokenInSchema):
    all_sessions = fields.Boolean(load_default=False)


class SessionsQuerySchema(Schema):
    """Query string for listing the caller's tokens."""

    kind = fields.Enum(TokenKind, by_value=True, load_default=None)
    include_inactive = fields.Boolean(load_default=False)


# ------------------------------- Outputs ----------------------------------- #


class UserSchema(Schema):
    """Public representation of a user."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    role = fields.String(required=True)
    is_active = fields.Boolean(required=True)
    first_name = fields.String(allow_none=True)
    last_name = fields.String(allow_none=True)


class TokenPairSchema(Schema):
    """Response payload of a successful login."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)
    refresh_expires_in = fields.Integer(required=True)


class AccessTokenSchema(Schema):
    """Response payload of a successful refresh."""

    access_token = fields.String(attribute="token", required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)
    expires_at = fields.DateTime(required=True)


class ClaimsSchema(Schema):
    """Decoded claims of a valid token."""

    jti = fields.String(attribute="token_id")
    sub = fields.String(attribute="subject")
    user_id = fields.Integer()
    email = fields.String()
    role = fields.String(allow_none=True)
    token_type = fields.Enum(TokenKind, by_value=True, attribute="kind")
    iss = fields.String(attribute="issuer")
    iat = fields.DateTime(attribute="issued_at")
    nbf = fields.DateTime(attribute="not_before")
    exp = fields.DateTime(attribute="expires_at")
    device_id = fields.String(allow_none=True)
    client_id = fields.String(allow_none=True)


class TokenMetadataSchema(Schema):
    """Server-side state of one issued token."""

    id = fields.String()
    token_type = fields.Enum(TokenKind, by_value=True, attribute="kind")
    device_id = fields.String(allow_none=True)
    client_id = fields.String(allow_none=True)
    is_revoked = fields.Boolean()
    created_at = fields.DateTime()
    expires_at = fields.DateTime()
    last_used_at = fields.DateTime(allow_none=True)
