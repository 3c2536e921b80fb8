"""Authentication and token lifecycle endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request

from authsvc.api.deps import current_claims, json_response, require_auth
from authsvc.schemas import (
    AccessTokenSchema,
    ClaimsSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    SessionsQuerySchema,
    TokenInSchema,
    TokenMetadataSchema,
    TokenPairSchema,
    UserSchema,
)
from authsvc.services._shared.errors import TokenError
from authsvc.services.auth.dto import LoginIn, LogoutIn, RegisterIn
from authsvc.services.auth.service import AuthService
from authsvc.services.tokens.service import get_token_service

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
token_in_schema = TokenInSchema()
logout_schema = LogoutSchema()
sessions_query_schema = SessionsQuerySchema()

user_schema = UserSchema()
token_pair_schema = TokenPairSchema()
access_token_schema = AccessTokenSchema()
claims_schema = ClaimsSchema()
metadata_schema = TokenMetadataSchema(many=True)


def _auth_service() -> AuthService:
    return AuthService(get_token_service())


def _no_content() -> Response:
    return Response(status=204)


@bp.post("/register")
def register():
    """Register a new user and return the created representation."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    user = _auth_service().register(RegisterIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    payload = login_schema.load(request.get_json(silent=True) or {})
    pair = _auth_service().login(LoginIn(**payload))
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/refresh")
def refresh():
    """Exchange a refresh token for a new access token (no rotation)."""

    payload = refresh_schema.load(request.get_json(silent=True) or {})
    issued = get_token_service().refresh(
        payload["refresh_token"],
        device_id=payload["device_id"],
        client_id=payload["client_id"],
    )
    return json_response({"data": access_token_schema.dump(issued)})


@bp.post("/logout")
def logout():
    """Revoke the presented token; ``all_sessions`` revokes every token of its owner."""

    payload = logout_schema.load(request.get_json(silent=True) or {})
    _auth_service().logout(LogoutIn(**payload))
    return _no_content()


@bp.post("/revoke")
def revoke():
    """Revoke a single token."""

    payload = token_in_schema.load(request.get_json(silent=True) or {})
    get_token_service().revoke(payload["token"])
    return _no_content()


@bp.post("/validate")
def validate():
    """Report whether a token is currently valid, without failing the request."""

    payload = token_in_schema.load(request.get_json(silent=True) or {})
    try:
        claims = get_token_service().validate(payload["token"])
    except TokenError as exc:
        current_app.logger.info(
            "Token validation negative", extra={"reason": type(exc).__name__}
        )
        return json_response({"data": {"valid": False}})
    body = {
        "valid": True,
        "expires_at": claims.expires_at.isoformat(),
        "claims": claims_schema.dump(claims),
    }
    return json_response({"data": body})


@bp.get("/whoami")
@require_auth
def whoami():
    """Return the authenticated user profile."""

    user = _auth_service().get_user(current_claims().user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.get("/sessions")
@require_auth
def sessions():
    """List the caller's tokens, active ones only unless ``include_inactive`` is set."""

    query = sessions_query_schema.load(request.args)
    records = get_token_service().list_sessions(
        current_claims().user_id,
        active_only=not query["include_inactive"],
        kind=query["kind"],
    )
    return json_response({"data": metadata_schema.dump(records)})
