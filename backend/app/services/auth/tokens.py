"""Signed, time-limited admin tokens.

Thin layer over flask_jwt_extended: the subject claim carries the admin id,
an extra ``role`` claim carries the role, and the expiry comes from
``JWT_ACCESS_TOKEN_EXPIRES`` (10 hours). Requires an application context.
"""

from __future__ import annotations

from dataclasses import dataclass

import jwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from backend.app.errors import ExpiredToken, MalformedToken
from backend.app.services.auth.roles import Role

ROLE_CLAIM = "role"


@dataclass(frozen=True)
class TokenClaims:
    admin_id: str
    role: Role


def issue_token(admin_id: str, role: Role) -> str:
    role = Role.parse(role)
    return create_access_token(identity=str(admin_id), additional_claims={ROLE_CLAIM: role.value})


def verify_token(token: str) -> TokenClaims:
    """Decode ``token`` and return its claims.

    Raises:
        ExpiredToken: the token is past its expiry
        MalformedToken: bad signature, unparseable structure or bad claims
    """
    try:
        decoded = decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredToken() from exc
    except (jwt.InvalidTokenError, JWTExtendedException) as exc:
        raise MalformedToken() from exc

    admin_id = decoded.get("sub")
    if not isinstance(admin_id, str) or not admin_id:
        raise MalformedToken()
    try:
        role = Role.parse(decoded.get(ROLE_CLAIM))
    except ValueError as exc:
        raise MalformedToken() from exc
    return TokenClaims(admin_id=admin_id, role=role)
