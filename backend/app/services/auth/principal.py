"""Resolve the authenticated admin behind a bearer token.

A ``Principal`` is only ever produced by ``resolve_principal``: the token is
verified, then the admin is re-read from the database so that deleted admins
lose access even while their token is still valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from flask import g

from backend.app.errors import AdminNotFound, MalformedToken, Unauthenticated
from backend.app.repositories import admins_repo
from backend.app.services.auth.roles import Role
from backend.app.services.auth.tokens import verify_token

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Principal:
    id: str
    role: Role
    email: str
    name: str

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Principal":
        return cls(
            id=str(doc["_id"]),
            role=Role.parse(doc.get("role")),
            email=doc.get("email") or "",
            name=doc.get("name") or "",
        )


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization`` header value."""
    if not header_value:
        return None
    token = header_value.replace(BEARER_PREFIX, "", 1).strip()
    return token or None


def resolve_principal(token: Optional[str]) -> Principal:
    """Verify ``token`` and load the admin it names.

    Raises:
        Unauthenticated: no token supplied
        ExpiredToken / MalformedToken: token failed verification
        AdminNotFound: token is valid but the admin no longer exists
    """
    if not token:
        raise Unauthenticated()

    claims = verify_token(token)

    admin = admins_repo.find_public_by_id(claims.admin_id)
    if not admin:
        logger.info("Token presented for missing admin", extra={"admin_id": claims.admin_id})
        raise AdminNotFound()

    try:
        return Principal.from_document(admin)
    except ValueError as exc:
        logger.warning("Admin %s has an unknown role %r", claims.admin_id, admin.get("role"))
        raise MalformedToken(details="Admin role is not recognised") from exc


def set_current_principal(principal: Principal) -> None:
    g.principal = principal


def current_principal() -> Optional[Principal]:
    return g.get("principal")
