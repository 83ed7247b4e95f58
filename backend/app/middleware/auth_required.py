"""Authentication and RBAC decorators for API endpoints.

``login_required`` resolves the bearer token into a principal and attaches it
to the request; ``roles_required`` additionally runs the role gate with the
route's statically declared roles. Both answer with the standard envelope
before the route handler runs when the request is not allowed through.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable

from flask import request

from backend.app.errors import ApiError, Forbidden
from backend.app.responses import error_response, format_response
from backend.app.services.auth.principal import (
    bearer_token,
    resolve_principal,
    set_current_principal,
)
from backend.app.services.auth.roles import Role, authorize

logger = logging.getLogger(__name__)


def _authenticate():
    """Attach the principal to the request; return an error response or None."""
    try:
        principal = resolve_principal(bearer_token(request.headers.get("Authorization")))
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error authenticating request")
        return format_response(500, "Authentication failed", details=str(exc))
    set_current_principal(principal)
    return principal


def login_required(func: Callable[..., Any]) -> Callable[..., Any]:
    """Ensure the request carries a valid token for an existing admin."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        outcome = _authenticate()
        if isinstance(outcome, tuple):
            return outcome
        return func(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Ensure the authenticated admin holds one of ``roles``."""
    allowed = tuple(Role.parse(role) for role in roles)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            outcome = _authenticate()
            if isinstance(outcome, tuple):
                return outcome

            decision = authorize(outcome, allowed)
            if not decision.allowed:
                logger.warning(
                    "Admin access denied",
                    extra={
                        "admin_id": outcome.id,
                        "role": outcome.role.value,
                        "endpoint": func.__name__,
                    },
                )
                return error_response(Forbidden(details=decision.details))
            return func(*args, **kwargs)

        return wrapper

    return decorator
