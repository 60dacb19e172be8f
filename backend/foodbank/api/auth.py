"""Request principal resolution.

A principal is resolved once per request by :class:`PrincipalMiddleware` and
cached on ``request.state``. Route dependencies only read that cache, so a
missing or invalid credential surfaces as a 401 problem response from the
shared exception handlers.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Callable

import jwt
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from foodbank.domain.errors import AuthError, ForbiddenError
from foodbank.domain.users import service as users_service
from foodbank.domain.users.db_models import UserRole
from foodbank.infra.auth import decode_access_token
from foodbank.infra.db import get_session_factory
from foodbank.infra.logging import update_log_context
from foodbank.infra.org_context import set_current_org_id
from foodbank.settings import settings

logger = logging.getLogger(__name__)

TEST_USER_HEADER = "X-Test-User"


@dataclass
class Principal:
    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: UserRole
    email: str = ""


def _get_bearer_token(request: Request) -> str | None:
    authorization: str | None = request.headers.get("Authorization")
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        return token or None
    return None


def _principal_from_test_header(raw: str) -> Principal:
    try:
        payload = json.loads(raw)
        return Principal(
            user_id=uuid.UUID(str(payload["id"])),
            organization_id=uuid.UUID(str(payload["organization_id"])),
            role=UserRole(payload["role"]),
            email=str(payload.get("email") or ""),
        )
    except (ValueError, KeyError, TypeError) as exc:
        raise AuthError(detail="Invalid test user header") from exc


async def _principal_from_token(request: Request, token: str) -> Principal:
    app_settings = getattr(request.app.state, "app_settings", None) or settings
    try:
        payload = decode_access_token(token, app_settings.auth_secret_key)
    except jwt.ExpiredSignatureError as exc:
        logger.info("auth_token_invalid", extra={"extra": {"reason": "expired"}})
        raise AuthError(detail="Token expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.info("auth_token_invalid", extra={"extra": {"reason": "malformed"}})
        raise AuthError(detail="Invalid token") from exc

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError as exc:
        logger.info("auth_token_invalid", extra={"extra": {"reason": "subject"}})
        raise AuthError(detail="Invalid token subject") from exc

    # Role and organization always come from the users table, never the token.
    session_factory = getattr(request.app.state, "db_session_factory", None) or get_session_factory()
    async with session_factory() as session:
        user = await users_service.get_user_by_id(session, user_id)
    if user is None:
        logger.info("auth_token_invalid", extra={"extra": {"reason": "unknown_user"}})
        raise AuthError(detail="User not found")
    return Principal(
        user_id=user.id,
        organization_id=user.organization_id,
        role=user.role,
        email=user.email,
    )


async def resolve_principal(request: Request) -> Principal | None:
    app_settings = getattr(request.app.state, "app_settings", None) or settings
    test_header = request.headers.get(TEST_USER_HEADER)
    if test_header and app_settings.allow_test_principal:
        return _principal_from_test_header(test_header)

    token = _get_bearer_token(request)
    if not token:
        return None
    return await _principal_from_token(request, token)


class PrincipalMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        request.state.principal = None
        request.state.auth_error = None
        try:
            principal = await resolve_principal(request)
        except AuthError as exc:
            request.state.auth_error = exc
            principal = None

        if principal is not None:
            request.state.principal = principal
            set_current_org_id(principal.organization_id)
            update_log_context(
                org_id=str(principal.organization_id),
                user_id=str(principal.user_id),
                role=principal.role.value,
            )
        return await call_next(request)


def require_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None:
        auth_error = getattr(request.state, "auth_error", None)
        if auth_error is not None:
            raise auth_error
        raise AuthError(detail="Authentication required")
    return principal


def require_role(*roles: UserRole | str) -> Callable[[Request], Principal]:
    allowed = {UserRole(role) for role in roles}

    def _dependency(request: Request) -> Principal:
        principal = require_principal(request)
        if principal.role not in allowed:
            raise ForbiddenError(detail="Insufficient permissions")
        return principal

    return _dependency
