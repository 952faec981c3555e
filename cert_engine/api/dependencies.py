from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cert_engine.core.logging import user_id_var
from cert_engine.db.engine import async_session_factory, get_async_session
from cert_engine.db.redis import redis_pool
from cert_engine.models.principal import Principal
from cert_engine.repos.activity_repo import ActivityRepo, InMemoryActivityRepo
from cert_engine.repos.credential_repo import CredentialRepo, InMemoryCredentialRepo
from cert_engine.repos.credential_sequence import (
    CredentialSequence,
    InMemoryCredentialSequence,
    RedisCredentialSequence,
)
from cert_engine.repos.pg_activity_repo import PgActivityRepo
from cert_engine.repos.pg_credential_repo import PgCredentialRepo, PgCredentialSequence
from cert_engine.services import token_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Store singletons used when no database is configured (dev and tests)
# ---------------------------------------------------------------------------

activity_repo = InMemoryActivityRepo()
credential_repo = InMemoryCredentialRepo()

if redis_pool is not None:
    credential_sequence: CredentialSequence = RedisCredentialSequence(redis_pool)
else:
    credential_sequence = InMemoryCredentialSequence()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Principal:
    """Validate the bearer token and return the caller.

    The subject goes into user_id_var for log lines emitted while the route
    runs, and onto request.state for the middleware's summary line, which
    runs in a different task and never sees the ContextVar.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        claims = token_service.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    principal = Principal(user_id=claims["sub"])
    user_id_var.set(principal.user_id)
    request.state.user_id = principal.user_id
    return principal


# ---------------------------------------------------------------------------
# Repository providers
#
# With DATABASE_URL the Pg implementations share the request's session (and
# therefore its transaction); otherwise the singletons above are handed out.
# ---------------------------------------------------------------------------

if async_session_factory is not None:

    async def get_activity_repo(
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> ActivityRepo:
        return PgActivityRepo(session)

    async def get_credential_repo(
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> CredentialRepo:
        return PgCredentialRepo(session)

    async def get_credential_sequence(
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> CredentialSequence:
        return PgCredentialSequence(session)

else:

    async def get_activity_repo() -> ActivityRepo:
        return activity_repo

    async def get_credential_repo() -> CredentialRepo:
        return credential_repo

    async def get_credential_sequence() -> CredentialSequence:
        return credential_sequence
