import logging
import uuid

import jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.repositories.post_repository import PostRepository
from app.services.post_service import PostService

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class PaginationParams:
    """
    Reusable FastAPI dependency collecting the raw ``page`` / ``limit``
    query parameters.

    Values are kept as strings on purpose: a malformed or non-positive
    value must fall back to the default instead of producing a 422, and
    that normalisation lives in ``PostService.find_page``.

    Attributes
    ----------
    page:
        1-based page number as sent by the client, or None.
    limit:
        Page size as sent by the client, or None.
    """

    def __init__(
        self,
        page: str | None = Query(
            None,
            description="Page number (1-based). Invalid values mean 1.",
        ),
        limit: str | None = Query(
            None,
            description="Posts per page. Invalid values mean 10.",
        ),
    ) -> None:
        self.page = page
        self.limit = limit


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> uuid.UUID:
    """
    Return the caller's user id from a verified Bearer token.

    Tokens are issued by the auth service; this only checks the signature
    and expiry and reads the ``sub`` claim, which must be a UUID.
    """
    if credentials is None:
        raise _unauthorized("You are not logged in")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise _unauthorized("Invalid token")

    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _unauthorized("Token subject is not a user id")


async def get_post_service(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(
        PostRepository(db),
        enforce_ownership=settings.ENFORCE_POST_OWNERSHIP,
    )
