"""
Post service: business rules for the Post resource.

Design notes
------------
- ``PostService`` holds nothing but its ``PostRepository`` (plus a clock
  and the ownership flag), so one instance is built per request around
  the request's session.
- Store signals (``DuplicateKeyError``, ``RecordNotFoundError``,
  ``StoreError``) are translated into ``ConflictError``, ``NotFoundError``
  and ``InternalError``.  The underlying store error is chained and kept on
  ``.cause``; it never becomes part of the public message.
- ``update`` re-stamps ``user_id`` to the caller.  Any authenticated user
  can therefore take over a post unless ``enforce_ownership`` is set, in
  which case update and delete by a non-owner raise ``ForbiddenError``.
- Timestamps are stamped here in UTC, not by the database, so the value
  returned from ``create`` is exactly the value stored.
"""
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from app.config import settings
from app.exceptions import (
    ConflictError,
    DuplicateKeyError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    RecordNotFoundError,
    StoreError,
)
from app.models import Post
from app.repositories.post_repository import PostRepository
from app.schemas import PostCreate, PostUpdate

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_INT_RE = re.compile(r"[+-]?[0-9]+")

# LIMIT/OFFSET are signed 64-bit on every supported backend.
MAX_SQL_INT = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_positive_int(raw: Any, default: int) -> int:
    """
    Return *raw* as an int when it is a positive 64-bit integer (or a
    string spelling one), otherwise *default*.

    Nothing is rejected: garbage, zero, negative and out-of-range values
    all fall back.
    """
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INT_RE.fullmatch(raw):
        value = int(raw)
    else:
        return default
    return value if 1 <= value <= MAX_SQL_INT else default


def normalize_pagination(page: Any, limit: Any) -> tuple[int, int]:
    """Return a usable ``(page, limit)`` pair from untrusted query values."""
    return (
        parse_positive_int(page, settings.DEFAULT_PAGE),
        parse_positive_int(limit, settings.DEFAULT_PAGE_SIZE),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class PostService:
    def __init__(
        self,
        repository: PostRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
        enforce_ownership: bool = False,
    ) -> None:
        self.repository = repository
        self._clock = clock
        self.enforce_ownership = enforce_ownership

    async def create(self, data: PostCreate, caller_id: uuid.UUID) -> Post:
        """
        Persist a new post owned by *caller_id* and return it with its
        generated id and timestamps.
        """
        now = self._clock()
        post = Post(
            id=uuid.uuid4(),
            title=data.title,
            content=data.content,
            image=data.image,
            user_id=caller_id,
            created_at=now,
            updated_at=now,
        )
        try:
            post = await self.repository.insert(post)
        except DuplicateKeyError as exc:
            raise ConflictError("post with that title already exists", exc) from exc
        except StoreError as exc:
            raise InternalError("failed to create post", exc) from exc

        logger.info("Post %s created by user %s", post.id, caller_id)
        return post

    async def update(
        self, post_id: uuid.UUID | str, data: PostUpdate, caller_id: uuid.UUID
    ) -> Post:
        """
        Apply the supplied title/content/image to an existing post.

        The post must exist before anything is written.  ``user_id`` is
        set to *caller_id* and ``updated_at`` moves forward; ``created_at``
        is left alone.  Fields left out of *data*, sent as null or sent as
        an empty string keep their stored value.  Returns the post as
        stored after the write.
        """
        existing = await self._fetch(post_id)
        self._check_owner(existing, caller_id)

        fields = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value not in (None, "")
        }
        fields["user_id"] = caller_id
        fields["updated_at"] = max(self._clock(), existing.updated_at)

        if existing.user_id != caller_id:
            logger.warning(
                "Post %s ownership reassigned from %s to %s on update",
                existing.id,
                existing.user_id,
                caller_id,
            )

        try:
            post = await self.repository.apply_update(existing.id, fields)
        except RecordNotFoundError as exc:
            raise NotFoundError("post not found", exc) from exc
        except StoreError as exc:
            raise InternalError("failed to update post", exc) from exc

        logger.info("Post %s updated by user %s", post.id, caller_id)
        return post

    async def find_by_id(self, post_id: uuid.UUID | str) -> Post:
        return await self._fetch(post_id)

    async def find_page(self, page: Any = None, limit: Any = None) -> list[Post]:
        """
        Return one page of posts.

        *page* (1-based) and *limit* come straight from the query string;
        see ``normalize_pagination``.  A page past the end is an empty list.
        """
        page, limit = normalize_pagination(page, limit)
        offset = (page - 1) * limit
        if offset > MAX_SQL_INT:
            # No table holds that many rows.
            return []
        try:
            return await self.repository.list_page(offset, limit)
        except StoreError as exc:
            raise InternalError("failed to fetch posts", exc) from exc

    async def delete(
        self, post_id: uuid.UUID | str, caller_id: uuid.UUID | None = None
    ) -> None:
        """Hard-delete a post.  Deleting nothing is a NotFoundError."""
        if self.enforce_ownership and caller_id is not None:
            self._check_owner(await self._fetch(post_id), caller_id)

        try:
            removed = await self.repository.delete_by_id(post_id)
        except StoreError as exc:
            raise InternalError("failed to delete post", exc) from exc

        if removed == 0:
            raise NotFoundError("post not found")
        logger.info("Post %s deleted", post_id)

    # ------------------------------------------------------------------

    async def _fetch(self, post_id: uuid.UUID | str) -> Post:
        try:
            return await self.repository.get_by_id(post_id)
        except RecordNotFoundError as exc:
            raise NotFoundError("post not found", exc) from exc
        except StoreError as exc:
            raise InternalError("failed to fetch post", exc) from exc

    def _check_owner(self, post: Post, caller_id: uuid.UUID) -> None:
        if self.enforce_ownership and post.user_id != caller_id:
            raise ForbiddenError("not allowed to modify this post")
