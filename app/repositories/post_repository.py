"""
Post store adapter: the only module that talks SQL for the Post table.

Database errors are translated into the ``StoreError`` family from
``app.exceptions`` so the service can tell a duplicate title or a missing
row apart from everything else.  The repository flushes but never
commits; the ``get_db`` dependency owns the transaction.
"""
import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DuplicateKeyError, RecordNotFoundError, StoreError
from app.models import Post

logger = logging.getLogger(__name__)

# Columns apply_update may write; guards against arbitrary attribute access.
_UPDATABLE_COLUMNS: frozenset[str] = frozenset(
    {"title", "content", "image", "user_id", "updated_at"}
)

_UNIQUE_VIOLATION_SQLSTATE = "23505"
_UNIQUE_VIOLATION_MARKERS = ("duplicate key", "unique constraint")


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    text = str(orig).lower()
    return any(marker in text for marker in _UNIQUE_VIOLATION_MARKERS)


def _coerce_id(post_id: uuid.UUID | str) -> uuid.UUID | None:
    """Return *post_id* as a UUID, or None when it cannot name any row."""
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        return None


class PostRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(self, post: Post) -> Post:
        self.db.add(post)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateKeyError(f"duplicate key on insert: {exc.orig}") from exc
            raise StoreError(f"integrity error on insert: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"database error on insert: {exc}") from exc
        return post

    async def get_by_id(self, post_id: uuid.UUID | str) -> Post:
        key = _coerce_id(post_id)
        if key is None:
            raise RecordNotFoundError(f"malformed post id {post_id!r}")
        try:
            result = await self.db.execute(select(Post).where(Post.id == key))
        except SQLAlchemyError as exc:
            raise StoreError(f"database error on get: {exc}") from exc
        post = result.scalar_one_or_none()
        if post is None:
            raise RecordNotFoundError(f"no post with id {key}")
        return post

    async def list_page(self, offset: int, limit: int) -> list[Post]:
        """
        Return up to *limit* posts starting at *offset*.

        Ordered by creation time with the id as tie-breaker so that
        consecutive pages never overlap or skip rows.
        """
        q = (
            select(Post)
            .order_by(Post.created_at.asc(), Post.id.asc())
            .offset(offset)
            .limit(limit)
        )
        try:
            result = await self.db.execute(q)
        except SQLAlchemyError as exc:
            raise StoreError(f"database error on list: {exc}") from exc
        return list(result.scalars().all())

    async def apply_update(self, post_id: uuid.UUID | str, fields: dict[str, Any]) -> Post:
        """
        Write only the columns present in *fields* and return the row as
        stored afterwards.
        """
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"cannot update column(s): {', '.join(sorted(unknown))}")

        post = await self.get_by_id(post_id)
        for field, value in fields.items():
            setattr(post, field, value)
        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"database error on update: {exc}") from exc
        return post

    async def delete_by_id(self, post_id: uuid.UUID | str) -> int:
        """Hard-delete the post and return the number of rows removed."""
        key = _coerce_id(post_id)
        if key is None:
            return 0
        try:
            result = await self.db.execute(delete(Post).where(Post.id == key))
        except SQLAlchemyError as exc:
            raise StoreError(f"database error on delete: {exc}") from exc
        logger.debug("Deleted %d row(s) for post %s", result.rowcount, key)
        return result.rowcount
