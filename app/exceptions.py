"""
Error types raised by the post service and its store adapter.

Two layers are kept apart:

- ``StoreError`` and its subclasses are raised by the repository and
  describe what the database reported (duplicate key, missing row,
  anything else).
- ``PostServiceError`` and its subclasses are what the service hands to
  its caller.  Each carries an ``ErrorKind`` so the HTTP layer can pick a
  status code without inspecting message text, and keeps the underlying
  store error on ``cause`` for logging.
"""
import enum


# ---------------------------------------------------------------------------
# Store adapter signals
# ---------------------------------------------------------------------------

class StoreError(Exception):
    """Any failure reported by the storage layer."""


class DuplicateKeyError(StoreError):
    """A uniqueness constraint (post title) was violated."""


class RecordNotFoundError(StoreError):
    """No row matched the requested identifier."""


# ---------------------------------------------------------------------------
# Service error taxonomy
# ---------------------------------------------------------------------------

class ErrorKind(str, enum.Enum):
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    # Only raised when ENFORCE_POST_OWNERSHIP is on.
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


class PostServiceError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "internal error"

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ConflictError(PostServiceError):
    kind = ErrorKind.CONFLICT
    default_message = "post with that title already exists"


class NotFoundError(PostServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "post not found"


class ForbiddenError(PostServiceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "not allowed to modify this post"


class InternalError(PostServiceError):
    kind = ErrorKind.INTERNAL
