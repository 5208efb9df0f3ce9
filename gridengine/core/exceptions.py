# gridengine/core/exceptions.py
"""Error taxonomy shared by every engine component."""

from typing import Any, Dict, Optional


class GridEngineError(Exception):
    """Base class for engine errors."""

    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message, "type": type(self).__name__}
        if self.context:
            payload["context"] = {k: str(v) for k, v in self.context.items()}
        return payload


class ValidationError(GridEngineError):
    """Unknown field, illegal operator, malformed name or page window."""

    status_code = 400


class ConflictError(GridEngineError):
    """A name is already taken within its scope."""

    status_code = 409


class NotFoundError(GridEngineError):
    """Unknown module, field, page or id."""

    status_code = 404


class StorageError(GridEngineError):
    """Wraps a failure raised by the persistence layer."""

    status_code = 500

    def __init__(self, message: str, original: Optional[BaseException] = None, **context: Any):
        super().__init__(message, **context)
        self.original = original
