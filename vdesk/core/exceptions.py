from typing import Any, Dict, List, Optional
from starlette import status

class AppError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
        field: Optional[str] = None,
        errors: Optional[List[dict]] = None,  # [{'code':..., 'message':..., 'field':...}]
        details: Optional[Dict[str, Any]] = None,  # Additional details for the error
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.field = field
        self.errors = errors
        self.details = details

    @property
    def envelope_status(self) -> str:
        """'fail' for client errors, 'error' for server errors"""
        return "error" if self.status_code >= 500 else "fail"


class ValidationError(AppError):
    def __init__(self, message: str, *, field: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="validation_error",
            field=field,
            **kwargs,
        )


class NotFoundError(AppError):
    def __init__(self, message: str = "No item found with that ID", **kwargs):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, code="not_found", **kwargs)


class InvalidTargetError(AppError):
    def __init__(self, message: str = "Target must be a valid folder", **kwargs):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, code="invalid_target", **kwargs)


class CyclicMoveError(AppError):
    def __init__(self, message: str = "Cannot move a folder into itself or one of its descendants", **kwargs):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, code="cyclic_move", **kwargs)


class TransientError(AppError):
    """Store I/O failure or timeout; safe to retry"""

    def __init__(self, message: str = "Storage temporarily unavailable", **kwargs):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code="transient", **kwargs)


class InternalError(AppError):
    def __init__(self, message: str = "Something went wrong", **kwargs):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code="internal", **kwargs)
