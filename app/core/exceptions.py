"""
Core exceptions module for the chat media service.
Contains base exceptions that can be extended by other modules.
"""

from typing import Any

from fastapi import HTTPException


class BaseServiceException(Exception):
    """
    Base exception for errors raised inside the service layer.
    Service exceptions never carry HTTP semantics; routers translate them.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RelayException(HTTPException):
    """
    Base HTTP exception for the application.
    Ensures consistent error response structure across the application.

    Example:
        >>> raise RelayException(
        ...     status_code=400,
        ...     error_code="validation_error",
        ...     message="One or more files were rejected",
        ...     context={"files": [...]},
        ... )
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        context: Any | None = None,
        loc: list[str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize the exception with error details.

        Args:
            status_code: HTTP status code
            error_code: Machine-readable error code
            message: Human-readable error message
            context: Additional error context
            loc: Error location (e.g., ["body", "files"])
            headers: Optional HTTP headers for the response
        """
        super().__init__(
            status_code=status_code,
            detail=[
                {
                    "type": error_code,
                    "loc": loc or ["application"],
                    "message": message,
                    "context": context,
                }
            ],
            headers=headers,
        )
