"""
Error types and the JSON error envelope used by the Todo API.

Store clients raise the exceptions below; the service turns them into
result values and the router turns those into HTTP responses. Every error
answered by the API has the same shape:

    {
        "error": "NOT_FOUND",
        "message": "Todo not found",
        "detail": [...]
    }
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Machine-readable codes carried in the error envelope."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class StoreError(Exception):
    """Raised by a store client when the underlying data store fails."""

    def __init__(self, message: str, operation: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        return f"{self.operation}: {self.message}"


class RecordNotFoundError(StoreError):
    """Raised by update/delete when no record has the requested todo_id."""

    def __init__(self, todo_id: str, operation: str) -> None:
        super().__init__(f"No todo with id {todo_id!r}", operation)
        self.todo_id = todo_id


# PUBLIC_INTERFACE
def error_body(
    code: ErrorCode,
    message: str,
    detail: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Build the JSON error envelope returned for every failed request."""
    body: Dict[str, Any] = {"error": code.value, "message": message}
    if detail is not None:
        body["detail"] = detail
    return body
