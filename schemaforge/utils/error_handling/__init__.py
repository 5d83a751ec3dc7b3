"""Standardized error handling utilities.

Provides consistent error handling patterns across the engine and the HTTP layer.
"""

from .handlers import (
    handle_operation_error,
    SchemaOperationError,
    CompilationBlockedError,
    SnapshotError,
    ErrorContext,
    log_error_with_context,
    create_error_response,
)

__all__ = [
    "handle_operation_error",
    "SchemaOperationError",
    "CompilationBlockedError",
    "SnapshotError",
    "ErrorContext",
    "log_error_with_context",
    "create_error_response",
]
