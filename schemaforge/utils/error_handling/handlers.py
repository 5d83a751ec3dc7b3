"""Standardized error handling for schema operations.

Provides consistent error handling, logging, and error response creation.
"""

from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from datetime import datetime
import traceback

from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Context information for error handling."""
    operation: str
    table_id: Optional[str] = None
    column_id: Optional[str] = None
    relationship_id: Optional[str] = None
    additional_context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SchemaOperationError(Exception):
    """Raised when an editing operation targets something that does not exist or is not allowed."""
    message: str
    context: ErrorContext
    original_exception: Optional[Exception] = None
    error_type: str = "operation_error"

    def __str__(self) -> str:
        return f"[{self.context.operation}] {self.message}"


@dataclass
class CompilationBlockedError(Exception):
    """Raised when DDL is requested for a schema that still has blocking issues."""
    issues: List[Any]
    message: str = "Schema has blocking errors; fix them before exporting SQL."

    @property
    def blocking_issues(self) -> List[Any]:
        return [issue for issue in self.issues if getattr(issue, "severity", None) == "error"]

    def __str__(self) -> str:
        return f"{self.message} ({len(self.blocking_issues)} error(s))"


class SnapshotError(ValueError):
    """Raised when a persisted schema snapshot cannot be decoded."""


def log_error_with_context(
    error: Exception,
    context: ErrorContext,
    level: str = "error"
) -> None:
    """
    Log error with full context information.

    Args:
        error: The exception that occurred
        context: Error context information
        level: Log level ("error", "warning", "critical")
    """
    log_msg_parts = [f"Error in {context.operation}"]

    if context.table_id:
        log_msg_parts.append(f"Table: {context.table_id}")
    if context.column_id:
        log_msg_parts.append(f"Column: {context.column_id}")
    if context.relationship_id:
        log_msg_parts.append(f"Relationship: {context.relationship_id}")

    log_msg = " | ".join(log_msg_parts)

    if level == "critical":
        logger.critical(f"{log_msg}: {error}", exc_info=True)
    elif level == "warning":
        logger.warning(f"{log_msg}: {error}", exc_info=True)
    else:
        logger.error(f"{log_msg}: {error}", exc_info=True)

    if context.additional_context:
        logger.debug(f"Additional context: {context.additional_context}")


def create_error_response(
    error: Exception,
    context: ErrorContext,
) -> Dict[str, Any]:
    """
    Create standardized error response dictionary.

    Args:
        error: The exception that occurred
        context: Error context information

    Returns:
        Dictionary with error information
    """
    error_response = {
        "success": False,
        "error": {
            "type": type(error).__name__,
            "message": error.message if isinstance(error, SchemaOperationError) else str(error),
            "operation": context.operation,
            "timestamp": datetime.now().isoformat(),
        }
    }

    if context.table_id:
        error_response["error"]["table_id"] = context.table_id
    if context.column_id:
        error_response["error"]["column_id"] = context.column_id
    if context.relationship_id:
        error_response["error"]["relationship_id"] = context.relationship_id

    if error.__traceback__ is not None:
        tb_str = "".join(traceback.format_tb(error.__traceback__))
        # Truncate to last 500 chars to avoid huge error responses
        error_response["error"]["traceback"] = tb_str[-500:] if len(tb_str) > 500 else tb_str

    if context.additional_context:
        error_response["error"]["additional_context"] = context.additional_context

    return error_response


def handle_operation_error(
    error: Exception,
    context: ErrorContext,
    log_level: str = "error",
    reraise: bool = False
) -> Optional[Dict[str, Any]]:
    """
    Handle an operation error with standardized logging and response creation.

    Args:
        error: The exception that occurred
        context: Error context information
        log_level: Log level ("error", "warning", "critical")
        reraise: If True, re-raise the exception after handling

    Returns:
        Error response dictionary

    Raises:
        SchemaOperationError: If reraise=True, wraps original error in SchemaOperationError
    """
    log_error_with_context(error, context, level=log_level)

    error_response = create_error_response(error, context)

    if reraise:
        if isinstance(error, SchemaOperationError):
            raise error
        operation_error = SchemaOperationError(
            message=str(error),
            context=context,
            original_exception=error,
            error_type=type(error).__name__,
        )
        raise operation_error from error

    return error_response
