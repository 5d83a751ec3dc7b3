"""Tests for error handling helpers."""

import pytest

from schemaforge.utils.error_handling import (
    CompilationBlockedError,
    ErrorContext,
    SchemaOperationError,
    create_error_response,
    handle_operation_error,
)


def test_operation_error_str_includes_operation():
    error = SchemaOperationError(message="Table 'x' does not exist", context=ErrorContext(operation="remove_table"))
    assert str(error) == "[remove_table] Table 'x' does not exist"


def test_create_error_response_includes_context():
    context = ErrorContext(operation="update_column", table_id="t1", column_id="c9", additional_context={"k": "v"})
    error = SchemaOperationError(message="Column 'c9' does not exist", context=context)
    response = create_error_response(error, context)
    assert response["success"] is False
    assert response["error"]["type"] == "SchemaOperationError"
    assert response["error"]["message"] == "Column 'c9' does not exist"
    assert response["error"]["table_id"] == "t1"
    assert response["error"]["column_id"] == "c9"
    assert response["error"]["additional_context"] == {"k": "v"}
    assert "relationship_id" not in response["error"]


def test_handle_operation_error_returns_response():
    context = ErrorContext(operation="load_schema")
    response = handle_operation_error(ValueError("bad"), context, log_level="warning")
    assert response["error"]["message"] == "bad"


def test_handle_operation_error_wraps_on_reraise():
    context = ErrorContext(operation="load_schema")
    with pytest.raises(SchemaOperationError) as exc_info:
        handle_operation_error(KeyError("x"), context, reraise=True)
    assert exc_info.value.error_type == "KeyError"
    assert isinstance(exc_info.value.original_exception, KeyError)


def test_compilation_blocked_error_counts_errors():
    class _Issue:
        def __init__(self, severity):
            self.severity = severity

    error = CompilationBlockedError(issues=[_Issue("error"), _Issue("warning")])
    assert len(error.blocking_issues) == 1
    assert "1 error(s)" in str(error)
