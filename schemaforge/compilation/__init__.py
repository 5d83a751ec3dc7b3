"""SQL DDL compilation."""

from schemaforge.ir.models import Dialect, ReferentialAction

from .ddl_compilation import (
    CompilationOptions,
    DDLCompilationOutput,
    ExportResult,
    compile_ddl,
    constraint_name,
    export_schema,
    render_column_type,
    render_create_table,
    render_foreign_key,
)

__all__ = [
    "CompilationOptions",
    "DDLCompilationOutput",
    "Dialect",
    "ExportResult",
    "ReferentialAction",
    "compile_ddl",
    "constraint_name",
    "export_schema",
    "render_column_type",
    "render_create_table",
    "render_foreign_key",
]
