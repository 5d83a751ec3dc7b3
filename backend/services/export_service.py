"""Export service - validates and compiles project snapshots to SQL."""

from typing import Iterable, Optional

from schemaforge.compilation import CompilationOptions, ExportResult, export_schema
from schemaforge.ir.models import SchemaState
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)


class ExportService:
    """Runs the validate-then-compile pipeline for the HTTP layer."""

    async def export(
        self,
        state: SchemaState,
        selected_table_ids: Optional[Iterable[str]] = None,
        options: Optional[CompilationOptions] = None,
    ) -> ExportResult:
        """Export the selected tables (all when None) of a snapshot."""
        selected = list(selected_table_ids) if selected_table_ids is not None else None
        result = export_schema(state, selected, options)
        logger.info(
            f"Export of {len(selected) if selected is not None else len(state.tables)} table(s) "
            f"as {result.dialect.value}: {'ok' if result.can_export else 'blocked'}, {len(result.issues)} issue(s)"
        )
        return result
