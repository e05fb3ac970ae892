from psycopg.rows import dict_row

from lexico.analysis.models import ProcessingLogEntry
from lexico.database.connection import get_connection
from lexico.database.models import log_entry_from_row
from lexico.database.repositories.documents_repository import is_uuid


class ProcessingLogRepository:
    """Read operations for the append-only log_procesamiento table."""

    def list_for_analysis(self, analysis_id: str) -> list[ProcessingLogEntry]:
        """Entries of one analysis in configuration stage order."""
        if not is_uuid(analysis_id):
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, analysis_id, sequence, stage,
                           outcome, reason, duration_ms, created_at
                    FROM log_procesamiento
                    WHERE analysis_id = %s
                    ORDER BY sequence
                    """,
                    (analysis_id,),
                )
                rows = cur.fetchall()
        return [log_entry_from_row(row) for row in rows]

    def list_for_document(self, document_id: str) -> list[ProcessingLogEntry]:
        """Audit trail of every attempt on a document."""
        if not is_uuid(document_id):
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, analysis_id, sequence, stage,
                           outcome, reason, duration_ms, created_at
                    FROM log_procesamiento
                    WHERE document_id = %s
                    ORDER BY created_at, sequence
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()
        return [log_entry_from_row(row) for row in rows]
