from psycopg.rows import dict_row

from lexico.analysis.models import Analysis
from lexico.database.connection import get_connection
from lexico.database.models import analysis_from_row
from lexico.database.repositories.documents_repository import is_uuid


class AnalysisRepository:
    """Read operations for the analisis table."""

    def find_by_id(self, analysis_id: str) -> Analysis | None:
        if not is_uuid(analysis_id):
            return None
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, configuration_id, configuration_version,
                           language_code, status, metrics, computed_at
                    FROM analisis
                    WHERE id = %s
                    """,
                    (analysis_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return analysis_from_row(row)

    def list_for_document(self, document_id: str) -> list[Analysis]:
        """All analyses of a document, oldest first."""
        if not is_uuid(document_id):
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, configuration_id, configuration_version,
                           language_code, status, metrics, computed_at
                    FROM analisis
                    WHERE document_id = %s
                    ORDER BY computed_at
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()
        return [analysis_from_row(row) for row in rows]
