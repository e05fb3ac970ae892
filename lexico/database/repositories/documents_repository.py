import uuid

from psycopg.rows import dict_row

from lexico.analysis.models import Document
from lexico.database.connection import get_connection
from lexico.database.models import document_from_row


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class DocumentsRepository:
    """Read operations for the documentos table."""

    def find_by_id(self, document_id: str) -> Document | None:
        if not is_uuid(document_id):
            return None
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, text, language_code, size_chars,
                           content_sha256, ingested_at
                    FROM documentos
                    WHERE id = %s
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return document_from_row(row)

    def list_recent(self, limit: int = 50) -> list[Document]:
        """Most recently ingested documents first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, text, language_code, size_chars,
                           content_sha256, ingested_at
                    FROM documentos
                    ORDER BY ingested_at DESC
                    LIMIT %s
                    """,
                    (limit,),
                )
                rows = cur.fetchall()
        return [document_from_row(row) for row in rows]
