import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from lexico.database.connection import get_connection
from lexico.database.exceptions import StorageUnavailableError
from lexico.database.models import language_from_row
from lexico.languages.models import LanguageProfile


class LanguageRepository:
    """Database operations for the idiomas table."""

    def load_all(self) -> list[LanguageProfile]:
        """All languages in registration order.

        Raises:
            StorageUnavailableError: if the database cannot be reached.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT code, name, stop_words, tokenizer,
                               strip_diacritics, rules
                        FROM idiomas
                        ORDER BY position
                        """
                    )
                    rows = cur.fetchall()
        except psycopg.OperationalError as exc:
            raise StorageUnavailableError(f"Could not load languages: {exc}") from exc
        return [language_from_row(row) for row in rows]

    def upsert(self, profile: LanguageProfile) -> None:
        """Insert or update one language (administrative action)."""
        try:
            with get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO idiomas
                        (code, name, stop_words, tokenizer, strip_diacritics, rules)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (code) DO UPDATE
                    SET name = EXCLUDED.name,
                        stop_words = EXCLUDED.stop_words,
                        tokenizer = EXCLUDED.tokenizer,
                        strip_diacritics = EXCLUDED.strip_diacritics,
                        rules = EXCLUDED.rules,
                        updated_at = NOW()
                    """,
                    (
                        profile.code,
                        profile.name,
                        Jsonb(sorted(profile.stop_words)),
                        profile.tokenizer,
                        profile.strip_diacritics,
                        Jsonb([{"name": r.name, "pattern": r.pattern} for r in profile.rules]),
                    ),
                )
                conn.commit()
        except psycopg.OperationalError as exc:
            raise StorageUnavailableError(
                f"Could not store language '{profile.code}': {exc}"
            ) from exc
