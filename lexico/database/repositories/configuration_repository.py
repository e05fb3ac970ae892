from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from lexico.configuration.base import BaseConfigurationStore
from lexico.configuration.exceptions import (
    ConfigNotFoundError,
    ConfigVersionConflictError,
    NoActiveConfigError,
)
from lexico.configuration.models import AnalysisConfiguration, configuration_to_dict
from lexico.database.connection import get_connection
from lexico.database.exceptions import StorageUnavailableError
from lexico.database.models import configuration_from_row
from lexico.logging.logger import Log

_COLUMNS = "id, version, purpose, stages, parameters, active, created_at"


class ConfigurationRepository(BaseConfigurationStore):
    """Append-only configuration store backed by configuracion_analisis."""

    def get(self, config_id: str, version: int | None = None) -> AnalysisConfiguration:
        with self._connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                if version is None:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM configuracion_analisis
                        WHERE id = %s
                        ORDER BY version DESC
                        LIMIT 1
                        """,
                        (config_id,),
                    )
                else:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM configuracion_analisis
                        WHERE id = %s AND version = %s
                        """,
                        (config_id, version),
                    )
                row = cur.fetchone()

        if row is None:
            suffix = f" version {version}" if version is not None else ""
            raise ConfigNotFoundError(f"Configuration '{config_id}'{suffix} not found")
        return configuration_from_row(row)

    def get_active(self, purpose: str = "default") -> AnalysisConfiguration:
        with self._connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM configuracion_analisis
                    WHERE purpose = %s AND active
                    """,
                    (purpose,),
                )
                row = cur.fetchone()

        if row is None:
            raise NoActiveConfigError(f"No active configuration for purpose '{purpose}'")
        return configuration_from_row(row)

    def publish(self, configuration: AnalysisConfiguration) -> AnalysisConfiguration:
        try:
            with self._connection() as conn:
                with conn.transaction():
                    latest = self._latest_version(conn, configuration.id)
                    if configuration.version != latest + 1:
                        raise ConfigVersionConflictError(
                            f"Configuration '{configuration.id}': expected version "
                            f"{latest + 1}, got {configuration.version}"
                        )
                    self._insert(conn, configuration)
                    if configuration.active:
                        self._activate(conn, configuration)
        except psycopg.errors.UniqueViolation as exc:
            raise ConfigVersionConflictError(
                f"Configuration {configuration.reference} was published concurrently"
            ) from exc
        Log.info(f"Published configuration {configuration.reference}")
        return self.get(configuration.id, configuration.version)

    def activate(self, config_id: str, version: int) -> AnalysisConfiguration:
        configuration = self.get(config_id, version)
        with self._connection() as conn:
            with conn.transaction():
                self._activate(conn, configuration)
        Log.info(f"Activated configuration {configuration.reference}")
        return configuration.with_active(True)

    def versions(self, config_id: str) -> list[int]:
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT version FROM configuracion_analisis WHERE id = %s ORDER BY version",
                    (config_id,),
                )
                return [row[0] for row in cur.fetchall()]

    def ensure(self, configuration: AnalysisConfiguration) -> None:
        """Store a snapshot unless that id+version already exists (seeding)."""
        with self._connection() as conn:
            with conn.transaction():
                inserted = self._insert(conn, configuration, skip_existing=True)
                if inserted and configuration.active and not self._has_active(
                    conn, configuration.purpose
                ):
                    self._activate(conn, configuration)

    @contextmanager
    def _connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        try:
            with get_connection() as conn:
                yield conn
        except psycopg.OperationalError as exc:
            raise StorageUnavailableError(f"Configuration store unavailable: {exc}") from exc

    def _latest_version(self, conn: psycopg.Connection[Any], config_id: str) -> int:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT COALESCE(MAX(version), 0) FROM configuracion_analisis WHERE id = %s",
                (config_id,),
            )
            row = cur.fetchone()
        return int(row[0]) if row else 0

    def _has_active(self, conn: psycopg.Connection[Any], purpose: str) -> bool:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT 1 FROM configuracion_analisis WHERE purpose = %s AND active",
                (purpose,),
            )
            return cur.fetchone() is not None

    def _insert(
        self,
        conn: psycopg.Connection[Any],
        configuration: AnalysisConfiguration,
        skip_existing: bool = False,
    ) -> bool:
        payload = configuration_to_dict(configuration)
        conflict_clause = "ON CONFLICT (id, version) DO NOTHING" if skip_existing else ""
        with conn.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO configuracion_analisis
                    (id, version, purpose, stages, parameters, active)
                VALUES (%s, %s, %s, %s, %s, FALSE)
                {conflict_clause}
                """,
                (
                    configuration.id,
                    configuration.version,
                    configuration.purpose,
                    Jsonb(payload["stages"]),
                    Jsonb(payload["parameters"]),
                ),
            )
            return cur.rowcount == 1

    def _activate(
        self,
        conn: psycopg.Connection[Any],
        configuration: AnalysisConfiguration,
    ) -> None:
        conn.execute(
            """
            UPDATE configuracion_analisis
            SET active = FALSE
            WHERE purpose = %s AND active
            """,
            (configuration.purpose,),
        )
        conn.execute(
            """
            UPDATE configuracion_analisis
            SET active = TRUE
            WHERE id = %s AND version = %s
            """,
            (configuration.id, configuration.version),
        )
