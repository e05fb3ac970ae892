"""DDL for the lexical-analysis tables.

Table names follow the domain: idiomas, configuracion_analisis, documentos,
analisis, log_procesamiento. Analyses and log rows reject UPDATE at the
database level; deletion is left to administrators.
"""

from typing import Any

import psycopg

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS idiomas (
    code TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    stop_words JSONB NOT NULL DEFAULT '[]'::jsonb,
    tokenizer TEXT NOT NULL DEFAULT 'word',
    strip_diacritics BOOLEAN NOT NULL DEFAULT FALSE,
    rules JSONB NOT NULL DEFAULT '[]'::jsonb,
    position SERIAL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS configuracion_analisis (
    id TEXT NOT NULL,
    version INTEGER NOT NULL CHECK (version >= 1),
    purpose TEXT NOT NULL DEFAULT 'default',
    stages JSONB NOT NULL,
    parameters JSONB NOT NULL DEFAULT '{}'::jsonb,
    active BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (id, version)
);

CREATE UNIQUE INDEX IF NOT EXISTS configuracion_analisis_one_active
    ON configuracion_analisis (purpose) WHERE active;

CREATE TABLE IF NOT EXISTS documentos (
    id UUID PRIMARY KEY,
    text TEXT NOT NULL,
    language_code TEXT NOT NULL,
    size_chars INTEGER NOT NULL,
    content_sha256 CHAR(64) NOT NULL,
    ingested_at TIMESTAMPTZ NOT NULL
);

CREATE TABLE IF NOT EXISTS analisis (
    id UUID PRIMARY KEY,
    document_id UUID NOT NULL REFERENCES documentos (id),
    configuration_id TEXT NOT NULL,
    configuration_version INTEGER NOT NULL,
    language_code TEXT NOT NULL,
    status TEXT NOT NULL
        CHECK (status IN ('succeeded', 'partially_failed', 'failed')),
    metrics JSONB NOT NULL DEFAULT '{}'::jsonb,
    commit_id UUID NOT NULL UNIQUE,
    computed_at TIMESTAMPTZ NOT NULL,
    FOREIGN KEY (configuration_id, configuration_version)
        REFERENCES configuracion_analisis (id, version)
);

CREATE INDEX IF NOT EXISTS analisis_document_idx ON analisis (document_id);

CREATE TABLE IF NOT EXISTS log_procesamiento (
    id UUID PRIMARY KEY,
    document_id UUID NOT NULL REFERENCES documentos (id),
    analysis_id UUID NOT NULL REFERENCES analisis (id),
    sequence INTEGER NOT NULL,
    stage TEXT NOT NULL,
    outcome TEXT NOT NULL CHECK (outcome IN ('ok', 'skipped', 'failed')),
    reason TEXT,
    duration_ms DOUBLE PRECISION NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    UNIQUE (analysis_id, sequence)
);

CREATE INDEX IF NOT EXISTS log_procesamiento_document_idx
    ON log_procesamiento (document_id);

CREATE OR REPLACE FUNCTION lexico_reject_update() RETURNS trigger AS $$
BEGIN
    RAISE EXCEPTION '% rows are write-once', TG_TABLE_NAME;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS analisis_write_once ON analisis;
CREATE TRIGGER analisis_write_once
    BEFORE UPDATE ON analisis
    FOR EACH ROW EXECUTE FUNCTION lexico_reject_update();

DROP TRIGGER IF EXISTS log_procesamiento_append_only ON log_procesamiento;
CREATE TRIGGER log_procesamiento_append_only
    BEFORE UPDATE ON log_procesamiento
    FOR EACH ROW EXECUTE FUNCTION lexico_reject_update();
"""


def create_schema(conn: psycopg.Connection[Any]) -> None:
    """Create all tables, indexes and triggers (idempotent)."""
    conn.execute(SCHEMA_DDL)
    conn.commit()
