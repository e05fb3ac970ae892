import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from lexico.config.settings import Settings
from lexico.configuration.defaults import DEFAULT_CONFIGURATION
from lexico.database.connection import close_pool, get_connection, init_pool
from lexico.database.repositories.configuration_repository import ConfigurationRepository
from lexico.database.repositories.language_repository import LanguageRepository
from lexico.database.schema import create_schema
from lexico.languages.builtin import BUILTIN_PROFILES


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "lexico_test")
    os.environ.setdefault("STORAGE_TIMEOUT_SECONDS", "3")
    return Settings(storage_backend="postgres", commit_retry_delay_seconds=0.0)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. Set DB_* env to a disposable database"
        )
    try:
        with get_connection() as conn:
            create_schema(conn)
        languages = LanguageRepository()
        for profile in BUILTIN_PROFILES:
            languages.upsert(profile)
        ConfigurationRepository().ensure(DEFAULT_CONFIGURATION)
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn
