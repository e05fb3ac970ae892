import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from lexico.analysis.exceptions import PipelineError
from lexico.analysis.serialization import error_to_dict, outcome_to_dict
from lexico.analysis.service import build_analysis_service
from lexico.config.settings import Settings
from lexico.configuration.defaults import DEFAULT_CONFIGURATION
from lexico.database.connection import close_pool, get_connection, init_pool
from lexico.database.exceptions import StorageError
from lexico.database.repositories.configuration_repository import ConfigurationRepository
from lexico.database.repositories.language_repository import LanguageRepository
from lexico.database.schema import create_schema
from lexico.languages.builtin import BUILTIN_PROFILES
from lexico.logging.logger import Log
from lexico.worker.batch_runner import BatchItemResult, BatchRunner
from lexico.worker.file_loader import FileLoader


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lexico",
        description="Run the lexical-analysis pipeline over text documents.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="UTF-8 text documents")
    parser.add_argument("--lang", dest="language_hint", help="language hint, e.g. 'en'")
    parser.add_argument("--config", dest="config_id", help="configuration id")
    parser.add_argument("--config-version", type=int, help="configuration version")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="use in-memory storage instead of PostgreSQL",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="create tables and seed built-in languages and the default configuration",
    )
    parser.add_argument("--health", action="store_true", help="print health status and exit")
    return parser.parse_args(argv)


def _init_database() -> None:
    with get_connection() as conn:
        create_schema(conn)
    languages = LanguageRepository()
    for profile in BUILTIN_PROFILES:
        languages.upsert(profile)
    ConfigurationRepository().ensure(DEFAULT_CONFIGURATION)
    Log.info("Database schema ready")


def _result_to_dict(result: BatchItemResult) -> dict[str, Any]:
    if result.outcome is not None:
        payload = outcome_to_dict(result.outcome)
    elif isinstance(result.error, (PipelineError, StorageError)):
        payload = {"error": error_to_dict(result.error)}
    else:
        payload = {"error": {"kind": "file_error", "reason": str(result.error)}}
    return {"path": str(result.path), **payload}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: settings -> pool -> service -> analyze files -> JSON lines."""
    args = _parse_args(argv)
    settings = Settings()
    if args.memory:
        settings = settings.model_copy(update={"storage_backend": "memory"})
    Log.configure(settings.log_level)

    uses_database = settings.storage_backend.lower() == "postgres"
    if uses_database:
        init_pool(settings)
    try:
        if args.init_db and uses_database:
            _init_database()
        service = build_analysis_service(settings)
        if args.health:
            print(json.dumps(service.health()))
            return 0
        runner = BatchRunner(service, FileLoader(settings.max_document_bytes), settings)
        results = runner.run(
            args.files,
            language_hint=args.language_hint,
            config_id=args.config_id,
            config_version=args.config_version,
        )
        for result in results:
            print(json.dumps(_result_to_dict(result), ensure_ascii=False))
        return 0 if all(result.ok for result in results) else 1
    finally:
        if uses_database:
            close_pool()


if __name__ == "__main__":
    sys.exit(main())
