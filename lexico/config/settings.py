from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "lexico"
    db_username: str = "lexico"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    storage_backend: str = "postgres"
    storage_timeout_seconds: float = 10.0

    # Upload cap inherited from the HTTP layer (10 MB).
    max_document_bytes: int = 10_000_000
    max_document_chars: int = 10_000_000

    max_commit_attempts: int = 3
    commit_retry_delay_seconds: float = 0.5

    language_min_confidence: float = 0.1
    language_detection_sample_chars: int = 5000

    analysis_purpose: str = "default"
    batch_workers: int = 1
