from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "bids"
    db_username: str = "bids"
    db_password: str = "secret"

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5

    files_root: str = "/app/files"

    pdf_engine: str = "pdfplumber"
    pdf_mode: str = "inline"

    llm_provider: str = "openai"
    llm_api_key: str = ""
    llm_model_name: str = ""
    llm_base_url: str = ""
    llm_timeout_seconds: int = 120
    llm_temperature: float = 0.0
    llm_json_mode: bool = True
