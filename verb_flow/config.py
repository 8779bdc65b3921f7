# verb_flow/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (VERB_FLOW_*)."""

    # sqlite database file
    database_url: str = "verb_flow.db"

    # Static conjugation artifact produced by build_conjugations.py
    conjugation_data_path: str = "data/spanish-conjugations.json"

    # Dev server
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = True

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="VERB_FLOW_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
