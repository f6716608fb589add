from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="QMD_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    kb_path: str = "/app/kb"
    cache_path: str = "/root/.cache/qmd"
    db_name: str = "qmd.db"
    file_pattern: str = "**/*.md"

    embedding_model: str = "openai/text-embedding-3-small"
    embedding_batch_size: int = 100
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "QMD_OPENROUTER_API_KEY"),
    )
    openrouter_app_name: str = "QMD Knowledge Base"

    # Measured in approximate tokens (4 characters each)
    chunk_size: int = 500
    chunk_overlap: int = 50

    search_limit: int = 5
    rrf_k: int = 60
    fusion_fetch_multiplier: int = 3

    log_level: str = "INFO"
    log_level_http: str = "WARNING"

    @property
    def db_path(self) -> Path:
        return Path(self.cache_path) / self.db_name

    @property
    def embeddings_configured(self) -> bool:
        return bool(self.openrouter_api_key)

