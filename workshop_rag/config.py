"""Application configuration loaded from environment variables."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    data_dir: str = "data"
    rag_dir: str = "data/rag"

    openai_api_key: Optional[str] = Field(
        default=None, description="Server-side fallback key for OpenAI chat requests."
    )
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model_chat: str = "gpt-4o-mini"

    anthropic_api_key: Optional[str] = Field(
        default=None, description="Server-side fallback key for Anthropic chat requests."
    )
    anthropic_base_url: Optional[str] = None
    anthropic_model_chat: str = "claude-3-5-sonnet-latest"

    allow_server_llm_keys: bool = Field(
        default=False,
        description="Use the server-side provider keys when a chat request carries none.",
    )
    llm_timeout_seconds: float = 30.0
    llm_max_output_tokens: int = 1400
    llm_temperature: float = 0.2

    host: str = "0.0.0.0"
    port: int = 3002
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def data_dir_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def rag_dir_path(self) -> Path:
        return Path(self.rag_dir)

    @property
    def chunks_path(self) -> Path:
        return self.rag_dir_path / "procedure-chunks.json"

    @property
    def documents_path(self) -> Path:
        return self.rag_dir_path / "doc-metadata.json"

    @property
    def parts_path(self) -> Path:
        return self.rag_dir_path / "parts-index.json"

    @property
    def links_path(self) -> Path:
        return self.rag_dir_path / "part-procedure-links.json"

    @property
    def grounding_path(self) -> Path:
        return self.rag_dir_path / "diagram-grounding.json"

    @property
    def tools_path(self) -> Path:
        return self.data_dir_path / "references" / "tools.json"

    @property
    def torque_path(self) -> Path:
        return self.data_dir_path / "references" / "torque-values.json"


settings = Settings()
