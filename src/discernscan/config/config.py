"""
Configuration management for DiscernScan using Pydantic.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discernscan.exceptions import ConfigurationError

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

EvaluationStrategyName = Literal["background_response", "chat_completion"]

# --- Nested Configuration Models ---


class HttpSettings(BaseModel):
    """Outbound HTTP configuration shared by page fetches and search calls."""

    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds.")
    max_retries: int = Field(default=2, ge=0, description="Retries for 429/5xx responses and connection errors.")
    backoff_base_seconds: float = Field(default=1.0, ge=0, description="First retry delay; doubles per attempt.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent with every request.")
    max_redirects: int = Field(default=10, ge=0)


class ExtractionSettings(BaseModel):
    """Configuration for turning URLs into analyzable text."""

    max_content_chars: int = Field(
        default=8000, gt=0, description="Extracted text is truncated to this many characters."
    )
    transcripts_enabled: bool = Field(default=True, description="Fetch video transcripts where supported.")
    transcript_languages: List[str] = Field(
        default_factory=lambda: ["en", "pt"],
        description="Preferred transcript languages, most preferred first.",
    )
    transcript_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Upper bound on one transcript fetch."
    )

    @field_validator("transcript_languages")
    @classmethod
    def validate_languages(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("transcript_languages must contain at least one language code")
        return v


class SearchSettings(BaseModel):
    """SerpApi search provider configuration."""

    api_key: Optional[SecretStr] = Field(default=None, description="SerpApi key.")
    endpoint: str = Field(default="https://serpapi.com/search.json")
    quantity_compensation: int = Field(
        default=1,
        ge=0,
        description="Extra results requested to make up for provider undercounts.",
    )
    max_quantity: int = Field(default=100, ge=1, description="Largest quantity a caller may ask for.")
    country: Optional[str] = Field(default=None, description="Google 'gl' parameter, e.g. 'br'.")
    language: Optional[str] = Field(default=None, description="Google 'hl' parameter, e.g. 'pt-br'.")
    google_domain: Optional[str] = Field(default=None, description="e.g. 'google.com.br'.")


class EvaluatorSettings(BaseModel):
    """Language-model evaluator configuration."""

    api_key: Optional[SecretStr] = Field(default=None, description="OpenAI API key.")
    base_url: Optional[str] = Field(default=None, description="Alternative OpenAI-compatible endpoint.")
    model: str = Field(default="gpt-4o-mini")
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    strategies: List[EvaluationStrategyName] = Field(
        default_factory=lambda: ["background_response", "chat_completion"],
        description="Evaluation strategies tried in order until one succeeds.",
    )
    max_attempts: int = Field(default=3, ge=1, description="Attempts per strategy for transient failures.")
    backoff_base_seconds: float = Field(default=1.0, ge=0, description="Delay before the 2nd attempt; doubles.")
    backoff_max_seconds: float = Field(default=30.0, ge=0)
    poll_interval_seconds: float = Field(default=10.0, ge=0, description="Background job polling interval.")
    max_polls: int = Field(default=60, ge=1, description="Background job polls before giving up.")
    request_timeout: float = Field(default=120.0, gt=0, description="Timeout for a single provider request.")

    @field_validator("strategies")
    @classmethod
    def validate_strategies(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("strategies must contain at least one strategy")
        if len(set(v)) != len(v):
            raise ValueError("strategies must not repeat")
        return v


class PipelineSettings(BaseModel):
    """Scheduling policy for the analysis pipeline."""

    evaluation_interval_seconds: float = Field(
        default=7.0,
        ge=0,
        description="Minimum spacing between consecutive evaluator calls.",
    )


class MonitoringConfig(BaseModel):
    """Logging and metrics configuration."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: Optional[str] = Field(default=None, description="Path to log file. If None, logs to console.")
    json_logs: bool = Field(default=False, description="Render console logs as JSON.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "DiscernScan"
    http: HttpSettings = Field(default_factory=HttpSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    evaluator: EvaluatorSettings = Field(default_factory=EvaluatorSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="DISCERN_", env_nested_delimiter="__", case_sensitive=False)

    @model_validator(mode="after")
    def fill_provider_keys(self) -> "Config":
        """Fall back to the providers' conventional environment variables."""
        if self.evaluator.api_key is None and os.getenv("OPENAI_API_KEY"):
            self.evaluator.api_key = SecretStr(os.environ["OPENAI_API_KEY"])
        if self.search.api_key is None:
            key = os.getenv("SERP_API_KEY") or os.getenv("SERPAPI_API_KEY")
            if key:
                self.search.api_key = SecretStr(key)
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
        return cls(**(yaml_data or {}))

    def require_credentials(self, *, search: bool = True) -> None:
        """Fail fast when credentials needed for a run are missing."""
        missing = []
        if self.evaluator.api_key is None or not self.evaluator.api_key.get_secret_value():
            missing.append("evaluator.api_key (DISCERN_EVALUATOR__API_KEY or OPENAI_API_KEY)")
        if search and (self.search.api_key is None or not self.search.api_key.get_secret_value()):
            missing.append("search.api_key (DISCERN_SEARCH__API_KEY or SERP_API_KEY)")
        if missing:
            raise ConfigurationError("Missing required configuration: " + ", ".join(missing))


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "discernscan.yaml",
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path``, a discovered config file, or the environment."""
    config_path = path or find_config_file()
    if config_path:
        log.info("Loading configuration from: %s", config_path)
        return Config.from_yaml(config_path)
    log.info("No config file found. Using environment and default settings.")
    return Config()
