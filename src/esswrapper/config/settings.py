"""Wrapper settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. CLI overrides
  2. YAML config file (if specified)
  3. Environment variables (ESSWRAPPER_ prefix) and .env
  4. Default values
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="console", description="Log format: json, console")


class EssSettings(BaseSettings):
    """Connection settings for the search server.

    Nested settings use double underscores: ESSWRAPPER_OBSERVABILITY__LOG_LEVEL=debug

    Example:
        ESSWRAPPER_HOST=search.internal
        ESSWRAPPER_PORT=9200
        ESSWRAPPER_INDEX=jobs
    """

    model_config = {
        "env_prefix": "ESSWRAPPER_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    host: str = Field(default="localhost", description="Search server host")
    port: int = Field(default=9200, ge=1, le=65535, description="Search server port")
    scheme: str = Field(default="http", description="URL scheme: http or https")
    index: str = Field(default="default", min_length=1, description="Target index name")
    mapping_file: Path | None = Field(default=None, description="Mapping file applied when the index is created")
    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    username: str | None = Field(default=None, description="HTTP basic-auth username")
    password: str | None = Field(default=None, description="HTTP basic-auth password")
    verify_certs: bool = Field(default=True, description="Whether to verify TLS certificates")

    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("scheme")
    @classmethod
    def _check_scheme(cls, v: str) -> str:
        v = v.lower()
        if v not in ("http", "https"):
            raise ValueError(f"Unsupported scheme: {v}")
        return v

    @field_validator("index")
    @classmethod
    def _check_index(cls, v: str) -> str:
        # Index names are lowercase and cannot contain path separators
        if v != v.lower() or "/" in v or " " in v:
            raise ValueError(f"Invalid index name: {v!r}")
        return v

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @classmethod
    def from_yaml(cls, path: str | Path) -> EssSettings:
        """Load settings from a YAML configuration file.

        YAML values are passed as init arguments, so they override environment
        variables. Settings the file leaves out still come from the environment.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated EssSettings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
