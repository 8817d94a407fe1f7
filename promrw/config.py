"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from promrw.labels import Label, labels_from_mapping, parse_label


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Priority:
    1. Explicitly provided config_path
    2. ~/.promrw/config.yaml (default location)
    3. Empty dict if no file exists

    Example file::

        remote_write:
          url: https://prometheus.example.com/api/v1/write
          user_agent: billing-service/1.4.0
          timeout_seconds: 5
          labels:
            env: prod
        logging:
          level: DEBUG

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary of configuration values (flattened from nested YAML)
    """
    if config_path is None:
        config_path = Path.home() / ".promrw" / "config.yaml"

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            yaml_data = yaml.safe_load(f) or {}

        flattened = {}

        if "remote_write" in yaml_data:
            remote_write = yaml_data["remote_write"]
            for key in (
                "url",
                "user_agent",
                "timeout_seconds",
                "compression",
                "labels",
                "headers",
            ):
                if key in remote_write:
                    flattened[f"remote_write_{key}"] = remote_write[key]

        if "logging" in yaml_data:
            logging = yaml_data["logging"]
            if "level" in logging:
                flattened["log_level"] = logging["level"]
            if "format" in logging:
                flattened["log_format"] = logging["format"]

        return flattened

    except (OSError, yaml.YAMLError, TypeError) as e:
        import warnings

        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


_config_path: Path | None = None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """
    Custom settings source that loads configuration from YAML file.

    This allows YAML config to be loaded with proper priority in the settings chain.
    """

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        """Not used since we override __call__."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        return load_yaml_config(_config_path)


def _default_user_agent() -> str:
    from promrw import __version__

    return f"promrw/{__version__}"


class Settings(BaseSettings):
    """
    promrw configuration settings.

    Configuration priority (highest to lowest):
    1. Environment variables (e.g., REMOTE_WRITE_URL=https://...)
    2. YAML configuration file (~/.promrw/config.yaml)
    3. Default values defined in this class
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    remote_write_url: str | None = Field(
        default=None, description="Remote write endpoint URL"
    )
    remote_write_user_agent: str = Field(
        default_factory=_default_user_agent,
        description="Identity sent as the User-Agent header",
    )
    remote_write_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Request timeout in seconds"
    )
    remote_write_compression: Literal["gzip", "snappy"] = Field(
        default="gzip", description="Payload compression"
    )
    remote_write_labels: dict[str, str] = Field(
        default_factory=dict,
        description="Global labels applied to every pushed series",
    )
    remote_write_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers, e.g. Authorization",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text", description="Log format"
    )

    @field_validator("remote_write_labels", mode="before")
    @classmethod
    def parse_labels(cls, v: Any) -> Any:
        """Accept a list of name=value strings as well as a mapping."""
        if isinstance(v, (list, tuple)):
            parsed = [parse_label(item) for item in v]
            return {label.name: label.value for label in parsed}
        return v

    @field_validator("remote_write_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate the endpoint scheme."""
        if v is not None and not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("Remote write URL must start with http:// or https://")
        return v

    @property
    def global_labels(self) -> list[Label]:
        """Global labels as Label objects."""
        return labels_from_mapping(self.remote_write_labels)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize settings sources priority.

        Priority order (highest to lowest):
        1. Explicit kwargs (init_settings) - for testing and programmatic config
        2. Environment variables
        3. YAML configuration file
        4. .env file
        5. Field defaults
        """
        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls),
            dotenv_settings,
        )


_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """
    Get global settings instance.

    Args:
        config_path: Optional path to YAML config file (defaults to ~/.promrw/config.yaml)
        reload: If True, force reload settings (useful for testing)

    Returns:
        Settings instance with merged configuration
    """
    global _settings, _config_path
    if _settings is None or reload:
        _config_path = config_path

        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings, _config_path
    _settings = None
    _config_path = None
