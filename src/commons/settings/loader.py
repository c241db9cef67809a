"""Settings loader with hierarchical configuration support."""

import json
import os
from pathlib import Path
from typing import Any, get_args

from pydantic import BaseModel

from src.commons.settings.models import Settings

# Environment names used by existing job launchers, mapped to nested settings.
LEGACY_ENV_ALIASES: dict[str, tuple[str, ...]] = {
    "INPUT_S3_URL": ("job", "input_url"),
    "OUTPUT_BUCKET_NAME": ("job", "output_bucket"),
    "VIDEO_FILE_KEY": ("job", "video_id"),
    "AWS_REGION": ("blob_storage", "region"),
    "AWS_ACCESS_KEY": ("blob_storage", "access_key"),
    "AWS_SECRET_ACCESS_KEY": ("blob_storage", "secret_key"),
    "MONGO_URI": ("document_db", "connection_string"),
}


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Prefixed environment variables (HLS_PIPELINE__SECTION__FIELD)
    2. Legacy worker environment variables (INPUT_S3_URL, MONGO_URI, ...)
    3. Environment-specific config (appsettings.{env}.json)
    4. Base config (appsettings.json)
    """

    ENV_PREFIX = "HLS_PIPELINE__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to HLS_PIPELINE__APP__ENVIRONMENT or 'dev'.
        """
        self.config_dir = config_dir or Path("config")
        self.environment = environment or os.getenv(
            "HLS_PIPELINE__APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config = self._load_json("appsettings.json")

        env_config = self._load_json(f"appsettings.{self.environment}.json")
        config = self._deep_merge(config, env_config)

        config = self._deep_merge(config, self._load_legacy_env_vars())

        env_overrides = self._load_env_vars()
        config = self._deep_merge(config, env_overrides)

        return Settings(**config)

    def _load_legacy_env_vars(self) -> dict[str, Any]:
        """Map the worker's historical environment variables to settings.

        Values are kept as strings; blank values are ignored.
        """
        result: dict[str, Any] = {}
        for env_name, key_path in LEGACY_ENV_ALIASES.items():
            value = os.environ.get(env_name)
            if not value:
                continue
            current = result
            for part in key_path[:-1]:
                current = current.setdefault(part, {})
            current[key_path[-1]] = value
        return result

    def _load_env_vars(self) -> dict[str, Any]:
        """Load environment variables with the HLS_PIPELINE__ prefix.

        Parses env vars like HLS_PIPELINE__JOB__OUTPUT_BUCKET into nested dicts:
        {"job": {"output_bucket": "value"}}

        Returns:
            Nested dictionary of environment variable overrides.
        """
        result: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            key_path = key[len(self.ENV_PREFIX) :].lower().split("__")

            current = result
            for part in key_path[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]

            if self._is_string_field(key_path):
                current[key_path[-1]] = value
            else:
                current[key_path[-1]] = self._coerce_value(value)

        return result

    def _is_string_field(self, key_path: list[str]) -> bool:
        """Whether the settings field at key_path is declared as a string.

        Such values are passed through untouched so IDs like "0042" or bucket
        names like "1e3" are not turned into numbers.
        """
        model: type[BaseModel] = Settings
        for part in key_path[:-1]:
            field = model.model_fields.get(part)
            if field is None:
                return False
            annotation = field.annotation
            if not (isinstance(annotation, type) and issubclass(annotation, BaseModel)):
                return False
            model = annotation

        field = model.model_fields.get(key_path[-1])
        if field is None:
            return False
        return field.annotation is str or str in get_args(field.annotation)

    def _coerce_value(self, value: str) -> Any:
        """Coerce string environment variable to appropriate type.

        Args:
            value: String value from environment.

        Returns:
            Coerced value (bool, int, float, or original string).
        """
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load JSON config file.

        Args:
            filename: Name of the config file.

        Returns:
            Parsed JSON as dictionary, or empty dict if file doesn't exist.
        """
        path = self.config_dir / filename
        if path.exists():
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        return {}

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _settings = loader.load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
