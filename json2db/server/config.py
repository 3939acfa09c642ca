import json
import os
from pathlib import Path
from typing import get_origin

from pydantic import BaseModel, Field

from json2db.store.local import DEFAULT_MAX_DEPTH


# Environment variable constants
CONFIG_FILE_PATH_ENV = "JSON2DB_CONFIG_PATH"
ENV_PREFIX = "JSON2DB_"

# Default config file location
DEFAULT_CONFIG_FILE_PATH = "json2db_config.json"


class Config(BaseModel):
    """
    Immutable configuration for a json2db server.
    """

    root_path: Path = Field(
        default=Path("json2db"),
        description="The directory holding every document and collection.",
    )
    session_api_keys: list[str] = Field(
        default_factory=list,
        description=(
            "List of valid session API keys used to authenticate incoming requests. "
            "Empty list implies the server will be unsecured. Any key in this list "
            "will be accepted for authentication."
        ),
    )
    allow_cors_origins: list[str] = Field(
        default_factory=list,
        description=(
            "Set of CORS origins permitted by this server (Anything from localhost is "
            "always accepted regardless of what's in here)."
        ),
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        description="Deepest directory nesting accepted below the root.",
    )
    default_extension: str = Field(
        default="json",
        description="Extension given to created documents without X-File-Extension.",
    )
    search_default_count: int = Field(
        default=20,
        ge=0,
        description="How many documents a search returns when no count is given.",
    )
    model_config = {"frozen": True}

    def _parse_env_value(self, env_value: str, field_type: type | None):
        """Parse environment variable value based on field type."""
        if field_type is bool:
            return env_value.lower() in ("true", "1", "yes", "on")
        elif field_type is int:
            return int(env_value)
        elif field_type is float:
            return float(env_value)
        elif field_type is Path:
            return Path(env_value)
        elif get_origin(field_type) is list:
            return env_value.split(",") if env_value.strip() else []
        else:
            return env_value

    def update_with_env_var(self) -> "Config":
        """Create a new Config instance with values overridden from env vars.

        Each field ``foo_bar`` is read from ``JSON2DB_FOO_BAR``.
        """
        mappings = {
            name: f"{ENV_PREFIX}{name.upper()}"
            for name in self.__class__.model_fields
        }
        values = self.model_dump()

        for field_name, env_var in mappings.items():
            env_value = os.getenv(env_var)
            if not env_value or field_name not in values:
                continue

            try:
                field_type = self.__class__.model_fields[field_name].annotation
                if field_type is None:
                    # Skip fields without type annotations
                    continue
                values[field_name] = self._parse_env_value(env_value, field_type)
            except (ValueError, TypeError):
                # Skip invalid environment variable values
                continue

        return self.__class__(**values)

    @classmethod
    def from_json_file(cls, file_path: Path) -> "Config":
        """Load configuration from a JSON file with environment variable overrides."""
        config_data = {}

        # Load from JSON file if it exists
        if file_path.exists():
            with open(file_path) as f:
                config_data = json.load(f) or {}

        if "root_path" in config_data:
            config_data["root_path"] = Path(config_data["root_path"])

        # Create initial config and apply environment variable overrides
        config = cls(**config_data)
        return config.update_with_env_var()


_default_config: Config | None = None


def get_default_config() -> Config:
    """Get the default server config shared across the server"""
    global _default_config
    if _default_config is None:
        # Get config file path from environment variable or use default
        config_file_path = os.getenv(CONFIG_FILE_PATH_ENV, DEFAULT_CONFIG_FILE_PATH)
        config_path = Path(config_file_path)

        # Load configuration from JSON file with environment variable overrides
        _default_config = Config.from_json_file(config_path)
    return _default_config
