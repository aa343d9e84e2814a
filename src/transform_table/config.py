"""Configuration management for the table transform service.

This module loads the plugin-wide rendering defaults and server settings from
environment variables and an optional TOML config file.
"""

import logging
import os
import sys
from types import ModuleType
from typing import Any, Optional

# Configure logging
logger = logging.getLogger(__name__)

# Handle tomllib/tomli for Python 3.11+ vs earlier versions
tomllib: ModuleType | None
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

CONFIG_SECTION = "transform_table"

TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


class Config:
    """Configuration for the table transform service.

    Configuration is loaded with the following priority:
    1. Environment variables (highest priority)
    2. Configuration file (TOML format, ``[transform_table]`` table)
    3. Default values (lowest priority)

    All values are optional. An empty configuration renders tables with no
    extra stylesheets or scripts.
    """

    def __init__(
        self,
        css: Optional[list[str]] = None,
        scripts: Optional[list[str]] = None,
        table_attributes: Optional[str] = None,
        datatable: bool = False,
        include_collection_length: bool = False,
        exclude_sub_arrays: bool = False,
        listen_port: int = 8080,
    ):
        """Initialize configuration with validated values.

        Args:
            css: Stylesheet URLs linked from every rendered table
            scripts: Script URLs included with every rendered table
            table_attributes: Raw attribute string for the <table> tag
            datatable: Enable the DataTables sorting/pagination enhancement
            include_collection_length: Add a length column for list values
            exclude_sub_arrays: Leave list values out of the table
            listen_port: Port for HTTP server

        Raises:
            ConfigError: If configuration values are invalid
        """
        self.css = self._validate_urls("css", css or [])
        self.scripts = self._validate_urls("scripts", scripts or [])
        self.table_attributes = table_attributes
        self.datatable = datatable
        self.include_collection_length = include_collection_length
        self.exclude_sub_arrays = exclude_sub_arrays
        self.listen_port = listen_port

        if not (1 <= self.listen_port <= 65535):
            logger.error(f"Invalid listen_port: {self.listen_port}")
            raise ConfigError("Invalid listen_port: must be between 1 and 65535")

    @classmethod
    def from_env_and_file(cls, config_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables and optional config file.

        Environment variables take precedence over config file values.

        Environment variables:
        - TRANSFORM_TABLE_CSS: Comma-separated stylesheet URLs
        - TRANSFORM_TABLE_SCRIPTS: Comma-separated script URLs
        - TRANSFORM_TABLE_ATTRIBUTES: Attributes for the <table> tag
        - TRANSFORM_TABLE_DATATABLE: Enable DataTables (1/true/yes/on)
        - TRANSFORM_TABLE_INCLUDE_COLLECTION_LENGTH: Add list length columns
        - TRANSFORM_TABLE_EXCLUDE_SUB_ARRAYS: Omit list values
        - LISTEN_PORT: HTTP server port (default: 8080)

        Args:
            config_file: Path to TOML config file (optional)

        Returns:
            Config instance with loaded values

        Raises:
            ConfigError: If configuration is invalid
        """
        config_values: dict[str, Any] = {}

        if config_file:
            config_values.update(cls._load_from_file(config_file))

        if "TRANSFORM_TABLE_CSS" in os.environ:
            config_values["css"] = _split_list(os.environ["TRANSFORM_TABLE_CSS"])
        if "TRANSFORM_TABLE_SCRIPTS" in os.environ:
            config_values["scripts"] = _split_list(
                os.environ["TRANSFORM_TABLE_SCRIPTS"]
            )
        if "TRANSFORM_TABLE_ATTRIBUTES" in os.environ:
            config_values["table_attributes"] = os.environ[
                "TRANSFORM_TABLE_ATTRIBUTES"
            ]
        for env_name, key in (
            ("TRANSFORM_TABLE_DATATABLE", "datatable"),
            ("TRANSFORM_TABLE_INCLUDE_COLLECTION_LENGTH", "include_collection_length"),
            ("TRANSFORM_TABLE_EXCLUDE_SUB_ARRAYS", "exclude_sub_arrays"),
        ):
            if env_name in os.environ:
                config_values[key] = os.environ[env_name].lower() in TRUE_VALUES
        if "LISTEN_PORT" in os.environ:
            try:
                config_values["listen_port"] = int(os.environ["LISTEN_PORT"])
            except ValueError:
                raise ConfigError("Invalid LISTEN_PORT: must be an integer")

        config = cls(**config_values)
        logger.info(f"Configuration loaded: {config}")
        return config

    @staticmethod
    def _load_from_file(config_file: str) -> dict[str, Any]:
        """Load configuration from TOML file.

        Rendering defaults are read from the ``[transform_table]`` table;
        ``listen_port`` may also appear at the top level.

        Args:
            config_file: Path to TOML config file

        Returns:
            Dictionary of configuration values

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        if tomllib is None:
            raise ConfigError(
                "TOML support not available. Install tomli for Python < 3.11"
            )

        try:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {config_file}")
        except Exception as e:
            raise ConfigError(f"Failed to parse config file: {e}")

        section = data.get(CONFIG_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigError(f"[{CONFIG_SECTION}] must be a table")

        config: dict[str, Any] = {}
        if "listen_port" in data:
            config["listen_port"] = data["listen_port"]
        for key in (
            "css",
            "scripts",
            "table_attributes",
            "listen_port",
        ):
            if key in section:
                config[key] = section[key]
        for key in ("datatable", "include_collection_length", "exclude_sub_arrays"):
            if key in section:
                config[key] = bool(section[key])

        if not isinstance(config.get("listen_port", 8080), int):
            raise ConfigError("Invalid listen_port: must be an integer")

        return config

    @staticmethod
    def _validate_urls(name: str, urls: Any) -> list[str]:
        """Validate a list of asset URLs.

        Raises:
            ConfigError: If the value is not a list of non-empty strings
        """
        if not isinstance(urls, (list, tuple)):
            logger.error(f"Invalid {name}: expected a list, got {type(urls).__name__}")
            raise ConfigError(f"Invalid {name}: must be a list of URLs")
        for url in urls:
            if not isinstance(url, str) or not url.strip():
                logger.error(f"Invalid {name} entry: {url!r}")
                raise ConfigError(f"Invalid {name} entry: {url!r}")
        return list(urls)

    def render_defaults(self) -> dict[str, Any]:
        """Plugin-wide rendering defaults for ``TransformTable``."""
        defaults: dict[str, Any] = {
            "css": list(self.css),
            "scripts": list(self.scripts),
            "datatable": self.datatable,
            "include_collection_length": self.include_collection_length,
            "exclude_sub_arrays": self.exclude_sub_arrays,
        }
        if self.table_attributes:
            defaults["table_attributes"] = self.table_attributes
        return defaults

    def __repr__(self) -> str:
        """String representation of configuration."""
        return (
            f"Config(css={self.css!r}, "
            f"scripts={self.scripts!r}, "
            f"table_attributes={self.table_attributes!r}, "
            f"datatable={self.datatable}, "
            f"listen_port={self.listen_port})"
        )


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]
