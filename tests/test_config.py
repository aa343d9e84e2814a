"""Unit tests for configuration loading and startup validation.

Tests configuration loading including:
- Defaults when nothing is configured
- Environment variable overrides
- TOML config file loading
- Invalid values
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from transform_table.config import Config, ConfigError


class TestConfigLoading:
    """Test configuration loading scenarios."""

    def test_defaults_without_any_configuration(self):
        """Test that an empty environment yields empty rendering defaults."""
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_env_and_file()

        assert config.css == []
        assert config.scripts == []
        assert config.table_attributes is None
        assert config.datatable is False
        assert config.listen_port == 8080

    def test_environment_overrides(self):
        """Test that environment variables are parsed into defaults."""
        env = {
            "TRANSFORM_TABLE_CSS": "a.css, b.css",
            "TRANSFORM_TABLE_SCRIPTS": "a.js",
            "TRANSFORM_TABLE_ATTRIBUTES": 'class="wide"',
            "TRANSFORM_TABLE_DATATABLE": "yes",
            "TRANSFORM_TABLE_EXCLUDE_SUB_ARRAYS": "1",
            "LISTEN_PORT": "9090",
        }

        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env_and_file()

        assert config.css == ["a.css", "b.css"]
        assert config.scripts == ["a.js"]
        assert config.table_attributes == 'class="wide"'
        assert config.datatable is True
        assert config.exclude_sub_arrays is True
        assert config.include_collection_length is False
        assert config.listen_port == 9090

    def test_load_from_toml_file(self):
        """Test that values are read from the [transform_table] table."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "config.toml"
            config_file.write_text(
                "listen_port = 8181\n"
                "\n"
                "[transform_table]\n"
                'css = ["file.css"]\n'
                "include_collection_length = true\n"
            )

            with patch.dict(os.environ, {}, clear=True):
                config = Config.from_env_and_file(str(config_file))

        assert config.css == ["file.css"]
        assert config.include_collection_length is True
        assert config.listen_port == 8181

    def test_environment_takes_precedence_over_file(self):
        """Test that environment variables win over the config file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "config.toml"
            config_file.write_text('[transform_table]\ncss = ["file.css"]\n')

            env = {"TRANSFORM_TABLE_CSS": "env.css"}
            with patch.dict(os.environ, env, clear=True):
                config = Config.from_env_and_file(str(config_file))

        assert config.css == ["env.css"]

    def test_missing_config_file(self):
        """Test that a missing config file is reported."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                Config.from_env_and_file("/nonexistent/config.toml")

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_css_in_file(self):
        """Test that css must be a list of URLs."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "config.toml"
            config_file.write_text('[transform_table]\ncss = "single.css"\n')

            with patch.dict(os.environ, {}, clear=True):
                with pytest.raises(ConfigError) as exc_info:
                    Config.from_env_and_file(str(config_file))

        assert "css" in str(exc_info.value)

    def test_startup_failure_non_integer_listen_port(self):
        """Test that a non-numeric port is rejected."""
        with patch.dict(os.environ, {"LISTEN_PORT": "http"}, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                Config.from_env_and_file()

        assert "integer" in str(exc_info.value).lower()

    def test_startup_failure_invalid_listen_port(self):
        """Test that startup fails with invalid listen port."""
        env = {"LISTEN_PORT": "99999"}  # Out of valid range

        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                Config.from_env_and_file()

        assert "listen_port" in str(exc_info.value).lower()

    def test_render_defaults(self):
        """Test the defaults mapping handed to the extension."""
        config = Config(css=["a.css"], table_attributes='class="x"', datatable=True)

        assert config.render_defaults() == {
            "css": ["a.css"],
            "scripts": [],
            "datatable": True,
            "include_collection_length": False,
            "exclude_sub_arrays": False,
            "table_attributes": 'class="x"',
        }

    def test_render_defaults_omit_empty_table_attributes(self):
        """Test that unset table attributes are not forwarded."""
        assert "table_attributes" not in Config().render_defaults()
