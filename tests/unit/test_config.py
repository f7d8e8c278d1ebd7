"""Tests for the configuration system."""

import os
from unittest.mock import patch

import pytest

from conceptnetwork.config import Config


class TestConfig:
    """Test the configuration management system."""

    def test_default_configuration(self, isolated_env):
        """Test default configuration values."""
        config = Config()

        assert config.concepts_file is None
        assert config.strict_references is False
        assert config.damping_factor == 0.85
        assert config.pagerank_iterations == 50
        assert config.default_user_level == 5
        assert config.max_recommendations == 5
        assert config.search_limit == 10

    def test_environment_variable_loading(self, isolated_env, tmp_path):
        """Test loading configuration from environment variables."""
        concepts_file = tmp_path / "concepts.json"
        concepts_file.write_text("[]")
        env_vars = {
            "CONCEPTNETWORK_CONCEPTS_FILE": str(concepts_file),
            "CONCEPTNETWORK_DAMPING_FACTOR": "0.9",
            "CONCEPTNETWORK_PAGERANK_ITERATIONS": "20",
            "CONCEPTNETWORK_SEARCH_LIMIT": "3",
            "CONCEPTNETWORK_STRICT_REFERENCES": "yes",
        }

        with patch.dict(os.environ, env_vars):
            config = Config()

        assert config.concepts_file == concepts_file.resolve()
        assert config.damping_factor == 0.9
        assert config.pagerank_iterations == 20
        assert config.search_limit == 3
        assert config.strict_references is True

    def test_override_priority(self, isolated_env):
        """Overrides take priority over environment variables."""
        with patch.dict(os.environ, {"CONCEPTNETWORK_DAMPING_FACTOR": "0.5"}):
            config = Config(config_overrides={"damping_factor": 0.7, "pagerank_iterations": "10"})

        assert config.damping_factor == 0.7
        assert config.pagerank_iterations == 10

    def test_query_setting_overrides(self, isolated_env):
        """Query limits and the default level accept overrides too."""
        env_vars = {
            "CONCEPTNETWORK_SEARCH_LIMIT": "4",
            "CONCEPTNETWORK_MAX_RECOMMENDATIONS": "4",
            "CONCEPTNETWORK_DEFAULT_USER_LEVEL": "4",
        }

        with patch.dict(os.environ, env_vars):
            config = Config(
                config_overrides={
                    "search_limit": 3,
                    "max_recommendations": 2,
                    "default_user_level": 7,
                }
            )

        assert config.search_limit == 3
        assert config.max_recommendations == 2
        assert config.default_user_level == 7

    def test_invalid_query_override_rejected(self, isolated_env):
        """Overridden query limits are validated like environment values."""
        with pytest.raises(ValueError, match="Search limit"):
            Config(config_overrides={"search_limit": 0})

    def test_invalid_numbers_fall_back_to_defaults(self, isolated_env):
        """Unparseable values use the defaults."""
        with patch.dict(os.environ, {"CONCEPTNETWORK_SEARCH_LIMIT": "many"}):
            assert Config().search_limit == 10

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"damping_factor": 1.0}, "Damping factor"),
            ({"damping_factor": 0.0}, "Damping factor"),
            ({"pagerank_iterations": 0}, "iterations"),
            ({"concepts_file": "/nonexistent/concepts.json"}, "not found"),
        ],
    )
    def test_validation(self, isolated_env, overrides, message):
        """Invalid settings raise ValueError."""
        with pytest.raises(ValueError, match=message):
            Config(config_overrides=overrides)

    def test_env_file_loaded(self, tmp_path):
        """An explicit .env file is passed to python-dotenv."""
        env_file = tmp_path / ".env"
        env_file.write_text("CONCEPTNETWORK_SEARCH_LIMIT=7\n")

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("CONCEPTNETWORK_SEARCH_LIMIT", None)
            config = Config(env_file=str(env_file))

        assert config.search_limit == 7

    def test_config_summary(self, test_config):
        """The summary lists every setting."""
        summary = test_config.get_config_summary()

        assert summary["concepts_file"] is None
        assert summary["damping_factor"] == 0.85
        assert test_config.get_centrality_config() == {"damping": 0.85, "iterations": 50}
