"""Configuration management for the concept network.

This module handles environment variable configuration and validation
for the engine and the MCP server, including the concept database location,
centrality parameters and query limits.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


class Config:
    """Configuration manager for the concept network engine.

    Loads and validates environment variables for graph analysis and
    query settings. Overrides passed by the caller (usually CLI arguments)
    take priority over the environment.
    """

    def __init__(self, env_file: Optional[str] = None, config_overrides: Optional[Dict[str, Any]] = None) -> None:
        """Initialize configuration from environment variables with optional overrides.

        Args:
            env_file: Optional path to .env file to load
            config_overrides: Optional dictionary of configuration overrides
        """
        self.config_overrides = config_overrides or {}
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path(".env")
            if env_path.exists():
                load_dotenv(env_path)

        # Concept database (None means the bundled core database)
        self.concepts_file = self._get_optional_path_config(
            "CONCEPTNETWORK_CONCEPTS_FILE",
            override_key="concepts_file"
        )
        self.strict_references = self._get_bool_config(
            "CONCEPTNETWORK_STRICT_REFERENCES",
            False,
            override_key="strict_references"
        )

        # Centrality settings
        self.damping_factor = self._get_float_config(
            "CONCEPTNETWORK_DAMPING_FACTOR",
            0.85,
            override_key="damping_factor"
        )
        self.pagerank_iterations = self._get_int_config(
            "CONCEPTNETWORK_PAGERANK_ITERATIONS",
            50,
            override_key="pagerank_iterations"
        )

        # Query settings
        self.default_user_level = self._get_int_config(
            "CONCEPTNETWORK_DEFAULT_USER_LEVEL",
            5,
            override_key="default_user_level"
        )
        self.max_recommendations = self._get_int_config(
            "CONCEPTNETWORK_MAX_RECOMMENDATIONS",
            5,
            override_key="max_recommendations"
        )
        self.search_limit = self._get_int_config(
            "CONCEPTNETWORK_SEARCH_LIMIT",
            10,
            override_key="search_limit"
        )

        self._validate_config()

    def _get_bool_config(self, key: str, default: bool, override_key: Optional[str] = None) -> bool:
        """Get boolean configuration value with override priority."""
        if override_key and override_key in self.config_overrides:
            return bool(self.config_overrides[override_key])

        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def _get_int_config(self, key: str, default: int, override_key: Optional[str] = None) -> int:
        """Get integer configuration value with override priority."""
        if override_key and override_key in self.config_overrides:
            try:
                return int(self.config_overrides[override_key])
            except (ValueError, TypeError):
                return default

        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def _get_float_config(self, key: str, default: float, override_key: Optional[str] = None) -> float:
        """Get float configuration value with override priority."""
        if override_key and override_key in self.config_overrides:
            try:
                return float(self.config_overrides[override_key])
            except (ValueError, TypeError):
                return default

        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def _get_optional_path_config(self, key: str, override_key: Optional[str] = None) -> Optional[Path]:
        """Get an optional path configuration value with override priority."""
        if override_key and self.config_overrides.get(override_key):
            value = str(self.config_overrides[override_key])
        else:
            value = os.getenv(key)

        if not value:
            return None
        return Path(value).resolve()

    def _validate_config(self) -> None:
        """Validate configuration values."""
        if not (0.0 < self.damping_factor < 1.0):
            raise ValueError("Damping factor must be between 0.0 and 1.0 (exclusive)")
        if self.pagerank_iterations <= 0:
            raise ValueError("PageRank iterations must be positive")
        if self.max_recommendations <= 0:
            raise ValueError("Max recommendations must be positive")
        if self.search_limit <= 0:
            raise ValueError("Search limit must be positive")
        if self.concepts_file is not None and not self.concepts_file.exists():
            raise ValueError(f"Concepts file not found: {self.concepts_file}")

    def get_centrality_config(self) -> Dict[str, Any]:
        """Get centrality-specific configuration."""
        return {
            "damping": self.damping_factor,
            "iterations": self.pagerank_iterations,
        }

    def get_config_summary(self) -> Dict[str, Any]:
        """Get configuration summary for logging and status reporting."""
        return {
            "concepts_file": str(self.concepts_file) if self.concepts_file else None,
            "strict_references": self.strict_references,
            "damping_factor": self.damping_factor,
            "pagerank_iterations": self.pagerank_iterations,
            "default_user_level": self.default_user_level,
            "max_recommendations": self.max_recommendations,
            "search_limit": self.search_limit,
        }
