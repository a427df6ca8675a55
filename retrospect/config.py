"""
Configuration management for Retrospect.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage all settings, including the page
exclusion patterns applied before a page is crawled.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List

import yaml


class ConfigManager:
    """
    Manages configuration loading and access for Retrospect.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        defaults = self._get_default_config()
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            self._config = self._merge(defaults, loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.debug(f"Using default configuration: {e}")
            self._config = defaults

    @staticmethod
    def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively overlay the loaded values on top of the defaults."""
        merged = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = ConfigManager._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "notion": {
                "base_url": "https://api.notion.com/v1",
                "api_version": "2022-06-28",
                "token_env": "NOTION_TOKEN",
                "timeout": 30.0
            },
            "crawl": {
                "page_size": 100,
                "lookback_days": 7,
                "root_search_budget_seconds": 30.0
            },
            "exclusions": {
                "page_patterns": []
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "paths": {
                "log_file": "retrospect.log",
                "prompt_info_file": "prompt_info.md"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "crawl.page_size")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("crawl.page_size")  # Returns 100
            config.get("notion.token_env")  # Returns "NOTION_TOKEN"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def notion_base_url(self) -> str:
        return self.get("notion.base_url", "https://api.notion.com/v1")

    @property
    def notion_api_version(self) -> str:
        return self.get("notion.api_version", "2022-06-28")

    @property
    def notion_token_env(self) -> str:
        return self.get("notion.token_env", "NOTION_TOKEN")

    @property
    def notion_timeout(self) -> float:
        return float(self.get("notion.timeout", 30.0))

    @property
    def page_size(self) -> int:
        """Get the page size used for every paginated request."""
        return int(self.get("crawl.page_size", 100))

    @property
    def lookback_days(self) -> int:
        return int(self.get("crawl.lookback_days", 7))

    @property
    def root_search_budget(self) -> float:
        """Get the wall-clock budget, in seconds, for finding a page's block roots."""
        return float(self.get("crawl.root_search_budget_seconds", 30.0))

    @property
    def page_patterns(self) -> List[str]:
        return list(self.get("exclusions.page_patterns", []) or [])

    @property
    def log_filename(self) -> str:
        return self.get("paths.log_file", "retrospect.log")

    @property
    def prompt_info_filename(self) -> str:
        return self.get("paths.prompt_info_file", "prompt_info.md")

    def should_exclude_page(self, page_title: str, page_url: str) -> bool:
        """
        Check whether a page should be skipped based on the configured regex patterns.

        A pattern excludes the page when it matches anywhere in the title or the URL.
        Invalid patterns are logged and ignored.
        """
        for pattern in self.page_patterns:
            try:
                regex = re.compile(pattern)
            except re.error as e:
                logging.warning(f"Invalid regex pattern '{pattern}': {e}")
                continue

            if regex.search(page_title) or regex.search(page_url):
                logging.debug(
                    f"Page excluded by pattern '{pattern}': title='{page_title}', url='{page_url}'"
                )
                return True
        return False


# Global configuration instance
config = ConfigManager()
