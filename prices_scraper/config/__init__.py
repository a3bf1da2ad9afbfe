"""
Configuration module for the price scraper.

Provides:
- YAML config loading with validation
- Default settings (settings.yml)
- Environment variable substitution
"""

from .loader import ConfigError, ConfigLoader, ScraperConfig, load_config

__all__ = ["ConfigError", "ConfigLoader", "ScraperConfig", "load_config"]
