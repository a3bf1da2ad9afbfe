"""
YAML configuration loader with validation.

Loads scraper settings from YAML files with:
- Environment variable substitution
- Default values merged under user values
- Validation of numeric settings
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import yaml
import structlog

from prices_scraper.core.models import Category
from prices_scraper.strategies.base import DEFAULT_SYP_PER_USD, ExtractionOptions

logger = structlog.get_logger(__name__)


DEFAULT_SETTINGS_FILE = "settings.yml"


class ConfigError(Exception):
    """Missing or invalid configuration."""


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, empty string (with a warning) if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


def _merge(defaults: dict, overrides: dict) -> dict:
    """Recursively merge overrides over defaults."""
    merged = dict(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass
class FetchSettings:
    timeout: float = 30.0
    max_attempts: int = 3
    initial_backoff: float = 2.0
    prime_cookies: bool = True
    headers: dict = field(default_factory=dict)


@dataclass
class BrowserSettings:
    enabled: bool = False
    settle_delay: float = 3.0
    wait_until: str = "networkidle"
    timeout: float = 60.0


@dataclass
class CryptoApiSettings:
    enabled: bool = False
    url: str = "https://api.coingecko.com/api/v3/simple/price"
    # CoinGecko id -> (name, symbol); empty means the source defaults
    coins: dict = field(default_factory=dict)


@dataclass
class ScraperConfig:
    """
    Settings for one scraping run.

    Attributes:
        base_url: Site root
        home_path: Page requested to prime session cookies
        paths: Category value -> path on the site
        data_dir: Directory for the JSON documents
    """

    base_url: str = "https://sp-today.com"
    home_path: str = "/"
    paths: dict = field(default_factory=lambda: {c.value: c.path for c in Category})
    data_dir: str = "data"
    fetch: FetchSettings = field(default_factory=FetchSettings)
    browser: BrowserSettings = field(default_factory=BrowserSettings)
    crypto_api: CryptoApiSettings = field(default_factory=CryptoApiSettings)
    extraction: ExtractionOptions = field(default_factory=ExtractionOptions)

    def url_for(self, category: Category) -> str:
        """Absolute URL of a category page."""
        path = self.paths.get(category.value, category.path)
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    @property
    def home_url(self) -> str:
        return urljoin(self.base_url.rstrip("/") + "/", self.home_path.lstrip("/"))

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ScraperConfig":
        """
        Build config from a parsed YAML mapping.

        Missing keys keep their defaults.

        Raises:
            ConfigError: If a value has the wrong type or range
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")

        defaults = cls()
        try:
            fetch = _merge(vars(defaults.fetch), data.get("fetch") or {})
            browser = _merge(vars(defaults.browser), data.get("browser") or {})
            crypto_api = _merge(vars(defaults.crypto_api), data.get("crypto_api") or {})
            extraction = data.get("extraction") or {}

            syp_per_usd = extraction.get("syp_per_usd", DEFAULT_SYP_PER_USD)
            config = cls(
                base_url=str(data.get("base_url") or defaults.base_url),
                home_path=str(data.get("home_path") or defaults.home_path),
                paths=_merge(defaults.paths, data.get("paths") or {}),
                data_dir=str(data.get("data_dir") or defaults.data_dir),
                fetch=FetchSettings(
                    timeout=float(fetch["timeout"]),
                    max_attempts=int(fetch["max_attempts"]),
                    initial_backoff=float(fetch["initial_backoff"]),
                    prime_cookies=bool(fetch["prime_cookies"]),
                    headers={str(k): str(v) for k, v in (fetch["headers"] or {}).items()},
                ),
                browser=BrowserSettings(
                    enabled=bool(browser["enabled"]),
                    settle_delay=float(browser["settle_delay"]),
                    wait_until=str(browser["wait_until"]),
                    timeout=float(browser["timeout"]),
                ),
                crypto_api=CryptoApiSettings(
                    enabled=bool(crypto_api["enabled"]),
                    url=str(crypto_api["url"]),
                    coins=_parse_coins(crypto_api["coins"]),
                ),
                extraction=ExtractionOptions(
                    syp_per_usd=float(syp_per_usd) if syp_per_usd is not None else None,
                    gold_min=float(extraction.get("gold_min", defaults.extraction.gold_min)),
                    gold_max=float(extraction.get("gold_max", defaults.extraction.gold_max)),
                ),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        config.validate()
        return config

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigError: On the first invalid value
        """
        if self.fetch.max_attempts < 1:
            raise ConfigError("fetch.max_attempts must be at least 1")
        if self.fetch.timeout <= 0 or self.browser.timeout <= 0:
            raise ConfigError("timeouts must be positive")
        if self.fetch.initial_backoff < 0 or self.browser.settle_delay < 0:
            raise ConfigError("delays must not be negative")
        if self.extraction.gold_min >= self.extraction.gold_max:
            raise ConfigError("extraction.gold_min must be below extraction.gold_max")
        if self.extraction.syp_per_usd is not None and self.extraction.syp_per_usd <= 0:
            raise ConfigError("extraction.syp_per_usd must be positive or null")


def _parse_coins(data) -> dict:
    """Turn ``{id: {name, symbol}}`` into ``{id: (name, symbol)}``."""
    coins = {}
    for coin_id, entry in (data or {}).items():
        if isinstance(entry, dict):
            name = entry.get("name") or coin_id
            symbol = entry.get("symbol") or coin_id
        else:
            name, symbol = entry
        coins[str(coin_id)] = (str(name), str(symbol).upper())
    return coins


class ConfigLoader:
    """
    Configuration loader for scraper settings.

    Loads YAML config files and validates them into ScraperConfig.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict

        Raises:
            ConfigError: If the file is missing or not valid YAML
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        # Substitute environment variables
        content = substitute_env_vars(content)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        return config or {}

    def load_config(self, filename: str = DEFAULT_SETTINGS_FILE) -> ScraperConfig:
        """
        Load and validate scraper settings.

        Args:
            filename: Settings file name

        Returns:
            ScraperConfig
        """
        return ScraperConfig.from_dict(self.load_file(filename))


def load_config(config_path: Optional[str] = None) -> ScraperConfig:
    """
    Convenience function to load settings.

    Args:
        config_path: Optional path to a settings YAML file

    Returns:
        ScraperConfig
    """
    if config_path:
        path = Path(config_path)
        return ConfigLoader(str(path.parent)).load_config(path.name)

    return ConfigLoader().load_config()
