"""Configuration for the restock monitor."""
import json
import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"
LOCAL_SETTINGS_FILE = "settings.local.json"


class ConfigError(Exception):
    """Raised when settings are missing, malformed or inconsistent."""


@dataclass
class TrackedProduct:
    name: str
    url: str
    max_price: float | None = None  # None = use global default, 0 = no limit


@dataclass
class Config:
    # Amazon account
    login: bool = False
    amazon_username: str = ""
    amazon_password: str = ""

    # Autobuy
    autobuy: bool = False
    autobuy_limit: int = 1
    purchase_settle_ms: int = 3000

    # Monitoring
    max_price: float = 0.0  # global default, 0 = accept any price
    take_screenshots: bool = True
    sleep_time: float = 60.0  # seconds between passes
    products: list[TrackedProduct] = field(default_factory=list)

    # Retailer
    home_url: str = "https://amazon.co.uk/"
    currency_symbol: str = "£"

    # Login settings
    login_timeout: int = 5000  # ms per step
    login_attempts: int = 1  # 1 = abort the run on the first failure
    retry_backoff: float = 2.0  # exponential backoff multiplier

    # Notifications
    notification_title: str = "Restock Monitor"
    open_browser: bool = True
    discord_webhook_url: str = field(
        default_factory=lambda: os.environ.get("DISCORD_WEBHOOK_URL", "")
    )

    # Output
    screenshots_dir: str = "screenshots"
    logs_dir: str = "logs"

    # Browser settings
    headless: bool = True
    request_timeout: int = 30000  # ms
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )

    @classmethod
    def from_settings(cls, settings: dict, **overrides) -> "Config":
        """Build a Config from a settings.json-style dict (camelCase keys)."""
        cards = settings.get("cards", [])
        if not isinstance(cards, list):
            raise ConfigError(f"cards must be a list (got {cards!r})")
        products = []
        for card in cards:
            try:
                max_price = card.get("maxPrice")
                products.append(TrackedProduct(
                    name=card["name"],
                    url=card["url"],
                    max_price=None if max_price is None else _number(max_price, float, "maxPrice"),
                ))
            except (KeyError, AttributeError) as e:
                raise ConfigError(f"Invalid card entry {card!r}: {e}") from e

        defaults = cls()
        config = cls(
            login=_flag(settings, "login", defaults.login),
            amazon_username=settings.get("amazonUsername", defaults.amazon_username),
            amazon_password=settings.get("amazonPassword", defaults.amazon_password),
            autobuy=_flag(settings, "autobuy", defaults.autobuy),
            autobuy_limit=_number(settings.get("autobuyLimit", defaults.autobuy_limit), int, "autobuyLimit"),
            max_price=_number(settings.get("maxPrice", defaults.max_price), float, "maxPrice"),
            take_screenshots=_flag(settings, "takeScreenshots", defaults.take_screenshots),
            sleep_time=_number(settings.get("sleepTime", defaults.sleep_time), float, "sleepTime"),
            products=products,
        )
        for name, value in overrides.items():
            setattr(config, name, value)
        return config


def _flag(settings: dict, key: str, default: bool) -> bool:
    value = settings.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false (got {value!r})")
    return value


def _number(value, kind: type, key: str):
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number (got {value!r})")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number (got {value!r})") from e


def _read_json(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Malformed settings file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    return data


def load_settings(path: str = SETTINGS_FILE, local_path: str = LOCAL_SETTINGS_FILE) -> dict:
    """Read settings.json and shallow-merge settings.local.json over it.

    The local file is optional; each top-level key it defines replaces the
    primary file's value wholesale (``cards`` included).
    """
    settings = _read_json(path)
    if local_path and os.path.exists(local_path):
        local = _read_json(local_path)
        settings.update(local)
        logger.info(f"Merged {len(local)} override(s) from {local_path}")
    return settings


def validate_config(config: Config):
    """Check credential requirements before anything is launched."""
    has_credentials = bool(config.amazon_username) and bool(config.amazon_password)
    if config.login and not has_credentials:
        raise ConfigError("Login requested but username or password are empty")
    if config.autobuy and not (config.login and has_credentials):
        raise ConfigError(
            "Autobuy requires login to be set as well as your Amazon username and password"
        )
    if config.autobuy_limit < 0:
        raise ConfigError(f"autobuyLimit must not be negative (got {config.autobuy_limit})")
    if config.login_attempts < 1:
        raise ConfigError(f"login_attempts must be at least 1 (got {config.login_attempts})")
