"""Configuration management for the hub."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.cost import DEFAULT_COLOR
from .core.metrics import ANNUAL_KEYWORDS, DEFAULT_HOURLY_RATE, MARKET_RATE

logger = logging.getLogger(__name__)

HUB_HOME = Path(os.environ.get("HUB_HOME", Path.home() / "hub"))
CONFIG_FILE = HUB_HOME / "config" / "hub.conf"
DATA_DIR = HUB_HOME / "data"


@dataclass
class Config:
    """Hub configuration."""

    snapshot_file: str = ""
    timezone: str = "Europe/Madrid"
    market_rate: float = MARKET_RATE
    default_hourly_rate: float = DEFAULT_HOURLY_RATE
    annual_keywords: list[str] = field(default_factory=lambda: list(ANNUAL_KEYWORDS))
    fallback_color: str = DEFAULT_COLOR
    reminder_window_minutes: int = 15
    recompute_real_costs: bool = False

    @property
    def snapshot_path(self) -> Path:
        if self.snapshot_file:
            return Path(self.snapshot_file).expanduser()
        return DATA_DIR / "state.json"


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_float(key: str, value: str, current: float) -> float:
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid number for {key.upper()}: {value!r}")
        return current


def load_config(path: Path | None = None) -> Config:
    """Load configuration from hub.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "snapshot_file":
                config.snapshot_file = value
            case "timezone":
                config.timezone = value
            case "market_rate":
                config.market_rate = _parse_float(key, value, config.market_rate)
            case "default_hourly_rate":
                config.default_hourly_rate = _parse_float(key, value, config.default_hourly_rate)
            case "annual_keywords":
                config.annual_keywords = [k.strip() for k in value.split(",") if k.strip()]
            case "fallback_color":
                config.fallback_color = value
            case "reminder_window_minutes":
                try:
                    config.reminder_window_minutes = int(value)
                except ValueError:
                    logger.warning(f"Invalid number for REMINDER_WINDOW_MINUTES: {value!r}")
            case "recompute_real_costs":
                config.recompute_real_costs = value.lower() in ("1", "true", "yes", "on")

    return config
