"""Optional user configuration from ~/.config/hnterm/config.toml."""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "hnterm" / "config.toml"

NETWORK_DEFAULTS = {
    "rate_limit_per_second": 3.0,
    "max_retries": 3,
    "initial_retry_delay_ms": 500,
    "max_retry_delay_ms": 5000,
    "retry_on_timeout": True,
    "timeout": 10.0,
}

DEFAULTS = {
    "theme_name": "hn-orange",
    "auto_switch_dark_to_light": False,
    "ghost_term_name": "xterm-ghostty",
    "story_list": "top",
    "page_size": 30,
    "history_max": 100,
    "search_history_max": 50,
    "enable_performance_metrics": False,
    "log_file": "~/.local/state/hnterm/hnterm.log",
    "network": NETWORK_DEFAULTS,
}


@dataclass(frozen=True)
class NetworkConfig:
    rate_limit_per_second: float = 3.0
    max_retries: int = 3
    initial_retry_delay_ms: int = 500
    max_retry_delay_ms: int = 5000
    retry_on_timeout: bool = True
    timeout: float = 10.0


def load() -> dict:
    """Load user config, falling back to defaults for missing keys."""
    config = dict(DEFAULTS)
    config["network"] = dict(NETWORK_DEFAULTS)
    if CONFIG_PATH.exists():
        try:
            user_config = tomllib.loads(CONFIG_PATH.read_text())
        except (tomllib.TOMLDecodeError, OSError) as exc:
            logger.error("Failed to parse config at %s: %s", CONFIG_PATH, exc)
            return config
        network = user_config.pop("network", None)
        config.update(user_config)
        if isinstance(network, dict):
            config["network"].update(network)
        logger.info("Loaded config from %s", CONFIG_PATH)
    return config


def network_config(config: dict) -> NetworkConfig:
    """Build the API client's network settings from a loaded config."""
    net = config.get("network", NETWORK_DEFAULTS)
    return NetworkConfig(
        rate_limit_per_second=float(net["rate_limit_per_second"]),
        max_retries=int(net["max_retries"]),
        initial_retry_delay_ms=int(net["initial_retry_delay_ms"]),
        max_retry_delay_ms=int(net["max_retry_delay_ms"]),
        retry_on_timeout=bool(net["retry_on_timeout"]),
        timeout=float(net["timeout"]),
    )
