"""Configuration loading and validation."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/default.yaml"
CONFIG_PATH_ENV = "WHISPER_RELAY_CONFIG"
WEBHOOK_ENV = "DISCORD_EARNINGS_WEBHOOK"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:140.0) Gecko/20100101 Firefox/140.0"
)


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


@dataclass
class SourceConfig:
    """Upstream feed configuration."""

    base_url: str = "https://www.earningswhispers.com"
    warmup_path: str = "/earningsnews"
    data_path: str = "/api/todaysresults"
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def warmup_url(self) -> str:
        return self.base_url.rstrip("/") + self.warmup_path

    @property
    def data_url(self) -> str:
        return self.base_url.rstrip("/") + self.data_path


@dataclass
class SinkConfig:
    """Discord webhook configuration."""

    webhook_url: str
    send_delay_ms: int = 3000
    timeout_seconds: float = 30.0


@dataclass
class StateConfig:
    """Notification state file configuration."""

    path: str = "./whispers/earnings-state.json"


@dataclass
class Config:
    """Main configuration container."""

    sink: SinkConfig
    source: SourceConfig = field(default_factory=SourceConfig)
    state: StateConfig = field(default_factory=StateConfig)


def resolve_config_path() -> str:
    """Config file path, from the environment or the default location."""
    return os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    return value


def _non_negative(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if number < 0:
        raise ConfigError(f"{name} must not be negative, got {value!r}")
    return number


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file and the environment.

    The file is optional; every setting has a default except the webhook
    URL, which must come from ``sink.webhook_url`` or the
    ``DISCORD_EARNINGS_WEBHOOK`` environment variable (the latter wins).

    Args:
        path: Path to YAML configuration file (defaults to resolve_config_path())

    Returns:
        Config object with validated configuration

    Raises:
        ConfigError: If the YAML is invalid or the webhook URL is missing
    """
    path = path or resolve_config_path()
    config_path = Path(path)

    raw: Any = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file {path}: {e}") from e
        if raw is None:
            raw = {}
    else:
        logger.debug(f"Configuration file {path} not found, using defaults")

    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must contain a mapping")

    # Parse source config
    src_raw = _section(raw, "source")
    defaults = SourceConfig()
    source = SourceConfig(
        base_url=src_raw.get("base_url", defaults.base_url),
        warmup_path=src_raw.get("warmup_path", defaults.warmup_path),
        data_path=src_raw.get("data_path", defaults.data_path),
        timeout_seconds=_non_negative(
            src_raw.get("timeout_seconds", defaults.timeout_seconds), "source.timeout_seconds"
        ),
        user_agent=src_raw.get("user_agent", defaults.user_agent),
    )

    # Parse sink config; the environment overrides the file
    sink_raw = _section(raw, "sink")
    webhook_url = os.environ.get(WEBHOOK_ENV) or sink_raw.get("webhook_url") or ""
    webhook_url = str(webhook_url).strip()
    if not webhook_url:
        raise ConfigError(
            f"Missing Discord webhook URL: set {WEBHOOK_ENV} or sink.webhook_url"
        )
    sink = SinkConfig(
        webhook_url=webhook_url,
        send_delay_ms=int(_non_negative(sink_raw.get("send_delay_ms", 3000), "sink.send_delay_ms")),
        timeout_seconds=_non_negative(sink_raw.get("timeout_seconds", 30.0), "sink.timeout_seconds"),
    )

    # Parse state config
    state_raw = _section(raw, "state")
    state = StateConfig(path=state_raw.get("path", StateConfig.path))

    config = Config(sink=sink, source=source, state=state)

    logger.info(f"Loaded configuration from {path}")
    logger.debug(f"Source: {source.data_url}")
    logger.debug(f"State file: {state.path}, send delay: {sink.send_delay_ms}ms")

    return config
