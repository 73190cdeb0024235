"""Main entry point for the Earnings Whispers relay.

Takes no arguments. Configuration comes from the YAML file named by
WHISPER_RELAY_CONFIG (default: config/default.yaml) and the environment:

    DISCORD_EARNINGS_WEBHOOK  Discord webhook URL (required)
    LOG_LEVEL                 Logging level (default: INFO)
"""
import logging
import os
import sys

from whisper_relay.core.config import ConfigError, load_config, resolve_config_path
from whisper_relay.core.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: str) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.); unknown values mean INFO
    """
    level = level.upper()
    if level not in LOG_LEVELS:
        level = "INFO"

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, level),
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from external libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for a completed run, 1 for a configuration or unexpected error)
    """
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"))

    config_path = resolve_config_path()
    logger.info("Earnings relay starting...")
    logger.info(f"Config: {config_path}")

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        result = Orchestrator(config).start()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1

    logger.info(
        f"Run finished: {result.delivered}/{result.new} new reports delivered, "
        f"{result.total} records in state"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
