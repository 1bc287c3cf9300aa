import os
import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def setup_logger(
    *,
    json_logs: bool = False,
    level: str = "INFO",
    log_dir: str | Path = "logs",
    to_file: bool = True,
) -> None:
    """Configure loguru for the launch monitor.

    Console level comes from LOG_LEVEL env, falling back to ``level``.
    The rotating file sink always captures DEBUG, which includes every
    per-event stage transition, so a single launch can be replayed by
    filtering on its bound ``signature``.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    if to_file:
        logger.add(
            str(Path(log_dir) / "launch_radar_{time:YYYY-MM-DD}.log"),
            rotation="50 MB",
            retention="3 days",
            compression="gz",
            level="DEBUG",
            serialize=json_logs,
        )


def event_logger(signature: str, mint: str = ""):
    """Logger bound to one launch; extras show up as fields in JSON logs."""
    return logger.bind(signature=signature, mint=mint)
