import os
import sys
from pathlib import Path

from loguru import logger

GRADUATION_TAG = "[GRAD] Graduated:"


def _is_graduation(record: dict) -> bool:
    return record["message"].startswith(GRADUATION_TAG)


def setup_logger(*, json_logs: bool = False, level: str = "INFO", log_dir: str = "logs") -> None:
    """Configure loguru sinks for the radar.

    - stdout: level from LOG_LEVEL env, falling back to ``level``
    - ``radar_*.log``: everything at DEBUG, so a dropped migration can be
      traced by its truncated signature
    - ``graduations_*.log``: only finalized graduations, one line each
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    base = Path(log_dir)
    logger.add(
        base / "radar_{time:YYYY-MM-DD}.log",
        rotation="20 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
        enqueue=True,
    )
    logger.add(
        base / "graduations_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} {message}",
        filter=_is_graduation,
        rotation="1 day",
        retention="14 days",
        level="INFO",
    )
