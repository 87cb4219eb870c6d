import os
import sys

from loguru import logger


def setup_logger(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Configure loguru for the API process.

    Console level comes from LOG_LEVEL env (falls back to ``level``).
    The file sink always keeps DEBUG so provider failures can be traced.
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
                "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    logger.add(
        "logs/ledger_{time:YYYY-MM-DD}.log",
        rotation="20 MB",
        retention="7 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
