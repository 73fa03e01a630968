"""Logging configuration helpers."""
from __future__ import annotations

from typing import Optional

from loguru import logger

from .config import log_level


def configure_logging(level: Optional[str] = None) -> None:
    """Configure loguru with a single console sink."""
    logger.remove()
    logger.add(
        sink=lambda msg: print(msg, end=""),
        level=level or log_level(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
