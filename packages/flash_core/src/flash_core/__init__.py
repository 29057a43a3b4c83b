from .config import FlashSettings, flash_settings
from .logging import current_schedule, get_logger, scoped_schedule, setup_logging

__all__ = [
    "FlashSettings",
    "current_schedule",
    "flash_settings",
    "get_logger",
    "scoped_schedule",
    "setup_logging",
]
