"""Utility functions for configuration and logging."""

from media_sorter.utils.config import Config
from media_sorter.utils.logger import setup_logger

__all__ = ["Config", "setup_logger"]
