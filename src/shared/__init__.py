"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.utils import batch_digest, normalize_whitespace, setup_logger

__all__ = ["Config", "setup_logger", "normalize_whitespace", "batch_digest"]
