"""Shared utility functions for the tagging pipeline."""

import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Calling this again for the same name replaces the existing handlers
    instead of stacking new ones.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def normalize_whitespace(text: str) -> str:
    """Trim text and collapse every internal whitespace run to one space."""
    return " ".join(text.split())


def batch_digest(documents: Iterable[tuple[int, str]], salt: str = "") -> str:
    """Compute a SHA-256 digest over a batch of (doc_id, text) pairs.

    Pairs are sorted by doc_id first, so the digest does not depend on the
    order the batch was assembled in.

    Args:
        documents: Iterable of (doc_id, text) pairs.
        salt: Extra string mixed into the digest (e.g. annotator identity).

    Returns:
        64-character hex digest.
    """
    hasher = hashlib.sha256()
    hasher.update(salt.encode("utf-8"))
    for doc_id, text in sorted(documents, key=lambda pair: pair[0]):
        hasher.update(b"\x1e")
        hasher.update(str(int(doc_id)).encode("utf-8"))
        hasher.update(b"\x1f")
        hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()
