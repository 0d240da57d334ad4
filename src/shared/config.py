"""Configuration management for the aktstykker tagging pipeline."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
    LOGS_DIR = Path(os.getenv("LOGS_DIR", str(ROOT_DIR / "logs")))

    # Corpus and outputs
    CORPUS_PATH = Path(os.getenv("CORPUS_PATH", str(DATA_DIR / "raw" / "aktstykker.parquet")))
    CACHE_DIR = Path(os.getenv("CACHE_DIR", str(DATA_DIR / "cache" / "annotations")))
    OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(DATA_DIR / "processed" / "tagged")))
    MANIFEST_DIR = Path(os.getenv("MANIFEST_DIR", str(DATA_DIR / "manifests")))
    OUTPUT_FORMAT: str = os.getenv("OUTPUT_FORMAT", "parquet")

    # Cleaning
    ACT_NUMBER_PREFIX: str = os.getenv("ACT_NUMBER_PREFIX", "Aktstk.")
    MIN_CHARS: int = int(os.getenv("MIN_CHARS", "1000"))
    MAX_CHARS: int = int(os.getenv("MAX_CHARS", "5000"))
    ON_INVALID_ACT_NUMBER: str = os.getenv("ON_INVALID_ACT_NUMBER", "raise")

    # Annotation model
    ANNOTATION_LANGUAGE: str = os.getenv("ANNOTATION_LANGUAGE", "da")
    ANNOTATION_WORKERS: int = int(os.getenv("ANNOTATION_WORKERS", "1"))
    STANZA_DIR: str | None = os.getenv("STANZA_DIR")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        if cls.MIN_CHARS > cls.MAX_CHARS:
            raise ValueError(
                f"MIN_CHARS ({cls.MIN_CHARS}) must not exceed MAX_CHARS ({cls.MAX_CHARS})"
            )
        if cls.OUTPUT_FORMAT not in ("csv", "parquet"):
            raise ValueError(
                f"Invalid OUTPUT_FORMAT '{cls.OUTPUT_FORMAT}'. Must be 'csv' or 'parquet'."
            )
        if cls.ON_INVALID_ACT_NUMBER not in ("raise", "quarantine"):
            raise ValueError(
                f"Invalid ON_INVALID_ACT_NUMBER '{cls.ON_INVALID_ACT_NUMBER}'. "
                "Must be 'raise' or 'quarantine'."
            )
        if cls.ANNOTATION_WORKERS < 1:
            raise ValueError("ANNOTATION_WORKERS must be at least 1")


config = Config()
