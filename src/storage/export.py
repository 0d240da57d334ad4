"""
Tagged Corpus Storage
Final table export and run manifests
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

EXPORT_FORMATS = ("csv", "parquet")


def export_table(
    df: pd.DataFrame,
    output_dir: Path,
    name: str,
    format: str = "parquet",
    logger: logging.Logger | None = None,
) -> Path:
    """Export DataFrame to {output_dir}/{name}.{format}.

    Args:
        df: DataFrame to export.
        output_dir: Destination directory (created if missing).
        name: File stem.
        format: Output format ("csv" or "parquet").
        logger: Logger for progress messages.

    Returns:
        Path to the written file.

    Raises:
        ValueError: If the DataFrame is empty or format is invalid.
    """
    logger = logger or logging.getLogger(__name__)

    if df.empty:
        raise ValueError(f"Cannot export empty DataFrame for '{name}'")

    if format not in EXPORT_FORMATS:
        raise ValueError(f"Invalid format '{format}'. Must be 'csv' or 'parquet'.")

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{name}.{format}"

    if format == "csv":
        df.to_csv(path, index=False, encoding="utf-8")
    else:  # parquet
        df.to_parquet(path, index=False, engine="pyarrow")

    logger.info("Exported %d records to %s", len(df), path)
    return path


def export_tagged_corpus(
    df: pd.DataFrame,
    output_dir: Path,
    name: str = "tagged_corpus",
    format: str = "parquet",
    logger: logging.Logger | None = None,
) -> Path:
    """Persist the merged tagged corpus for downstream analysis."""
    return export_table(df, output_dir, name, format=format, logger=logger)


def write_run_manifest(manifest_dir: Path, payload: dict) -> Path:
    """
    Write a JSON manifest describing one pipeline run.

    run_time_utc is added when the payload does not carry one.
    """

    manifest_dir.mkdir(parents=True, exist_ok=True)

    manifest = {"run_time_utc": datetime.now(timezone.utc).isoformat(), **payload}
    stamp = manifest["run_time_utc"].replace(":", "-")

    manifest_path = manifest_dir / f"tagging_run_{stamp}.json"
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, default=str)

    return manifest_path
