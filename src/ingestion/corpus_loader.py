"""Loader for the persisted raw corpus of funding requests.

Supported formats (chosen by file suffix):
- .parquet (pyarrow engine)
- .csv
- .jsonl (one JSON object per line)
- .json (records array)
"""

import logging
from pathlib import Path

import pandas as pd

from src.pipelines.tagging.schema import RAW_CORPUS_COLUMNS
from src.shared.exceptions import CorpusSchemaError

SUPPORTED_SUFFIXES = (".parquet", ".csv", ".jsonl", ".json")


def load_corpus(
    path: Path,
    column_map: dict[str, str] | None = None,
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Read the raw corpus table into memory.

    Args:
        path: Path to the persisted corpus file.
        column_map: Optional mapping of source column names to the
            canonical names (text, ministry, act_number, status, date).
        logger: Logger for progress messages.

    Returns:
        DataFrame with at least the canonical raw corpus columns.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file suffix is not supported.
        CorpusSchemaError: If required columns are missing after renaming.
    """
    logger = logger or logging.getLogger(__name__)
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".parquet":
        df = pd.read_parquet(path, engine="pyarrow")
    elif suffix == ".csv":
        df = pd.read_csv(path, encoding="utf-8")
    elif suffix == ".jsonl":
        df = pd.read_json(path, lines=True, dtype=False)
    elif suffix == ".json":
        df = pd.read_json(path, orient="records", dtype=False)
    else:
        raise ValueError(
            f"Unsupported corpus format '{suffix}'. Expected one of {SUPPORTED_SUFFIXES}."
        )

    if column_map:
        df = df.rename(columns=column_map)

    missing = [col for col in RAW_CORPUS_COLUMNS if col not in df.columns]
    if missing:
        raise CorpusSchemaError(f"Corpus {path.name} missing required columns: {missing}")

    logger.info("Loaded %d documents from %s", len(df), path)
    return df
