"""
Tagging Pipeline Schema Validation
"""

import pandas as pd

from src.pipelines.tagging.schema import (
    ALLOWED_UPOS,
    ANNOTATION_COLUMNS,
    TAGGED_CORPUS_COLUMNS,
    TOKEN_COLUMNS,
)


def validate_annotations(df: pd.DataFrame) -> None:
    """
    Validate raw annotator output.

    Enforces:
    - every annotation column present
    - no nulls in the position columns
    """

    missing = set(ANNOTATION_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing annotation columns: {sorted(missing)}")

    for field in ("doc_id", "paragraph_id", "sentence_id", "token_id"):
        if df[field].isna().any():
            null_count = df[field].isna().sum()
            raise ValueError(f"Null values in annotation field '{field}': {null_count}")


def validate_tokens(df: pd.DataFrame, allowed_upos: frozenset[str] = ALLOWED_UPOS) -> None:
    """
    Validate projected token records.

    Enforces:
    - exactly the token columns
    - tags inside the allowed set (lowercased)
    - lowercase token, lemma and tag
    - lemma_upos == lemma + "_" + upos
    """

    if list(df.columns) != TOKEN_COLUMNS:
        raise ValueError(f"Token columns {list(df.columns)} != {TOKEN_COLUMNS}")

    if df.empty:
        return

    allowed = {tag.lower() for tag in allowed_upos}
    invalid_tags = set(df["upos"].unique()) - allowed
    if invalid_tags:
        raise ValueError(f"Tags outside allowed set: {sorted(invalid_tags)}")

    for field in ("token", "lemma", "upos"):
        not_lower = df[df[field] != df[field].str.lower()]
        if len(not_lower) > 0:
            raise ValueError(f"Field '{field}' not lowercase in {len(not_lower)} records")

    mismatched = df[df["lemma_upos"] != df["lemma"] + "_" + df["upos"]]
    if len(mismatched) > 0:
        raise ValueError(f"lemma_upos mismatch in {len(mismatched)} records")


def validate_tagged_corpus(df: pd.DataFrame) -> None:
    """
    Validate the merged tagged corpus.

    Enforces:
    - output column order
    - no null document ids
    - one metadata block per document id
    """

    if list(df.columns) != TAGGED_CORPUS_COLUMNS:
        raise ValueError(f"Tagged corpus columns {list(df.columns)} != {TAGGED_CORPUS_COLUMNS}")

    if df["doc_id"].isna().any():
        raise ValueError("Null doc_id in tagged corpus")

    metadata_blocks = (
        df[["doc_id", "ministry", "act_number", "status", "date"]]
        .dropna(subset=["ministry", "act_number"], how="all")
        .drop_duplicates()
    )
    conflicting = metadata_blocks["doc_id"].duplicated().sum()
    if conflicting > 0:
        raise ValueError(f"Conflicting metadata for {conflicting} document ids")
