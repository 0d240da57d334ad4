"""
Token Records + Document Metadata → Tagged Corpus
"""

import pandas as pd
from pandas.errors import MergeError

from src.pipelines.tagging.schema import (
    ANNOTATION_SORT_KEYS,
    METADATA_COLUMNS,
    TAGGED_CORPUS_COLUMNS,
)
from src.shared.exceptions import DuplicateDocumentIdError


def metadata_projection(documents: pd.DataFrame) -> pd.DataFrame:
    """Reduce cleaned documents to the metadata columns used in the join."""
    return documents[METADATA_COLUMNS].copy()


def merge_metadata(tokens: pd.DataFrame, metadata: pd.DataFrame) -> pd.DataFrame:
    """
    Full outer join of token records and metadata on doc_id.

    Responsibilities:
    - keep tokens without metadata and metadata without tokens
    - refuse metadata with more than one row per doc_id
    - sort deterministically: doc_id, paragraph, sentence, token (nulls last)
    """

    tokens = tokens.astype({"doc_id": "int64"})
    metadata = metadata.astype({"doc_id": "int64"})

    try:
        merged = pd.merge(
            tokens,
            metadata,
            how="outer",
            on="doc_id",
            validate="many_to_one",
            sort=False,
        )
    except MergeError as e:
        duplicated = metadata.loc[metadata["doc_id"].duplicated(), "doc_id"].unique().tolist()
        raise DuplicateDocumentIdError(
            f"Metadata has multiple rows for doc_id(s): {duplicated}"
        ) from e

    for field in ANNOTATION_SORT_KEYS:
        merged[field] = merged[field].astype("Int64")

    merged = merged.sort_values(
        ANNOTATION_SORT_KEYS, kind="mergesort", na_position="last"
    ).reset_index(drop=True)

    return merged[TAGGED_CORPUS_COLUMNS]
