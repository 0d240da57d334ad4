"""
Annotations → Token Records

Keeps the seven token columns, drops every tag outside the content-word set,
lowercases token/lemma/tag and derives lemma_upos (e.g. "gå_verb").
"""

import pandas as pd

from src.pipelines.tagging.schema import ALLOWED_UPOS, TOKEN_COLUMNS

PROJECTED_COLUMNS = TOKEN_COLUMNS[:-1]


def project_tokens(
    annotations: pd.DataFrame,
    allowed_upos: frozenset[str] = ALLOWED_UPOS,
) -> pd.DataFrame:
    """
    Project annotation rows down to filtered, lowercased token records.

    Does NOT:
    - reorder rows
    - touch documents that end up without tokens (the merge keeps them)
    """

    df = annotations[PROJECTED_COLUMNS].copy()

    allowed = {tag.upper() for tag in allowed_upos}
    df = df[df["upos"].fillna("").astype(str).str.upper().isin(allowed)].copy()

    for field in ("token", "lemma", "upos"):
        df[field] = df[field].fillna("").astype(str).str.lower()

    df["lemma_upos"] = df["lemma"] + "_" + df["upos"]

    return df.reset_index(drop=True)[TOKEN_COLUMNS]
