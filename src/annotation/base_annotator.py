"""Annotator interface.

An annotator turns a batch of (doc_id, text) pairs into one flat table with
one row per token and the columns listed in ANNOTATION_COLUMNS. The pipeline
only depends on this protocol, so any object with an annotate_batch method
can be injected in place of the stanza backend.
"""

from typing import Protocol, runtime_checkable

import pandas as pd


@runtime_checkable
class Annotator(Protocol):
    def annotate_batch(self, documents: list[tuple[int, str]]) -> pd.DataFrame:
        ...


def annotator_tag(annotator: object) -> str:
    """Return the identity string mixed into cache keys for an annotator.

    Uses the annotator's ``cache_tag`` attribute when present, falling back
    to its class name.
    """
    return getattr(annotator, "cache_tag", None) or type(annotator).__name__
