"""
Root pytest configuration.

Provides a small raw corpus and a deterministic stand-in for the stanza
annotator so pipeline tests run without downloading models.
"""

import pandas as pd
import pytest

from src.pipelines.tagging.schema import ANNOTATION_COLUMNS

FILLER = "Finansministeriet anmoder om tilslutning til en ekstra bevilling. "


def make_text(length: int, filler: str = FILLER) -> str:
    """Return Danish-looking text of exactly ``length`` characters."""
    repeated = filler * (length // len(filler) + 1)
    return repeated[:length]


class StubAnnotator:
    """Annotator returning fixed rows per document.

    Documents listed in ``fixed`` get those (token, lemma, upos) triples as a
    single sentence; any other document is whitespace-split with every word
    tagged NOUN and lemma == token.
    """

    cache_tag = "stub-annotator"

    def __init__(self, fixed: dict[int, list[tuple[str, str, str]]] | None = None) -> None:
        self.fixed = fixed or {}
        self.calls: list[list[tuple[int, str]]] = []

    def annotate_batch(self, documents: list[tuple[int, str]]) -> pd.DataFrame:
        self.calls.append(list(documents))
        rows = []
        # reversed on purpose: the adapter must restore the order
        for doc_id, text in reversed(documents):
            triples = self.fixed.get(doc_id) or [(w, w, "NOUN") for w in text.split()]
            for token_id, (token, lemma, upos) in enumerate(triples, 1):
                rows.append(
                    {
                        "doc_id": doc_id,
                        "paragraph_id": 1,
                        "sentence_id": 1,
                        "sentence": text,
                        "token_id": token_id,
                        "token": token,
                        "lemma": lemma,
                        "upos": upos,
                        "xpos": upos,
                        "feats": None,
                        "head_token_id": 0,
                        "dep_rel": "root",
                        "deps": None,
                        "misc": None,
                    }
                )
        return pd.DataFrame(rows, columns=ANNOTATION_COLUMNS)


@pytest.fixture
def stub_annotator() -> StubAnnotator:
    return StubAnnotator()


@pytest.fixture
def raw_corpus() -> pd.DataFrame:
    """Three funding requests: one valid, one without text, one too short."""
    return pd.DataFrame(
        {
            "text": [make_text(1200), None, make_text(300)],
            "ministry": ["Finansministeriet", "Finansministeriet", "Finansministeriet"],
            "act_number": ["Aktstk. 5", "Aktstk. 6", "Aktstk. 7"],
            "status": ["Tiltrådt", "Tiltrådt", "Udsat"],
            "date": ["2021-03-01", "2021-03-04", "2021-03-09"],
        }
    )


@pytest.fixture
def text_of_length():
    """Factory for texts of an exact character length."""
    return make_text


@pytest.fixture
def annotator_factory():
    """Factory for stub annotators with fixed per-document rows."""
    return StubAnnotator
