"""Tests for the annotation adapter (cache check + injected annotator)."""

from pathlib import Path
from unittest.mock import Mock

import pandas as pd
import pytest

from src.annotation.adapter import annotate_documents, document_batch
from src.annotation.base_annotator import Annotator, annotator_tag
from src.annotation.cache import AnnotationCache
from src.shared.exceptions import AnnotationError


@pytest.fixture
def documents() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "doc_id": [2, 1],
            "text": ["Bevilling til forsvaret", "Ministeriet anmoder om tilslutning"],
        }
    )


class TestDocumentBatch:
    def test_ordered_by_doc_id(self, documents: pd.DataFrame):
        assert document_batch(documents) == [
            (1, "Ministeriet anmoder om tilslutning"),
            (2, "Bevilling til forsvaret"),
        ]


class TestAnnotatorProtocol:
    def test_stub_satisfies_protocol(self, stub_annotator):
        assert isinstance(stub_annotator, Annotator)

    def test_annotator_tag_prefers_cache_tag(self, stub_annotator):
        assert annotator_tag(stub_annotator) == "stub-annotator"

    def test_annotator_tag_falls_back_to_class_name(self):
        class Plain:
            def annotate_batch(self, documents):
                return pd.DataFrame()

        assert annotator_tag(Plain()) == "Plain"


class TestAnnotateDocuments:
    def test_rows_sorted_by_position(self, documents, stub_annotator):
        annotations, _ = annotate_documents(documents, stub_annotator)

        keys = list(
            zip(
                annotations["doc_id"],
                annotations["paragraph_id"],
                annotations["sentence_id"],
                annotations["token_id"],
            )
        )
        assert keys == sorted(keys)
        assert annotations["doc_id"].iloc[0] == 1

    def test_without_cache_always_calls_annotator(self, documents, stub_annotator):
        annotate_documents(documents, stub_annotator)
        annotate_documents(documents, stub_annotator)
        assert len(stub_annotator.calls) == 2

    def test_cache_hit_skips_annotator(self, tmp_path: Path, documents, stub_annotator):
        cache = AnnotationCache(tmp_path)

        first, key1 = annotate_documents(documents, stub_annotator, cache=cache)
        second, key2 = annotate_documents(documents, stub_annotator, cache=cache)

        assert len(stub_annotator.calls) == 1
        assert key1 == key2
        pd.testing.assert_frame_equal(first, second, check_dtype=False)

    def test_overwrite_recomputes(self, tmp_path: Path, documents, stub_annotator):
        cache = AnnotationCache(tmp_path)

        annotate_documents(documents, stub_annotator, cache=cache)
        annotate_documents(documents, stub_annotator, cache=cache, overwrite=True)

        assert len(stub_annotator.calls) == 2

    def test_overwrite_clears_entry_before_recomputing(
        self, tmp_path: Path, documents, stub_annotator
    ):
        cache = AnnotationCache(tmp_path)
        _, digest = annotate_documents(documents, stub_annotator, cache=cache)
        failing = Mock()
        failing.cache_tag = stub_annotator.cache_tag
        failing.annotate_batch.side_effect = AnnotationError("model unavailable")

        with pytest.raises(AnnotationError):
            annotate_documents(documents, failing, cache=cache, overwrite=True)

        assert not cache.exists(digest)
        assert list(tmp_path.iterdir()) == []

    def test_changed_batch_misses_cache(self, tmp_path: Path, documents, stub_annotator):
        cache = AnnotationCache(tmp_path)

        _, key_all = annotate_documents(documents, stub_annotator, cache=cache)
        annotations, key_one = annotate_documents(documents.iloc[:1], stub_annotator, cache=cache)

        assert key_all != key_one
        assert len(stub_annotator.calls) == 2
        assert set(annotations["doc_id"]) == {2}

    def test_different_annotator_misses_cache(
        self, tmp_path: Path, documents, stub_annotator, annotator_factory
    ):
        cache = AnnotationCache(tmp_path)
        other = annotator_factory()
        other.cache_tag = "other-model"

        _, key1 = annotate_documents(documents, stub_annotator, cache=cache)
        _, key2 = annotate_documents(documents, other, cache=cache)

        assert key1 != key2
        assert len(other.calls) == 1

    def test_annotator_failure_propagates_and_caches_nothing(self, tmp_path: Path, documents):
        cache = AnnotationCache(tmp_path)
        failing = Mock()
        failing.cache_tag = "failing"
        failing.annotate_batch.side_effect = AnnotationError("model unavailable")

        with pytest.raises(AnnotationError, match="model unavailable"):
            annotate_documents(documents, failing, cache=cache)

        assert list(tmp_path.iterdir()) == []

    def test_missing_columns_rejected(self, documents):
        broken = Mock()
        broken.cache_tag = "broken"
        broken.annotate_batch.return_value = pd.DataFrame(
            {"doc_id": [1], "paragraph_id": [1], "sentence_id": [1], "token_id": [None]}
        )

        with pytest.raises(ValueError, match="token_id"):
            annotate_documents(documents, broken)
