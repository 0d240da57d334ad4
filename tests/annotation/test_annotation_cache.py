"""Tests for the content-addressed annotation cache."""

import json
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from src.annotation.cache import AnnotationCache
from src.shared.exceptions import StaleCacheError
from src.shared.utils import batch_digest


@pytest.fixture
def cache(tmp_path: Path) -> AnnotationCache:
    return AnnotationCache(tmp_path / "cache")


@pytest.fixture
def annotations() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "doc_id": [1, 1, 2],
            "paragraph_id": [1, 1, 1],
            "sentence_id": [1, 1, 1],
            "token_id": [1, 2, 1],
            "token": ["Ministeriet", "anmoder", "Bevilling"],
            "lemma": ["ministerium", "anmode", "bevilling"],
            "upos": ["NOUN", "VERB", "NOUN"],
        }
    )


@pytest.fixture
def digest() -> str:
    return batch_digest([(1, "Ministeriet anmoder"), (2, "Bevilling")], salt="test")


class TestAnnotationCache:
    def test_miss_returns_none(self, cache: AnnotationCache, digest: str):
        assert cache.load(digest) is None
        assert not cache.exists(digest)

    def test_store_then_load(self, cache: AnnotationCache, annotations, digest: str):
        path = cache.store(digest, annotations, n_documents=2)

        assert path.name == f"annotations_{digest[:16]}.parquet"
        assert cache.exists(digest)

        loaded = cache.load(digest, doc_ids={1, 2})
        pd.testing.assert_frame_equal(loaded, annotations)

    def test_manifest_contents(self, cache: AnnotationCache, annotations, digest: str):
        cache.store(digest, annotations, n_documents=2)

        manifest = json.loads(cache.manifest_path(digest).read_text())

        assert manifest["digest"] == digest
        assert manifest["n_documents"] == 2
        assert manifest["n_rows"] == 3
        assert "created_at" in manifest

    def test_different_batch_misses(self, cache: AnnotationCache, annotations, digest: str):
        cache.store(digest, annotations, n_documents=2)

        other = batch_digest([(1, "Ministeriet anmoder")], salt="test")

        assert cache.load(other) is None

    def test_checksum_mismatch_raises(self, cache: AnnotationCache, annotations, digest: str):
        cache.store(digest, annotations, n_documents=2)
        manifest_path = cache.manifest_path(digest)
        manifest = json.loads(manifest_path.read_text())
        manifest["digest"] = digest[:16] + "0" * 48
        manifest_path.write_text(json.dumps(manifest))

        with pytest.raises(StaleCacheError, match="Checksum mismatch"):
            cache.load(digest)

    def test_row_count_mismatch_raises(self, cache: AnnotationCache, annotations, digest: str):
        cache.store(digest, annotations, n_documents=2)
        annotations.iloc[:1].to_parquet(cache.data_path(digest), index=False)

        with pytest.raises(StaleCacheError, match="Row count mismatch"):
            cache.load(digest)

    def test_foreign_document_ids_raise(self, cache: AnnotationCache, annotations, digest: str):
        cache.store(digest, annotations, n_documents=2)

        with pytest.raises(StaleCacheError, match="outside the batch"):
            cache.load(digest, doc_ids={1})

    def test_failed_write_leaves_no_entry(self, cache: AnnotationCache, annotations, digest):
        with patch.object(pd.DataFrame, "to_parquet", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                cache.store(digest, annotations, n_documents=2)

        assert not cache.exists(digest)
        assert list(cache.cache_dir.iterdir()) == []

    def test_invalidate(self, cache: AnnotationCache, annotations, digest: str):
        cache.store(digest, annotations, n_documents=2)
        cache.invalidate(digest)
        assert not cache.exists(digest)
