"""Tests for tagged corpus export and run manifests."""

import json
from pathlib import Path

import pandas as pd
import pytest

from src.storage.export import export_table, export_tagged_corpus, write_run_manifest


@pytest.fixture
def tagged() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "doc_id": [1, 1],
            "ministry": ["Finansministeriet", "Finansministeriet"],
            "act_number": pd.array([5, 5], dtype="Int64"),
            "token": ["anmoder", "bevilling"],
            "lemma_upos": ["anmode_verb", "bevilling_noun"],
        }
    )


class TestExportTable:
    def test_parquet(self, tmp_path: Path, tagged: pd.DataFrame):
        path = export_table(tagged, tmp_path / "out", "tagged_corpus")

        assert path == tmp_path / "out" / "tagged_corpus.parquet"
        pd.testing.assert_frame_equal(pd.read_parquet(path), tagged)

    def test_csv(self, tmp_path: Path, tagged: pd.DataFrame):
        path = export_table(tagged, tmp_path, "tagged_corpus", format="csv")

        assert path.suffix == ".csv"
        assert pd.read_csv(path)["lemma_upos"].tolist() == ["anmode_verb", "bevilling_noun"]

    def test_empty_rejected(self, tmp_path: Path):
        with pytest.raises(ValueError, match="Cannot export empty DataFrame"):
            export_table(pd.DataFrame(), tmp_path, "tagged_corpus")

    def test_invalid_format(self, tmp_path: Path, tagged: pd.DataFrame):
        with pytest.raises(ValueError, match="Invalid format"):
            export_table(tagged, tmp_path, "tagged_corpus", format="xlsx")

    def test_export_tagged_corpus_default_name(self, tmp_path: Path, tagged: pd.DataFrame):
        path = export_tagged_corpus(tagged, tmp_path)
        assert path.name == "tagged_corpus.parquet"


class TestWriteRunManifest:
    def test_writes_json(self, tmp_path: Path):
        path = write_run_manifest(
            tmp_path / "manifests", {"pipeline": "aktstykker_tagging", "counts": {"a": 1}}
        )

        manifest = json.loads(path.read_text())
        assert path.name.startswith("tagging_run_")
        assert manifest["pipeline"] == "aktstykker_tagging"
        assert manifest["counts"] == {"a": 1}
        assert "run_time_utc" in manifest

    def test_serializes_paths(self, tmp_path: Path):
        path = write_run_manifest(tmp_path, {"output": tmp_path / "x.parquet"})
        assert json.loads(path.read_text())["output"] == str(tmp_path / "x.parquet")
