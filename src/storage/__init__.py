"""Persistence for cleaned and tagged corpora."""

from src.storage.export import export_table, export_tagged_corpus, write_run_manifest

__all__ = ["export_table", "export_tagged_corpus", "write_run_manifest"]
