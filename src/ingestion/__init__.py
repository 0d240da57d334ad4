"""Corpus ingestion: loading and cleaning raw funding requests."""

from src.ingestion.corpus_loader import load_corpus

__all__ = ["load_corpus"]
