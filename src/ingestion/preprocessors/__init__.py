"""Data preprocessors for Raw → Clean transformation."""

from src.ingestion.preprocessors.corpus_preprocessor import CorpusPreprocessor
from src.ingestion.preprocessors.document_preprocessor import DocumentPreprocessor

__all__ = [
    "CorpusPreprocessor",
    "DocumentPreprocessor",
]
