"""Morpho-syntactic annotation of cleaned documents."""

from src.annotation.adapter import annotate_documents
from src.annotation.base_annotator import Annotator
from src.annotation.cache import AnnotationCache
from src.annotation.stanza_annotator import StanzaAnnotator

__all__ = [
    "AnnotationCache",
    "Annotator",
    "StanzaAnnotator",
    "annotate_documents",
]
