"""Annotation adapter: cached, validated calls into an injected annotator."""

import logging

import pandas as pd

from src.annotation.base_annotator import Annotator, annotator_tag
from src.annotation.cache import AnnotationCache
from src.pipelines.tagging.schema import ANNOTATION_COLUMNS, ANNOTATION_SORT_KEYS
from src.pipelines.tagging.validate import validate_annotations
from src.shared.utils import batch_digest


def document_batch(documents: pd.DataFrame) -> list[tuple[int, str]]:
    """Build the (doc_id, text) batch handed to the annotator, ordered by doc_id."""
    ordered = documents.sort_values("doc_id", kind="mergesort")
    return [
        (int(doc_id), str(text))
        for doc_id, text in zip(ordered["doc_id"], ordered["text"])
    ]


def annotate_documents(
    documents: pd.DataFrame,
    annotator: Annotator,
    cache: AnnotationCache | None = None,
    overwrite: bool = False,
    logger: logging.Logger | None = None,
) -> tuple[pd.DataFrame, str]:
    """Annotate cleaned documents, reusing cached results for the same batch.

    Args:
        documents: Cleaned documents with doc_id and text columns.
        annotator: Object implementing annotate_batch.
        cache: Optional annotation cache.
        overwrite: Recompute even when a cache entry exists.
        logger: Logger for progress messages.

    Returns:
        Tuple of (annotation rows sorted by document/paragraph/sentence/token,
        batch digest used as cache key).

    Raises:
        AnnotationError: Propagated from the annotator; nothing is cached.
        StaleCacheError: If the cache entry does not belong to this batch.
    """
    logger = logger or logging.getLogger(__name__)

    batch = document_batch(documents)
    digest = batch_digest(batch, salt=annotator_tag(annotator))
    doc_ids = {doc_id for doc_id, _ in batch}

    if cache is not None and not overwrite:
        cached = cache.load(digest, doc_ids=doc_ids)
        if cached is not None:
            return cached, digest

    if cache is not None and overwrite:
        logger.info("Overwrite requested, recomputing annotations for %d documents", len(batch))
        cache.invalidate(digest)

    annotations = annotator.annotate_batch(batch)
    annotations = annotations.reindex(columns=ANNOTATION_COLUMNS)
    validate_annotations(annotations)
    annotations = annotations.sort_values(ANNOTATION_SORT_KEYS, kind="mergesort").reset_index(
        drop=True
    )

    if cache is not None:
        cache.store(digest, annotations, n_documents=len(batch))

    logger.info("Annotated %d documents into %d tokens", len(batch), len(annotations))
    return annotations, digest
