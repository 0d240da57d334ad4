"""
Tagging Pipeline Schemas
Raw corpus → annotations → tagged corpus
"""

RAW_CORPUS_SCHEMA = {
    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    "text": str,                        # raw request text, may be missing

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    "ministry": str,                    # submitting ministry
    "act_number": str,                  # e.g. "Aktstk. 5"
    "status": str,                      # e.g. "Tiltrådt"
    "date": str,                        # submission date
}

RAW_CORPUS_COLUMNS = list(RAW_CORPUS_SCHEMA.keys())

ANNOTATION_SCHEMA = {
    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------
    "doc_id": "int64",
    "paragraph_id": "int64",            # 1-based within document
    "sentence_id": "int64",             # 1-based, running across document
    "sentence": str,
    "token_id": "int64",                # 1-based within sentence

    # ------------------------------------------------------------------
    # Morphology
    # ------------------------------------------------------------------
    "token": str,
    "lemma": str,
    "upos": str,                        # Universal POS tag
    "xpos": str,
    "feats": str,

    # ------------------------------------------------------------------
    # Syntax
    # ------------------------------------------------------------------
    "head_token_id": "int64",
    "dep_rel": str,
    "deps": str,
    "misc": str,
}

ANNOTATION_COLUMNS = list(ANNOTATION_SCHEMA.keys())

ANNOTATION_SORT_KEYS = ["doc_id", "paragraph_id", "sentence_id", "token_id"]

TOKEN_COLUMNS = [
    "doc_id",
    "paragraph_id",
    "sentence_id",
    "token_id",
    "token",
    "lemma",
    "upos",
    "lemma_upos",
]

METADATA_COLUMNS = ["doc_id", "ministry", "act_number", "status", "date"]

TAGGED_CORPUS_COLUMNS = [
    "doc_id",
    "ministry",
    "act_number",
    "status",
    "date",
    "paragraph_id",
    "sentence_id",
    "token_id",
    "token",
    "lemma",
    "upos",
    "lemma_upos",
]

# Content-word categories kept after annotation
ALLOWED_UPOS = frozenset({"VERB", "NOUN", "PROPN", "ADJ", "ADV"})
