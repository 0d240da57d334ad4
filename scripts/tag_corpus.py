"""Script to tag the funding-request corpus.

Reads the raw corpus, cleans it, runs the stanza tagger (cached) and writes
the merged token/metadata table.

Usage:
    python scripts/tag_corpus.py                              # Paths from .env
    python scripts/tag_corpus.py --input data/raw/aktstykker.csv
    python scripts/tag_corpus.py --overwrite --workers 4

Output:
    Parquet file: data/processed/tagged/tagged_corpus.parquet
"""

import sys

from src.pipelines.tagging.run_tagging_pipeline import main

if __name__ == "__main__":
    sys.exit(main())
