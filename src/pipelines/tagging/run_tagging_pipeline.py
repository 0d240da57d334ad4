"""
Tagging Pipeline Runner (RAW → CLEAN → ANNOTATED → TAGGED)

Usage:
    tag-corpus                                      # Paths from environment / .env
    tag-corpus --input data/raw/aktstykker.csv --workers 4
    tag-corpus --overwrite --min-chars 800 --max-chars 6000

Output:
    {output_dir}/tagged_corpus.{format}
    {output_dir}/cleaned_corpus.{format}
    {output_dir}/quarantined_documents.{format}   (only with --on-invalid-act-number quarantine)
    {manifest_dir}/tagging_run_{timestamp}.json
"""

import argparse
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd

from src.annotation.adapter import annotate_documents
from src.annotation.base_annotator import Annotator
from src.annotation.cache import AnnotationCache
from src.annotation.stanza_annotator import StanzaAnnotator
from src.ingestion.corpus_loader import load_corpus
from src.ingestion.preprocessors.corpus_preprocessor import CorpusPreprocessor
from src.pipelines.tagging.merge_metadata import merge_metadata, metadata_projection
from src.pipelines.tagging.project_tokens import project_tokens
from src.pipelines.tagging.schema import ALLOWED_UPOS
from src.pipelines.tagging.validate import validate_tagged_corpus, validate_tokens
from src.shared.config import Config
from src.shared.utils import setup_logger
from src.storage.export import EXPORT_FORMATS, export_tagged_corpus, write_run_manifest


# -------------------------------------------------------------------
# Settings & result
# -------------------------------------------------------------------


@dataclass
class PipelineSettings:
    """Everything one run needs; nothing is read from module state."""

    input_path: Path
    output_dir: Path
    cache_dir: Path | None
    manifest_dir: Path | None = None
    overwrite: bool = False
    act_number_prefix: str = "Aktstk."
    min_chars: int = 1000
    max_chars: int = 5000
    on_invalid_act_number: str = "raise"
    allowed_upos: frozenset[str] = ALLOWED_UPOS
    language: str = "da"
    workers: int = 1
    model_dir: Path | None = None
    output_format: str = "parquet"
    column_map: dict[str, str] | None = None
    log_file: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def from_config(cls, **overrides) -> "PipelineSettings":
        """Build settings from Config, with keyword overrides."""
        values = {
            "input_path": Config.CORPUS_PATH,
            "output_dir": Config.OUTPUT_DIR,
            "cache_dir": Config.CACHE_DIR,
            "manifest_dir": Config.MANIFEST_DIR,
            "act_number_prefix": Config.ACT_NUMBER_PREFIX,
            "min_chars": Config.MIN_CHARS,
            "max_chars": Config.MAX_CHARS,
            "on_invalid_act_number": Config.ON_INVALID_ACT_NUMBER,
            "language": Config.ANNOTATION_LANGUAGE,
            "workers": Config.ANNOTATION_WORKERS,
            "model_dir": Path(Config.STANZA_DIR) if Config.STANZA_DIR else None,
            "output_format": Config.OUTPUT_FORMAT,
            "log_level": Config.LOG_LEVEL,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def validate(self) -> None:
        """Reject settings that would only fail after annotation has run."""
        if self.min_chars > self.max_chars:
            raise ValueError(
                f"min_chars ({self.min_chars}) must not exceed max_chars ({self.max_chars})"
            )
        if self.output_format not in EXPORT_FORMATS:
            raise ValueError(
                f"Invalid output_format '{self.output_format}'. Must be one of {EXPORT_FORMATS}."
            )
        if self.workers < 1:
            raise ValueError("workers must be at least 1")


@dataclass
class PipelineResult:
    tagged_corpus: pd.DataFrame
    cleaned_corpus: pd.DataFrame
    quarantined: pd.DataFrame
    cache_key: str
    counts: dict[str, int] = field(default_factory=dict)
    output_paths: dict[str, Path] = field(default_factory=dict)
    manifest_path: Path | None = None


# -------------------------------------------------------------------
# Pipeline
# -------------------------------------------------------------------


def run(settings: PipelineSettings, annotator: Annotator | None = None) -> PipelineResult:
    """Run load → clean → annotate → project → merge → export.

    Args:
        settings: Run settings.
        annotator: Annotator to use. A StanzaAnnotator is built from the
            settings when None.

    Returns:
        PipelineResult with the tagged corpus and run bookkeeping.

    Raises:
        ValueError: If the settings are inconsistent. Checked before any
            loading or annotation.
    """
    logger = setup_logger("tagging_pipeline", settings.log_file, settings.log_level)
    settings.validate()
    logger.info("Starting tagging pipeline for %s", settings.input_path)

    # ---------------------------------------------------------------
    # Load (RAW)
    # ---------------------------------------------------------------

    df_raw = load_corpus(settings.input_path, column_map=settings.column_map, logger=logger)

    # ---------------------------------------------------------------
    # Raw → Clean
    # ---------------------------------------------------------------

    preprocessor = CorpusPreprocessor(
        output_dir=settings.output_dir,
        act_number_prefix=settings.act_number_prefix,
        min_chars=settings.min_chars,
        max_chars=settings.max_chars,
        on_invalid_act_number=settings.on_invalid_act_number,
        log_file=settings.log_file,
    )
    df_clean = preprocessor.preprocess(df_raw)

    # ---------------------------------------------------------------
    # Annotate (cached)
    # ---------------------------------------------------------------

    owned_annotator = None
    if annotator is None:
        annotator = owned_annotator = StanzaAnnotator(
            language=settings.language,
            workers=settings.workers,
            model_dir=settings.model_dir,
            log_file=settings.log_file,
        )

    cache = AnnotationCache(settings.cache_dir, logger=logger) if settings.cache_dir else None
    try:
        annotations, cache_key = annotate_documents(
            df_clean, annotator, cache=cache, overwrite=settings.overwrite, logger=logger
        )
    finally:
        if owned_annotator is not None:
            owned_annotator.close()

    # ---------------------------------------------------------------
    # Project & merge
    # ---------------------------------------------------------------

    tokens = project_tokens(annotations, allowed_upos=settings.allowed_upos)
    validate_tokens(tokens, allowed_upos=settings.allowed_upos)
    logger.info("Kept %d of %d tokens after tag filter", len(tokens), len(annotations))

    tagged = merge_metadata(tokens, metadata_projection(df_clean))
    validate_tagged_corpus(tagged)
    logger.info("Tagged corpus has %d rows", len(tagged))

    counts = {
        "raw_documents": len(df_raw),
        "quarantined_documents": len(preprocessor.quarantined),
        "clean_documents": len(df_clean),
        "annotation_rows": len(annotations),
        "token_rows": len(tokens),
        "tagged_rows": len(tagged),
    }

    # ---------------------------------------------------------------
    # Persist
    # ---------------------------------------------------------------

    output_paths: dict[str, Path] = {}
    if not tagged.empty:
        output_paths["tagged_corpus"] = export_tagged_corpus(
            tagged, settings.output_dir, format=settings.output_format, logger=logger
        )
    else:
        logger.warning("No documents survived cleaning, nothing to export")
    if not df_clean.empty:
        output_paths["cleaned_corpus"] = preprocessor.export(
            df_clean, "cleaned_corpus", format=settings.output_format
        )
    if not preprocessor.quarantined.empty:
        output_paths["quarantined_documents"] = preprocessor.export(
            preprocessor.quarantined, "quarantined_documents", format=settings.output_format
        )

    # ---------------------------------------------------------------
    # Manifest
    # ---------------------------------------------------------------

    manifest_path = None
    if settings.manifest_dir:
        manifest_path = write_run_manifest(
            settings.manifest_dir,
            {
                "pipeline": "aktstykker_tagging",
                "input": str(settings.input_path),
                "cache_key": cache_key,
                "overwrite": settings.overwrite,
                "min_chars": settings.min_chars,
                "max_chars": settings.max_chars,
                "counts": counts,
                "outputs": {key: str(path) for key, path in output_paths.items()},
            },
        )

    logger.info("Tagging pipeline completed successfully")
    return PipelineResult(
        tagged_corpus=tagged,
        cleaned_corpus=df_clean,
        quarantined=preprocessor.quarantined,
        cache_key=cache_key,
        counts=counts,
        output_paths=output_paths,
        manifest_path=manifest_path,
    )


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Clean the funding-request corpus, tag it and merge tokens with metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--input", type=Path, help="Raw corpus file (parquet, csv, jsonl, json)")
    parser.add_argument("--output-dir", type=Path, help="Directory for exported tables")
    parser.add_argument("--cache-dir", type=Path, help="Directory for cached annotations")
    parser.add_argument("--manifest-dir", type=Path, help="Directory for run manifests")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Recompute annotations even when a cache entry exists",
    )
    parser.add_argument("--workers", type=int, help="Parallel annotation workers")
    parser.add_argument("--language", type=str, help="Stanza language code (default: da)")
    parser.add_argument("--min-chars", type=int, help="Minimum raw text length (inclusive)")
    parser.add_argument("--max-chars", type=int, help="Maximum raw text length (inclusive)")
    parser.add_argument("--format", choices=["csv", "parquet"], help="Output format")
    parser.add_argument(
        "--on-invalid-act-number",
        choices=["raise", "quarantine"],
        help="What to do with act numbers that are not numeric after the prefix",
    )
    parser.add_argument("--log-level", type=str, help="Logging level (e.g. DEBUG, INFO)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    log_file = Config.LOGS_DIR / "pipelines" / f"tagging_{datetime.now():%Y%m%d_%H%M%S}.log"
    settings = PipelineSettings.from_config(
        input_path=args.input,
        output_dir=args.output_dir,
        cache_dir=args.cache_dir,
        manifest_dir=args.manifest_dir,
        overwrite=args.overwrite,
        workers=args.workers,
        language=args.language,
        min_chars=args.min_chars,
        max_chars=args.max_chars,
        output_format=args.format,
        on_invalid_act_number=args.on_invalid_act_number,
        log_level=args.log_level,
        log_file=log_file,
    )

    print("Aktstykker Tagging Pipeline")
    print(f"{'=' * 60}")
    print(f"Input:  {settings.input_path}")
    print(f"Output: {settings.output_dir}")
    print(f"Cache:  {settings.cache_dir} (overwrite={settings.overwrite})")
    print(f"Length: {settings.min_chars}-{settings.max_chars} characters")
    print(f"Log:    {log_file}")
    print()

    try:
        Config.validate()
        result = run(settings)
    except Exception as e:
        logger = setup_logger("tagging_pipeline", log_file, settings.log_level)
        logger.exception("Tagging pipeline failed")
        print(f"✗ Error during tagging: {e}")
        print(f"  Check log file for details: {log_file}")
        return 1

    print(f"✓ Tagged {result.counts['clean_documents']} documents")
    for stage, count in result.counts.items():
        print(f"  - {stage}: {count}")
    for key, path in result.output_paths.items():
        print(f"  - {key}: {path}")
    print()
    print("✓ Tagging completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
