"""Corpus preprocessor for funding requests (Raw → Clean).

Steps, in order:
1. Identity: drop duplicate and keyless rows, parse act numbers, sort by
   (ministry, act number) and assign doc_id 1..N in that order.
2. Filter: drop documents without text, then those whose raw character
   length falls outside [min_chars, max_chars]. Length is measured once on
   the raw text and stored as n_chars.
3. Normalize: trim and collapse whitespace runs to single spaces, then drop
   documents whose text became empty.

Clean Schema:
    - doc_id: int, unique, 1..N in (ministry, act_number) order
    - text: normalized text
    - ministry, status, date: as loaded
    - act_number: parsed integer (nullable Int64)
    - n_chars: raw character length before normalization
"""

import re
from pathlib import Path

import pandas as pd

from src.ingestion.preprocessors.document_preprocessor import DocumentPreprocessor
from src.pipelines.tagging.schema import RAW_CORPUS_COLUMNS
from src.shared.exceptions import UnparseableIdentifierError

_IRREGULAR_WHITESPACE_RE = re.compile(r"^\s|\s$|\s\s|[^\S ]")
_INT64_MAX = 2**63 - 1


class CorpusPreprocessor(DocumentPreprocessor):
    """Preprocessor that turns raw funding requests into annotatable documents."""

    INVALID_ACT_NUMBER_POLICIES = ("raise", "quarantine")

    def __init__(
        self,
        output_dir: Path,
        act_number_prefix: str = "Aktstk.",
        min_chars: int = 1000,
        max_chars: int = 5000,
        on_invalid_act_number: str = "raise",
        log_file: Path | None = None,
    ) -> None:
        """Initialize CorpusPreprocessor.

        Args:
            output_dir: Directory for cleaned exports.
            act_number_prefix: Literal prefix stripped from act numbers.
            min_chars: Smallest raw text length kept (inclusive).
            max_chars: Largest raw text length kept (inclusive).
            on_invalid_act_number: "raise" to fail on non-numeric act numbers,
                "quarantine" to set those rows aside and continue.
            log_file: Optional path for file-based logging.
        """
        super().__init__(output_dir, log_file)

        if min_chars > max_chars:
            raise ValueError(f"min_chars ({min_chars}) must not exceed max_chars ({max_chars})")
        if on_invalid_act_number not in self.INVALID_ACT_NUMBER_POLICIES:
            raise ValueError(
                f"Invalid on_invalid_act_number '{on_invalid_act_number}'. "
                f"Must be one of {self.INVALID_ACT_NUMBER_POLICIES}."
            )

        self.act_number_prefix = act_number_prefix
        self.min_chars = min_chars
        self.max_chars = max_chars
        self.on_invalid_act_number = on_invalid_act_number
        self.quarantined = pd.DataFrame(columns=RAW_CORPUS_COLUMNS)

    def preprocess(self, df: pd.DataFrame) -> pd.DataFrame:
        """Run identity assignment, filtering and normalization.

        Args:
            df: Raw corpus with at least the raw corpus columns.

        Returns:
            Cleaned documents ready for annotation.
        """
        self.logger.info("Starting preprocessing of %d raw documents", len(df))

        df = self.assign_document_ids(df)
        df = self.filter_documents(df)
        df = self.normalize_texts(df)

        self.validate(df)

        self.logger.info("Preprocessed %d documents", len(df))
        return df

    def parse_act_numbers(self, act_numbers: pd.Series) -> tuple[pd.Series, pd.Series]:
        """Strip the literal prefix and parse the remainder as an integer.

        Args:
            act_numbers: Raw act number strings (e.g. "Aktstk. 5").

        Returns:
            Tuple of (parsed values as Int64, boolean mask of parseable rows).
            Digit strings too large for int64 count as unparseable.
        """
        remainder = (
            act_numbers.astype(str)
            .str.strip()
            .str.removeprefix(self.act_number_prefix)
            .str.strip()
        )
        digits = remainder.str.fullmatch(r"\d+").fillna(False).astype(bool).to_numpy()
        values = [int(value) for value in remainder[digits]]
        fits = [value <= _INT64_MAX for value in values]

        parseable = digits.copy()
        parseable[digits] = fits
        parsed = pd.Series(pd.NA, index=act_numbers.index, dtype="Int64")
        if parseable.any():
            parsed[parseable] = [value for value, ok in zip(values, fits) if ok]
        return parsed, pd.Series(parseable, index=act_numbers.index)

    def assign_document_ids(self, df: pd.DataFrame) -> pd.DataFrame:
        """Deduplicate and assign doc_id by (ministry, act number) order.

        Args:
            df: Raw corpus.

        Returns:
            Sorted copy with parsed act_number and doc_id 1..N.

        Raises:
            UnparseableIdentifierError: If an act number is not numeric after
                prefix removal and the policy is "raise".
        """
        df = df.copy()
        self.quarantined = pd.DataFrame(columns=RAW_CORPUS_COLUMNS)

        initial_count = len(df)
        df = df.drop_duplicates(subset=RAW_CORPUS_COLUMNS, keep="first")
        if len(df) < initial_count:
            self.logger.info("Removed %d duplicate documents", initial_count - len(df))

        keyless = df["ministry"].isna() | df["act_number"].isna()
        if keyless.any():
            self.logger.info(
                "Removed %d documents without ministry or act number", int(keyless.sum())
            )
            df = df[~keyless].copy()

        parsed, parseable = self.parse_act_numbers(df["act_number"])
        if not parseable.all():
            invalid = df[~parseable]
            if self.on_invalid_act_number == "raise":
                raise UnparseableIdentifierError(
                    invalid["act_number"].astype(str).tolist(), self.act_number_prefix
                )
            self.logger.warning(
                "Quarantined %d documents with unparseable act numbers: %s",
                len(invalid),
                invalid["act_number"].astype(str).tolist()[:5],
            )
            self.quarantined = invalid.reset_index(drop=True)
            df = df[parseable].copy()
            parsed = parsed[parseable]

        df["act_number"] = parsed
        df = df.sort_values(["ministry", "act_number"], kind="mergesort").reset_index(drop=True)
        df = df.drop(columns=["doc_id"], errors="ignore")
        df.insert(0, "doc_id", range(1, len(df) + 1))
        df["doc_id"] = df["doc_id"].astype("int64")

        self.logger.info("Assigned ids to %d documents", len(df))
        return df

    def filter_documents(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop documents that are missing, too short or too long.

        Args:
            df: Documents with ids assigned.

        Returns:
            Surviving documents with an n_chars column (raw length).
        """
        count = len(df)
        df = df[df["text"].notna()].copy()
        self.logger.info(
            "Removed %d documents without text (%d remain)", count - len(df), len(df)
        )

        df["n_chars"] = df["text"].astype(str).str.len().astype("int64")

        count = len(df)
        df = df[df["n_chars"] >= self.min_chars]
        self.logger.info(
            "Removed %d documents shorter than %d characters (%d remain)",
            count - len(df),
            self.min_chars,
            len(df),
        )

        count = len(df)
        df = df[df["n_chars"] <= self.max_chars]
        self.logger.info(
            "Removed %d documents longer than %d characters (%d remain)",
            count - len(df),
            self.max_chars,
            len(df),
        )

        return df.reset_index(drop=True)

    def normalize_texts(self, df: pd.DataFrame) -> pd.DataFrame:
        """Collapse irregular whitespace and drop documents left without text.

        n_chars keeps the raw length, so a whitespace-only document can pass
        the length filter and only turn empty here.
        """
        df = df.copy()
        df["text"] = df["text"].astype(str).map(self.clean_text)

        count = len(df)
        df = df[df["text"] != ""]
        if len(df) < count:
            self.logger.info(
                "Removed %d documents with only whitespace (%d remain)", count - len(df), len(df)
            )
        return df.reset_index(drop=True)

    def validate(self, df: pd.DataFrame) -> bool:
        """Validate the clean corpus contract.

        Args:
            df: DataFrame to validate.

        Returns:
            True if valid.

        Raises:
            ValueError: If validation fails with details.
        """
        required_columns = ["doc_id", "n_chars"] + RAW_CORPUS_COLUMNS
        missing = set(required_columns) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        if df["doc_id"].duplicated().any():
            raise ValueError(f"Duplicate doc_id found: {int(df['doc_id'].duplicated().sum())}")

        if df["text"].isna().any():
            raise ValueError(f"Null text in {int(df['text'].isna().sum())} documents")

        if (df["text"] == "").any():
            raise ValueError(f"Empty text in {int((df['text'] == '').sum())} documents")

        out_of_range = df[~df["n_chars"].between(self.min_chars, self.max_chars)]
        if len(out_of_range) > 0:
            raise ValueError(
                f"n_chars outside [{self.min_chars}, {self.max_chars}]: {len(out_of_range)} documents"
            )

        irregular = df["text"].map(lambda text: _IRREGULAR_WHITESPACE_RE.search(text) is not None)
        if irregular.any():
            raise ValueError(f"Irregular whitespace in {int(irregular.sum())} documents")

        self.logger.info("Schema validation passed for %d documents", len(df))
        return True
