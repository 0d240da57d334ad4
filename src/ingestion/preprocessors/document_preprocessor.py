"""Abstract base class for document-oriented preprocessors.

For text-heavy corpora where each row is one document carrying free text
plus a handful of metadata fields.

Handles Raw → Clean transformation for document data:
- Assign stable identifiers
- Drop unusable documents
- Clean and normalize text content
- Export cleaned tables next to the run outputs
"""

from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

from src.shared.utils import normalize_whitespace, setup_logger
from src.storage.export import export_table


class DocumentPreprocessor(ABC):
    """Base class for document-oriented data preprocessors.

    Subclasses must implement:
        preprocess(): transform the raw document table to the clean table.
        validate(): ensure data conforms to the clean contract.
    """

    def __init__(
        self,
        output_dir: Path,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the document preprocessor.

        Args:
            output_dir: Directory for cleaned exports (e.g., data/processed/tagged/).
            log_file: Optional path for file-based logging.
        """
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def preprocess(self, df: pd.DataFrame) -> pd.DataFrame:
        """Transform the raw document table to the clean table.

        Args:
            df: Raw documents as loaded from storage.

        Returns:
            Cleaned DataFrame.
        """
        ...

    @abstractmethod
    def validate(self, df: pd.DataFrame) -> bool:
        """Validate that DataFrame conforms to the clean contract.

        Args:
            df: DataFrame to validate.

        Returns:
            True if valid.

        Raises:
            ValueError: If validation fails with details.
        """
        ...

    def clean_text(self, text: str) -> str:
        """Clean and normalize text content.

        Args:
            text: Raw text string.

        Returns:
            Text trimmed with every whitespace run collapsed to one space.
        """
        if not text:
            return ""
        return normalize_whitespace(text)

    def export(self, df: pd.DataFrame, name: str, format: str = "parquet") -> Path:
        """Export a cleaned table into output_dir.

        Args:
            df: DataFrame to export.
            name: File stem (e.g., "cleaned_corpus").
            format: Output format ("csv" or "parquet").

        Returns:
            Path to the written file.
        """
        return export_table(df, self.output_dir, name, format=format, logger=self.logger)
