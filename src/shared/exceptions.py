"""Exception types raised by the tagging pipeline."""


class TaggingPipelineError(Exception):
    """Base class for all pipeline errors."""


class CorpusSchemaError(TaggingPipelineError, ValueError):
    """Raw corpus is missing required columns."""


class UnparseableIdentifierError(TaggingPipelineError, ValueError):
    """Act number could not be parsed into an integer after prefix removal."""

    def __init__(self, values: list[str], prefix: str) -> None:
        self.values = values
        self.prefix = prefix
        preview = ", ".join(repr(v) for v in values[:5])
        more = f" (+{len(values) - 5} more)" if len(values) > 5 else ""
        super().__init__(
            f"{len(values)} act number(s) not numeric after removing prefix "
            f"'{prefix}': {preview}{more}"
        )


class DuplicateDocumentIdError(TaggingPipelineError, ValueError):
    """Metadata projection holds more than one row for a document id."""


class AnnotationError(TaggingPipelineError, RuntimeError):
    """The annotation model could not be loaded or failed on a batch."""


class StaleCacheError(TaggingPipelineError):
    """Cached annotations do not belong to the requested document batch."""
