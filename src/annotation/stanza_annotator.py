"""Stanza-backed morpho-syntactic annotator.

Produces Universal Dependencies annotations (tokens, lemmas, POS tags,
morphological features and dependency relations) for a batch of documents.

Output columns (one row per word):
    - doc_id, paragraph_id, sentence_id, sentence, token_id
    - token, lemma, upos, xpos, feats
    - head_token_id, dep_rel, deps, misc

paragraph_id comes from blank-line splits of the input text, sentence_id runs
across the whole document, token_id restarts at 1 in every sentence.
"""

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pandas as pd
import stanza
import torch

from src.pipelines.tagging.schema import ANNOTATION_COLUMNS, ANNOTATION_SORT_KEYS
from src.shared.exceptions import AnnotationError
from src.shared.utils import setup_logger

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


class StanzaAnnotator:
    """Annotator that runs a pre-trained stanza pipeline over documents.

    Models are downloaded once per instance. The worker pool lives as long as
    the instance and each of its threads builds its own stanza.Pipeline on
    first use, so at most ``workers`` models are loaded across all batches.
    Call ``close()`` to release the pool.
    """

    DEFAULT_PROCESSORS = "tokenize,pos,lemma,depparse"

    def __init__(
        self,
        language: str = "da",
        workers: int = 1,
        processors: str = DEFAULT_PROCESSORS,
        model_dir: Path | None = None,
        use_gpu: bool | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize StanzaAnnotator.

        Args:
            language: Stanza language code (e.g. "da").
            workers: Maximum number of documents annotated in parallel.
            processors: Comma-separated stanza processors.
            model_dir: Directory holding stanza resources (stanza default if None).
            use_gpu: Force GPU on/off. Auto-detected when None.
            log_file: Optional path for file-based logging.
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")

        self.language = language
        self.workers = workers
        self.processors = processors
        self.model_dir = model_dir
        self.use_gpu = torch.cuda.is_available() if use_gpu is None else use_gpu
        self.logger = setup_logger(self.__class__.__name__, log_file)

        self._local = threading.local()
        self._download_lock = threading.Lock()
        self._models_ready = False
        self._executor: ThreadPoolExecutor | None = None

    @property
    def cache_tag(self) -> str:
        return f"stanza-{stanza.__version__}:{self.language}:{self.processors}"

    def _ensure_models(self) -> None:
        """Download stanza resources once."""
        with self._download_lock:
            if self._models_ready:
                return
            self.logger.info(
                "Downloading stanza models for '%s' (%s)...", self.language, self.processors
            )
            try:
                stanza.download(
                    self.language,
                    model_dir=str(self.model_dir) if self.model_dir else None,
                    processors=self.processors,
                    verbose=False,
                )
            except Exception as e:
                raise AnnotationError(
                    f"Failed to download stanza models for '{self.language}': {e}"
                ) from e
            self._models_ready = True

    def _pipeline(self) -> "stanza.Pipeline":
        """Return the calling thread's stanza pipeline, building it on first use."""
        nlp = getattr(self._local, "nlp", None)
        if nlp is None:
            device_name = "GPU" if self.use_gpu else "CPU"
            self.logger.info("Loading stanza pipeline on %s...", device_name)
            kwargs = {
                "processors": self.processors,
                "use_gpu": self.use_gpu,
                "verbose": False,
                "download_method": None,
            }
            if self.model_dir:
                kwargs["dir"] = str(self.model_dir)
            try:
                nlp = stanza.Pipeline(self.language, **kwargs)
            except Exception as e:
                raise AnnotationError(
                    f"Failed to load stanza pipeline for '{self.language}': {e}"
                ) from e
            self._local.nlp = nlp
        return nlp

    def annotate_batch(self, documents: list[tuple[int, str]]) -> pd.DataFrame:
        """Annotate a batch of documents.

        Args:
            documents: List of (doc_id, text) pairs.

        Returns:
            Annotation rows sorted by (doc_id, paragraph_id, sentence_id, token_id).

        Raises:
            AnnotationError: If models cannot be loaded or a document fails.
        """
        if not documents:
            return pd.DataFrame(columns=ANNOTATION_COLUMNS)

        self._ensure_models()
        self.logger.info(
            "Annotating %d documents with %d worker(s)", len(documents), self.workers
        )

        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="stanza"
            )
        results = list(self._executor.map(self._annotate_document, documents))

        rows = [row for doc_rows in results for row in doc_rows]
        df = pd.DataFrame(rows, columns=ANNOTATION_COLUMNS)
        df = df.sort_values(ANNOTATION_SORT_KEYS, kind="mergesort").reset_index(drop=True)

        self.logger.info("Annotated %d tokens", len(df))
        return df

    def close(self) -> None:
        """Shut down the worker pool; its pipelines are released with it."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _annotate_document(self, document: tuple[int, str]) -> list[dict]:
        """Annotate one document paragraph by paragraph."""
        doc_id, text = document
        nlp = self._pipeline()

        rows = []
        sentence_id = 0
        paragraphs = [p.strip() for p in _PARAGRAPH_BREAK_RE.split(text) if p.strip()]
        for paragraph_id, paragraph in enumerate(paragraphs, 1):
            try:
                doc = nlp(paragraph)
            except Exception as e:
                raise AnnotationError(f"Annotation failed for doc_id={doc_id}: {e}") from e

            for sentence in doc.sentences:
                sentence_id += 1
                for word in sentence.words:
                    rows.append(
                        {
                            "doc_id": int(doc_id),
                            "paragraph_id": paragraph_id,
                            "sentence_id": sentence_id,
                            "sentence": sentence.text,
                            "token_id": int(word.id),
                            "token": word.text,
                            "lemma": word.lemma,
                            "upos": word.upos,
                            "xpos": word.xpos,
                            "feats": word.feats,
                            "head_token_id": word.head,
                            "dep_rel": word.deprel,
                            "deps": getattr(word, "deps", None),
                            "misc": getattr(word, "misc", None),
                        }
                    )
        return rows
