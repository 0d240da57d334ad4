"""Content-addressed cache for annotation results.

Entries are keyed by a SHA-256 digest of the sorted (doc_id, text) pairs of
the batch plus the annotator identity, so a change in the document set (for
example after changing the length thresholds) misses the cache instead of
returning another batch's tokens.

Layout:
    {cache_dir}/annotations_{key16}.parquet   annotation rows
    {cache_dir}/annotations_{key16}.json      manifest (digest, counts, created_at)
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from src.shared.exceptions import StaleCacheError


class AnnotationCache:
    """Parquet-backed annotation store keyed by batch digest."""

    KEY_LENGTH = 16

    def __init__(self, cache_dir: Path, logger: logging.Logger | None = None) -> None:
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logger or logging.getLogger(__name__)

    def _stem(self, digest: str) -> str:
        return f"annotations_{digest[: self.KEY_LENGTH]}"

    def data_path(self, digest: str) -> Path:
        return self.cache_dir / f"{self._stem(digest)}.parquet"

    def manifest_path(self, digest: str) -> Path:
        return self.cache_dir / f"{self._stem(digest)}.json"

    def exists(self, digest: str) -> bool:
        return self.data_path(digest).exists() and self.manifest_path(digest).exists()

    def load(self, digest: str, doc_ids: set[int] | None = None) -> pd.DataFrame | None:
        """Return cached annotations for a digest, or None on a miss.

        Args:
            digest: Full batch digest.
            doc_ids: Document ids of the requested batch, checked against the
                cached rows when given.

        Raises:
            StaleCacheError: If the manifest digest does not match, or cached
                rows reference documents outside the batch.
        """
        if not self.exists(digest):
            self.logger.info("Annotation cache miss for %s", digest[: self.KEY_LENGTH])
            return None

        with open(self.manifest_path(digest), encoding="utf-8") as f:
            manifest = json.load(f)

        if manifest.get("digest") != digest:
            raise StaleCacheError(
                f"Checksum mismatch for {self.data_path(digest).name}: "
                f"expected {digest}, found {manifest.get('digest')}"
            )

        df = pd.read_parquet(self.data_path(digest), engine="pyarrow")

        if len(df) != manifest.get("n_rows"):
            raise StaleCacheError(
                f"Row count mismatch for {self.data_path(digest).name}: "
                f"manifest says {manifest.get('n_rows')}, file has {len(df)}"
            )

        if doc_ids is not None and not df.empty:
            unknown = set(df["doc_id"].astype(int).unique()) - set(doc_ids)
            if unknown:
                raise StaleCacheError(
                    f"Cached annotations reference {len(unknown)} document(s) outside the batch"
                )

        self.logger.info(
            "Annotation cache hit for %s (%d rows)", digest[: self.KEY_LENGTH], len(df)
        )
        return df

    def store(self, digest: str, df: pd.DataFrame, n_documents: int) -> Path:
        """Write annotations and manifest atomically.

        Both files are written to temporary names first and moved into place
        with os.replace, the manifest last, so readers never see a data file
        without its manifest.
        """
        data_path = self.data_path(digest)
        manifest_path = self.manifest_path(digest)

        manifest = {
            "digest": digest,
            "n_documents": n_documents,
            "n_rows": len(df),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        fd, tmp_data = tempfile.mkstemp(dir=self.cache_dir, suffix=".parquet.tmp")
        os.close(fd)
        fd, tmp_manifest = tempfile.mkstemp(dir=self.cache_dir, suffix=".json.tmp")
        os.close(fd)
        try:
            df.to_parquet(tmp_data, index=False, engine="pyarrow")
            with open(tmp_manifest, "w", encoding="utf-8") as f:
                json.dump(manifest, f, indent=2)
            os.replace(tmp_data, data_path)
            os.replace(tmp_manifest, manifest_path)
        finally:
            for tmp in (tmp_data, tmp_manifest):
                if os.path.exists(tmp):
                    os.remove(tmp)

        self.logger.info("Cached %d annotation rows at %s", len(df), data_path)
        return data_path

    def invalidate(self, digest: str) -> None:
        """Remove the cache entry for a digest if present."""
        for path in (self.manifest_path(digest), self.data_path(digest)):
            if path.exists():
                path.unlink()
