"""In-process index backend.

Keeps every dataset in a dict guarded by a lock, so the three push tasks
can load it concurrently. Used for tests and for local runs without an
Elasticsearch node.

Ranking is by name match quality: exact (case-insensitive) match, then
prefix, then substring; ties break on dataset and id.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from osm_geocoder.backends.base import IndexBackend, IndexPushError
from osm_geocoder.core.constants import DATASETS
from osm_geocoder.models.documents import SearchHit

if TYPE_CHECKING:
    from collections.abc import Sequence

    from osm_geocoder.core.config import ImporterConfig
    from osm_geocoder.models.documents import IndexDocument

logger = logging.getLogger(__name__)

_EXACT_SCORE = 3.0
_PREFIX_SCORE = 2.0
_SUBSTRING_SCORE = 1.0


def _score(query: str, document: IndexDocument) -> float:
    names = [document.name, *getattr(document, "street_names", [])]
    best = 0.0
    for name in names:
        candidate = name.casefold()
        if candidate == query:
            best = max(best, _EXACT_SCORE)
        elif candidate.startswith(query):
            best = max(best, _PREFIX_SCORE)
        elif query in candidate:
            best = max(best, _SUBSTRING_SCORE)
    return best


class InMemoryBackend(IndexBackend):
    """Dict-backed index with the same contract as the Elasticsearch backend."""

    name = "memory"

    def __init__(self, config: ImporterConfig) -> None:
        super().__init__(config)
        self._lock = threading.Lock()
        self._indices: dict[str, dict[str, IndexDocument]] = {}

    def update_indices(self) -> None:
        with self._lock:
            for dataset in DATASETS:
                self._indices.setdefault(dataset, {})

    def delete_indices(self) -> None:
        with self._lock:
            self._indices.clear()

    def bulk_push(self, dataset: str, documents: Sequence[IndexDocument]) -> int:
        with self._lock:
            index = self._indices.get(dataset)
            if index is None:
                msg = f"Index for dataset {dataset!r} does not exist; call update_indices() first"
                raise IndexPushError(self.name, msg, dataset=dataset, retryable=False)
            for document in documents:
                index[document.id] = document
        logger.debug("Documents stored | dataset=%s | documents=%d", dataset, len(documents))
        return len(documents)

    def documents(self, dataset: str) -> list[IndexDocument]:
        """Return a snapshot of the documents stored for *dataset*."""
        with self._lock:
            return list(self._indices.get(dataset, {}).values())

    def search(self, query: str, size: int) -> list[SearchHit]:
        needle = query.casefold()
        with self._lock:
            scored = [
                (_score(needle, document), dataset, document)
                for dataset, index in self._indices.items()
                for document in index.values()
            ]
        scored = [entry for entry in scored if entry[0] > 0]
        scored.sort(key=lambda entry: (-entry[0], entry[1], entry[2].id))
        return [
            SearchHit(
                dataset=dataset,
                id=document.id,
                name=document.name,
                score=score,
                location=document.location,
                tags=getattr(document, "tags", {}),
                street_names=getattr(document, "street_names", []),
            )
            for score, dataset, document in scored[:size]
        ]
