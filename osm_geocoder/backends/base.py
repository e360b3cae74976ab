"""IndexBackend abstract base class.

Defines the contract every search/index backend must implement. The
importer and the lookup service interact exclusively with this
interface and never know which concrete backend is behind it.

Lifecycle:
    1. ``update_indices()``            — idempotent create-or-update of every managed index.
    2. ``bulk_push(dataset, docs)``    — one bulk load per dataset per run.
    3. ``search(query, size)``         — forward search once data is loaded.
    4. ``delete_indices()``            — teardown between runs.

Each push reports a single outcome for its whole batch: either the
pushed document count, or an ``IndexPushError``.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from osm_geocoder.core.constants import DATASET_JUNCTIONS, DATASET_NODES, DATASET_WAYS
from osm_geocoder.core.exceptions import PipelineError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from osm_geocoder.core.config import ImporterConfig
    from osm_geocoder.models.documents import (
        IndexDocument,
        JunctionDocument,
        NodeDocument,
        SearchHit,
        WayDocument,
    )


class IndexBackend(abc.ABC):
    """Abstract base class for index backends.

    Concrete implementations must override ``update_indices``,
    ``bulk_push``, ``delete_indices`` and ``search``. The constructor
    receives the ``ImporterConfig`` (index prefix, chunk size, endpoint).

    Example usage::

        backend = get_backend("elasticsearch", config)
        backend.update_indices()
        backend.push_nodes(documents)
        hits = backend.search("Ala-Too", size=10)
    """

    #: Registry name of the backend (overridden by subclasses).
    name: str = ""

    def __init__(self, config: ImporterConfig) -> None:
        self._config = config

    @property
    def config(self) -> ImporterConfig:
        """Return the importer configuration (read-only)."""
        return self._config

    # ------------------------------------------------------------------
    # Abstract methods (every backend implements these)
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def update_indices(self) -> None:
        """Create every managed index, or update its mapping if it exists.

        Raises:
            IndexSchemaError: If an index cannot be created or updated.
        """

    @abc.abstractmethod
    def bulk_push(self, dataset: str, documents: Sequence[IndexDocument]) -> int:
        """Load *documents* into the index for *dataset*.

        Args:
            dataset: One of ``DATASETS``.
            documents: Documents to index; ids are unique within the dataset.

        Returns:
            Number of documents indexed.

        Raises:
            IndexPushError: If any part of the batch fails.
        """

    @abc.abstractmethod
    def delete_indices(self) -> None:
        """Delete every managed index. Missing indices are ignored."""

    @abc.abstractmethod
    def search(self, query: str, size: int) -> list[SearchHit]:
        """Return at most *size* hits for *query*, best match first.

        Raises:
            IndexSearchError: If the backend cannot answer.
        """

    # ------------------------------------------------------------------
    # Dataset-specific pushes
    # ------------------------------------------------------------------

    def push_junctions(self, documents: Sequence[JunctionDocument]) -> int:
        return self.bulk_push(DATASET_JUNCTIONS, documents)

    def push_nodes(self, documents: Sequence[NodeDocument]) -> int:
        return self.bulk_push(DATASET_NODES, documents)

    def push_ways(self, documents: Sequence[WayDocument]) -> int:
        return self.bulk_push(DATASET_WAYS, documents)


# ---------------------------------------------------------------------------
# Backend exceptions
# ---------------------------------------------------------------------------


class IndexBackendError(PipelineError):
    """Base exception for index backend errors.

    Attributes:
        backend: Name of the backend that raised the error.
        message: Human-readable error description.
        retryable: Whether re-running the import may succeed.
    """

    default_stage = "index"
    default_code = "INDEX_BACKEND_ERROR"

    def __init__(
        self,
        backend: str,
        message: str,
        *,
        retryable: bool = False,
    ) -> None:
        self.backend = backend
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.backend}] {self.message}"


class IndexSchemaError(IndexBackendError):
    """Index creation or mapping update failed. Fatal to the run."""

    default_code = "INDEX_SCHEMA_FAILED"


class IndexPushError(IndexBackendError):
    """A bulk push failed for (part of) its batch.

    Attributes:
        dataset: Dataset whose push failed.
        failed: Number of documents reported as failed (0 if unknown).
    """

    default_code = "INDEX_PUSH_FAILED"

    def __init__(
        self,
        backend: str,
        message: str,
        *,
        dataset: str,
        failed: int = 0,
        retryable: bool = True,
    ) -> None:
        self.dataset = dataset
        self.failed = failed
        super().__init__(backend, message, retryable=retryable)


class IndexSearchError(IndexBackendError):
    """Forward search could not be executed."""

    default_code = "INDEX_SEARCH_FAILED"
