"""Import pipeline orchestrator.

Runs one ingestion end to end:

1. Parse the extract into a read-only ``OsmExtract``.
2. Create or update every managed index (idempotent).
3. Build the country → settlement → district hierarchy (synchronous).
4. Fan out three concurrent push tasks (junctions, nodes, ways).
5. ``wait()`` joins all three and surfaces the first failure.

Steps 1 and 2 are setup: any error aborts the run immediately. There is
no retry and no partial resumption; a failed run is re-run from step 1.
The hierarchy is available to the lookup service as soon as ``start()``
returns, while indexing may still be in flight.

One importer runs at most one import at a time. The run is claimed under
a lock before parsing begins and released when ``wait()`` returns or
setup fails, so overlapping ``start()`` / ``submit()`` calls are rejected
with ``ImporterStateError`` instead of pushing the same datasets twice.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from osm_geocoder.activities.build_hierarchy import HierarchyBuilder
from osm_geocoder.activities.index_entities import push_junctions, push_nodes, push_ways
from osm_geocoder.activities.parse_osm import parse_osm
from osm_geocoder.backends.factory import get_backend
from osm_geocoder.core.exceptions import ContractError, PipelineError
from osm_geocoder.orchestrators.task_group import TaskGroup
from osm_geocoder.services.lookup import LookupService

if TYPE_CHECKING:
    from collections.abc import Callable

    from osm_geocoder.activities.accumulate import OsmExtract
    from osm_geocoder.backends.base import IndexBackend
    from osm_geocoder.core.config import ImporterConfig
    from osm_geocoder.models.hierarchy import Country, HierarchyBuildResult

logger = logging.getLogger(__name__)

# Run states
RUN_IDLE = "idle"
RUN_RUNNING = "running"
RUN_SUCCEEDED = "succeeded"
RUN_FAILED = "failed"


class ImporterStateError(ContractError):
    """Raised when importer operations are called out of order."""

    default_stage = "orchestration"
    default_code = "IMPORTER_STATE"


@dataclass(frozen=True, slots=True)
class RunStatus:
    """Outcome of the most recent import run.

    Attributes:
        run_id: Id of the run (empty before the first run).
        state: One of ``idle``, ``running``, ``succeeded``, ``failed``.
        error: ``to_error_dict()`` payload of the failure, if any.
    """

    run_id: str = ""
    state: str = RUN_IDLE
    error: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        return {"run_id": self.run_id, "state": self.state, "error": self.error}


def _error_payload(exc: BaseException) -> dict[str, object]:
    if isinstance(exc, PipelineError):
        return exc.to_error_dict()
    return {"category": "permanent", "code": type(exc).__name__, "message": str(exc)}


class Importer:
    """Orchestrates import runs against one index backend.

    Args:
        config: Validated importer configuration.
        backend: Index backend; built from ``config.index_backend`` when omitted.
        parser: Callable turning the extract path into an ``OsmExtract``.
    """

    def __init__(
        self,
        config: ImporterConfig,
        backend: IndexBackend | None = None,
        parser: Callable[[str], OsmExtract] = parse_osm,
    ) -> None:
        self._config = config
        self._backend = backend or get_backend(config.index_backend, config)
        self._parser = parser
        self._lock = threading.Lock()
        self._running = False
        self._group: TaskGroup | None = None
        self._result: HierarchyBuildResult | None = None
        self._status = RunStatus()
        self.run_id = ""

    @property
    def backend(self) -> IndexBackend:
        return self._backend

    @property
    def result(self) -> HierarchyBuildResult | None:
        """Hierarchy of the latest run whose build completed."""
        return self._result

    @property
    def countries(self) -> tuple[Country, ...]:
        """The built hierarchy (empty before the first build)."""
        if self._result is None:
            return ()
        return self._result.countries

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def running(self) -> bool:
        return self._running

    def _export_dir(self) -> Path | None:
        if not self._config.debug_export_dir:
            return None
        return Path(self._config.debug_export_dir)

    # -- run ownership ----------------------------------------------------

    def _claim(self) -> str:
        with self._lock:
            if self._running:
                msg = f"Import run {self.run_id} is already in progress"
                raise ImporterStateError(msg, correlation_id=self.run_id)
            self._running = True
            self.run_id = uuid.uuid4().hex
            self._status = RunStatus(run_id=self.run_id, state=RUN_RUNNING)
            return self.run_id

    def _release(self, error: BaseException | None) -> None:
        with self._lock:
            self._running = False
            self._group = None
            if error is None:
                self._status = RunStatus(run_id=self.run_id, state=RUN_SUCCEEDED)
            else:
                self._status = RunStatus(
                    run_id=self.run_id,
                    state=RUN_FAILED,
                    error=_error_payload(error),
                )

    # -- lifecycle --------------------------------------------------------

    def _setup(self) -> HierarchyBuildResult:
        logger.info(
            "Import started | run_id=%s | file=%s | country=%s | backend=%s",
            self.run_id,
            self._config.osm_filename,
            self._config.import_country,
            self._backend.name,
        )

        try:
            extract = self._parser(self._config.osm_filename)
            self._backend.update_indices()
        except PipelineError as exc:
            exc.correlation_id = exc.correlation_id or self.run_id
            logger.error("Import setup failed | run_id=%s | error=%s", self.run_id, exc)
            raise

        builder = HierarchyBuilder(
            extract,
            import_country=self._config.import_country,
            export_dir=self._export_dir(),
        )
        result = builder.build()
        self._result = result

        group = TaskGroup(name="index")
        group.go("junctions", push_junctions, extract, self._backend)
        group.go("nodes", push_nodes, extract, self._backend)
        group.go("ways", push_ways, extract, self._backend)
        self._group = group
        return result

    def start(self) -> HierarchyBuildResult:
        """Parse, prepare indices, build the hierarchy and start indexing.

        Returns:
            The hierarchy build result.

        Raises:
            OsmParseError: If the extract cannot be read.
            IndexSchemaError: If the indices cannot be prepared.
            ImporterStateError: If another run is still in progress.
        """
        self._claim()
        try:
            return self._setup()
        except Exception as exc:
            self._release(exc)
            raise

    def wait(self) -> None:
        """Block until all three push tasks finish, then release the run.

        Raises:
            ImporterStateError: If no run has finished its setup.
            Exception: The first error reported by a push task.
        """
        group = self._group
        if group is None:
            msg = "wait() called before start() completed"
            raise ImporterStateError(msg)

        started = time.monotonic()
        try:
            group.wait()
        except BaseException as exc:
            if isinstance(exc, PipelineError):
                exc.correlation_id = exc.correlation_id or self.run_id
            self._release(exc)
            raise
        self._release(None)
        logger.info(
            "Import finished | run_id=%s | indexing_wait=%.1fs",
            self.run_id,
            time.monotonic() - started,
        )

    def run(self) -> HierarchyBuildResult:
        """``start()`` then ``wait()``; returns the hierarchy build result."""
        result = self.start()
        self.wait()
        return result

    def submit(self) -> str:
        """Run a full import on a background thread.

        The outcome is reported through ``status``.

        Returns:
            The id of the claimed run.

        Raises:
            ImporterStateError: If another run is still in progress.
        """
        run_id = self._claim()
        worker = threading.Thread(
            target=self._run_claimed,
            name=f"import-{run_id[:8]}",
            daemon=True,
        )
        worker.start()
        return run_id

    def _run_claimed(self) -> None:
        try:
            self._setup()
        except Exception as exc:
            self._release(exc)
            logger.exception("Background import setup failed | run_id=%s", self.run_id)
            return
        try:
            self.wait()
        except Exception:
            logger.exception("Background import failed | run_id=%s", self.run_id)

    def done(self) -> None:
        """Delete every managed index (synchronous teardown)."""
        self._backend.delete_indices()

    def lookup(self) -> LookupService:
        """Return a lookup service over the latest hierarchy and the backend.

        Raises:
            ImporterStateError: If no hierarchy has been built yet.
        """
        if self._result is None:
            msg = "No hierarchy available; run an import first"
            raise ImporterStateError(msg)
        return LookupService(
            self._backend,
            self._result.countries,
            result_size=self._config.search_result_size,
        )
