"""Pipeline exception taxonomy.

Every error raised by the importer, the index backends and the lookup
service derives from ``PipelineError``. Subclasses declare their stage,
code and retry default as class attributes, so raising sites only pass
a message.

Categories
----------
- ``ValidationError``: bad input (coordinates, query text, geometry).
- ``TransientError``: the backend or network may recover; re-run the import.
- ``PermanentError``: re-running with the same input fails the same way.
- ``ContractError``: an API used out of order (e.g. ``wait()`` before ``start()``).

Input-tolerance conditions (missing tags, unresolved references,
degenerate rings) are not represented here: they degrade the affected
entity and are logged, they never raise.
"""

from __future__ import annotations

from typing import ClassVar


class PipelineError(Exception):
    """Base exception for all pipeline-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"parse_osm"``, ``"index"``).
        code: Machine-readable error code (e.g. ``"OSM_PARSE_FAILED"``).
        retryable: Whether re-running the whole import may succeed.
        correlation_id: Import run id or request id.
    """

    default_stage: ClassVar[str] = ""
    default_code: ClassVar[str] = ""
    default_retryable: ClassVar[bool] = False
    #: Category of the category base classes; ``None`` derives it from ``retryable``.
    fixed_category: ClassVar[str | None] = None

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
        correlation_id: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        self.correlation_id = correlation_id

    @property
    def category(self) -> str:
        """One of ``validation``, ``transient``, ``permanent``, ``contract``."""
        if self.fixed_category is not None:
            return self.fixed_category
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Structured payload for log lines and HTTP error bodies."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PipelineError):
    """Rejected input. Never retryable."""

    fixed_category = "validation"


class TransientError(PipelineError):
    """Failure that may go away on a later run."""

    default_retryable = True
    fixed_category = "transient"


class PermanentError(PipelineError):
    """Failure that a re-run with the same input would repeat."""

    fixed_category = "permanent"


class ContractError(PipelineError):
    """Operation called out of order or on a closed object. Never retryable."""

    fixed_category = "contract"
