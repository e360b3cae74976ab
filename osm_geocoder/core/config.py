"""Importer configuration loaded from environment variables.

All configuration values have sensible defaults for a local run against
an Elasticsearch node on ``localhost``. Azure Functions app settings (or
the process environment) are the source of truth.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out of
    its valid range, so that a bad deployment fails at startup rather than
    half-way through an import.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from osm_geocoder.core.exceptions import PipelineError

MAX_SEARCH_RESULT_SIZE = 1000


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ImporterConfig:
    """Immutable importer configuration.

    Loaded once at startup and threaded through the importer, the index
    backend and the lookup service.

    Attributes:
        import_country: ``name`` tag of the single country to materialise.
        osm_filename: Path of the ``.osm`` / ``.osm.pbf`` extract to ingest.
        index_backend: Registered backend name (``elasticsearch`` or ``memory``).
        elasticsearch_url: Elasticsearch endpoint used by the Elasticsearch backend.
        index_prefix: Prefix for every managed index (``{prefix}-{dataset}``).
        bulk_chunk_size: Documents per bulk request.
        search_result_size: Maximum hits returned by forward search.
        debug_export_dir: Directory receiving per-country boundary exports;
            empty disables the export.
    """

    import_country: str = "Kyrgyzstan"
    osm_filename: str = "osm.pbf"
    index_backend: str = "elasticsearch"
    elasticsearch_url: str = "http://localhost:9200"
    index_prefix: str = "osm"
    bulk_chunk_size: int = 500
    search_result_size: int = 10
    debug_export_dir: str = "."

    @classmethod
    def from_env(cls) -> ImporterConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``BULK_CHUNK_SIZE=abc``).
        """
        config = cls(
            import_country=os.getenv("IMPORT_COUNTRY", "Kyrgyzstan"),
            osm_filename=os.getenv("OSM_FILENAME", "osm.pbf"),
            index_backend=os.getenv("INDEX_BACKEND", "elasticsearch"),
            elasticsearch_url=os.getenv("ELASTICSEARCH_URL", "http://localhost:9200"),
            index_prefix=os.getenv("INDEX_PREFIX", "osm"),
            bulk_chunk_size=int(os.getenv("BULK_CHUNK_SIZE", "500")),
            search_result_size=int(os.getenv("SEARCH_RESULT_SIZE", "10")),
            debug_export_dir=os.getenv("DEBUG_EXPORT_DIR", "."),
        )
        validate_config(config)
        return config


def validate_config(config: ImporterConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.import_country:
        raise ConfigValidationError(
            "IMPORT_COUNTRY",
            config.import_country,
            "must not be empty",
        )

    if not config.osm_filename:
        raise ConfigValidationError(
            "OSM_FILENAME",
            config.osm_filename,
            "must not be empty",
        )

    if not config.index_backend:
        raise ConfigValidationError(
            "INDEX_BACKEND",
            config.index_backend,
            "must not be empty",
        )

    if not config.index_prefix or config.index_prefix != config.index_prefix.lower():
        raise ConfigValidationError(
            "INDEX_PREFIX",
            config.index_prefix,
            "must be a non-empty lowercase string",
        )

    if config.bulk_chunk_size <= 0:
        raise ConfigValidationError(
            "BULK_CHUNK_SIZE",
            config.bulk_chunk_size,
            "must be > 0 (documents)",
        )

    if not 1 <= config.search_result_size <= MAX_SEARCH_RESULT_SIZE:
        raise ConfigValidationError(
            "SEARCH_RESULT_SIZE",
            config.search_result_size,
            f"must be between 1 and {MAX_SEARCH_RESULT_SIZE}",
        )
