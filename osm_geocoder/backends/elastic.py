"""Elasticsearch index backend.

Concrete ``IndexBackend`` using the official ``elasticsearch`` client.
Bulk loads go through ``elasticsearch.helpers.bulk``; any per-document
failure fails the whole dataset push with one ``IndexPushError``.

Index layout (one index per dataset, ``{prefix}-{dataset}``):

- ``name``: ``text`` with a ``keyword`` sub-field
- ``location``: ``geo_point``
- ``street_names`` (junctions): ``text``
- ``tags`` (nodes, ways): ``flattened``
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from elasticsearch import ApiError, Elasticsearch, TransportError
from elasticsearch.helpers import BulkIndexError, bulk

from osm_geocoder.backends.base import (
    IndexBackend,
    IndexPushError,
    IndexSchemaError,
    IndexSearchError,
)
from osm_geocoder.core.constants import (
    DATASET_JUNCTIONS,
    DATASET_NODES,
    DATASET_WAYS,
    DATASETS,
    index_name,
)
from osm_geocoder.models.documents import GeoLocation, SearchHit

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from osm_geocoder.core.config import ImporterConfig
    from osm_geocoder.models.documents import IndexDocument

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Mappings
# ---------------------------------------------------------------------------

_COMMON_PROPERTIES: dict[str, Any] = {
    "id": {"type": "keyword"},
    "name": {"type": "text", "fields": {"keyword": {"type": "keyword", "ignore_above": 256}}},
    "location": {"type": "geo_point"},
}

_DATASET_PROPERTIES: dict[str, dict[str, Any]] = {
    DATASET_JUNCTIONS: {"street_names": {"type": "text"}},
    DATASET_NODES: {"tags": {"type": "flattened"}},
    DATASET_WAYS: {"tags": {"type": "flattened"}, "node_count": {"type": "integer"}},
}

_SEARCH_FIELDS = ["name^3", "street_names"]

_DEFAULT_REQUEST_TIMEOUT_S = 30


def mapping_properties(dataset: str) -> dict[str, Any]:
    """Return the mapping ``properties`` for *dataset*."""
    return {**_COMMON_PROPERTIES, **_DATASET_PROPERTIES.get(dataset, {})}


class ElasticsearchBackend(IndexBackend):
    """Elasticsearch-backed index.

    Args:
        config: Importer configuration (endpoint, prefix, chunk size).
        client: Pre-built client, mainly for tests. Built from
            ``config.elasticsearch_url`` when omitted.
    """

    name = "elasticsearch"

    def __init__(self, config: ImporterConfig, client: Elasticsearch | None = None) -> None:
        super().__init__(config)
        self._client = client or Elasticsearch(
            config.elasticsearch_url,
            request_timeout=_DEFAULT_REQUEST_TIMEOUT_S,
        )

    def _index(self, dataset: str) -> str:
        return index_name(self._config.index_prefix, dataset)

    def _dataset_of(self, index: str) -> str:
        return index.removeprefix(f"{self._config.index_prefix}-")

    # ------------------------------------------------------------------
    # Schema lifecycle
    # ------------------------------------------------------------------

    def update_indices(self) -> None:
        for dataset in DATASETS:
            index = self._index(dataset)
            properties = mapping_properties(dataset)
            try:
                if self._client.indices.exists(index=index):
                    self._client.indices.put_mapping(index=index, properties=properties)
                    logger.info("Index mapping updated | index=%s", index)
                else:
                    self._client.indices.create(index=index, mappings={"properties": properties})
                    logger.info("Index created | index=%s", index)
            except (ApiError, TransportError) as exc:
                msg = f"Cannot create or update index {index}: {exc}"
                raise IndexSchemaError(self.name, msg) from exc

    def delete_indices(self) -> None:
        indices = [self._index(dataset) for dataset in DATASETS]
        try:
            self._client.indices.delete(index=indices, ignore_unavailable=True)
        except (ApiError, TransportError) as exc:
            msg = f"Cannot delete indices {', '.join(indices)}: {exc}"
            raise IndexSchemaError(self.name, msg) from exc
        logger.info("Indices deleted | indices=%s", ",".join(indices))

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    def _actions(self, index: str, documents: Sequence[IndexDocument]) -> Iterator[dict[str, Any]]:
        for document in documents:
            yield {"_index": index, "_id": document.id, "_source": document.to_source()}

    def bulk_push(self, dataset: str, documents: Sequence[IndexDocument]) -> int:
        index = self._index(dataset)
        try:
            indexed, _ = bulk(
                self._client,
                self._actions(index, documents),
                chunk_size=self._config.bulk_chunk_size,
                refresh=True,
            )
        except BulkIndexError as exc:
            msg = f"Bulk push to {index} failed for {len(exc.errors)} document(s)"
            raise IndexPushError(self.name, msg, dataset=dataset, failed=len(exc.errors)) from exc
        except (ApiError, TransportError) as exc:
            msg = f"Bulk push to {index} failed: {exc}"
            raise IndexPushError(self.name, msg, dataset=dataset) from exc

        logger.info("Bulk push finished | index=%s | documents=%d", index, indexed)
        return indexed

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, size: int) -> list[SearchHit]:
        indices = [self._index(dataset) for dataset in DATASETS]
        try:
            response = self._client.search(
                index=",".join(indices),
                query={
                    "multi_match": {
                        "query": query,
                        "fields": _SEARCH_FIELDS,
                        "fuzziness": "AUTO",
                    }
                },
                size=size,
            )
        except (ApiError, TransportError) as exc:
            msg = f"Search for {query!r} failed: {exc}"
            raise IndexSearchError(self.name, msg, retryable=True) from exc

        hits = []
        for hit in response["hits"]["hits"]:
            source = hit["_source"]
            hits.append(
                SearchHit(
                    dataset=self._dataset_of(hit["_index"]),
                    id=str(hit["_id"]),
                    name=source.get("name", ""),
                    score=float(hit.get("_score") or 0.0),
                    location=GeoLocation(**source["location"]),
                    tags=source.get("tags", {}),
                    street_names=source.get("street_names", []),
                )
            )
        return hits
