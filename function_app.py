"""Azure Functions entry point — OSM Geocoder.

Registers the HTTP functions using the Python v2 programming model:

- ``GET  api/search/{query}``      forward search
- ``GET  api/reverse/{lat}/{lon}``  reverse geocoding
- ``POST api/import``              start a full import (function key required)
- ``GET  api/import/{run_id}``     status of the latest import run

The import runs on a background thread: ``POST api/import`` returns 202
with the run id as soon as the run is claimed, and callers poll the
status route until the state leaves ``running``.

All business logic lives in the osm_geocoder package. The ``handle_*``
functions take the importer explicitly so they can be exercised without
the Functions host; the decorated functions only bind them to routes.
"""

from __future__ import annotations

import json
import logging
import threading

import azure.functions as func

from osm_geocoder.core.config import ImporterConfig
from osm_geocoder.core.exceptions import PipelineError, ValidationError
from osm_geocoder.orchestrators.import_pipeline import Importer, ImporterStateError

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

logger = logging.getLogger("osm_geocoder.function_app")

_importer: Importer | None = None
_importer_lock = threading.Lock()


def _json_response(body: object, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, ensure_ascii=False),
        status_code=status_code,
        mimetype="application/json",
    )


def _error_response(exc: PipelineError) -> func.HttpResponse:
    status_code = 400 if isinstance(exc, ValidationError) else 500
    return _json_response({"error": exc.to_error_dict()}, status_code=status_code)


def _get_importer() -> Importer:
    global _importer  # noqa: PLW0603
    with _importer_lock:
        if _importer is None:
            _importer = Importer(ImporterConfig.from_env())
        return _importer


def _unavailable() -> func.HttpResponse:
    return _json_response({"error": {"message": "No import has completed yet"}}, status_code=503)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def handle_search(req: func.HttpRequest, importer: Importer) -> func.HttpResponse:
    if importer.result is None:
        return _unavailable()

    try:
        hits = importer.lookup().search(req.route_params.get("query", ""))
    except PipelineError as exc:
        return _error_response(exc)
    return _json_response([hit.model_dump() for hit in hits])


def handle_reverse(req: func.HttpRequest, importer: Importer) -> func.HttpResponse:
    if importer.result is None:
        return _unavailable()

    try:
        lat = float(req.route_params.get("lat", ""))
        lon = float(req.route_params.get("lon", ""))
    except ValueError:
        return _json_response(
            {"error": {"message": "lat and lon must be decimal numbers"}},
            status_code=400,
        )

    try:
        result = importer.lookup().reverse(lat, lon)
    except PipelineError as exc:
        return _error_response(exc)
    if result is None:
        return _json_response({"error": {"message": "No enclosing place found"}}, status_code=404)
    return _json_response(result.model_dump())


def handle_import(req: func.HttpRequest, importer: Importer) -> func.HttpResponse:
    """Claim a new run and start it in the background."""
    try:
        run_id = importer.submit()
    except ImporterStateError as exc:
        return _json_response({"error": exc.to_error_dict()}, status_code=409)

    logger.info("Import accepted | run_id=%s", run_id)
    return _json_response(
        {"run_id": run_id, "state": "running", "status_url": f"/api/import/{run_id}"},
        status_code=202,
    )


def handle_import_status(req: func.HttpRequest, importer: Importer) -> func.HttpResponse:
    """Report the latest run's state, plus the hierarchy summary once it succeeds."""
    run_id = req.route_params.get("run_id", "")
    status = importer.status
    if not run_id or run_id != status.run_id:
        return _json_response({"error": {"message": f"Unknown import run: {run_id}"}}, status_code=404)

    body = status.to_dict()
    result = importer.result
    if result is not None and status.state == "succeeded":
        body["summary"] = {
            "countries": len(result.countries),
            "settlements": result.settlement_count,
            "districts": result.district_count,
            "skipped_relations": result.skipped_relations,
            "export_errors": [err.to_error_dict() for err in result.export_errors],
        }
    return _json_response(body)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.function_name("search")
@app.route(route="search/{query}", methods=["GET"])
def search(req: func.HttpRequest) -> func.HttpResponse:
    """Forward search by free text."""
    return handle_search(req, _get_importer())


@app.function_name("reverse")
@app.route(route="reverse/{lat}/{lon}", methods=["GET"])
def reverse(req: func.HttpRequest) -> func.HttpResponse:
    """Reverse geocode a latitude/longitude pair."""
    return handle_reverse(req, _get_importer())


@app.function_name("run_import")
@app.route(route="import", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def run_import(req: func.HttpRequest) -> func.HttpResponse:
    """Start a full import and return its run id."""
    return handle_import(req, _get_importer())


@app.function_name("import_status")
@app.route(route="import/{run_id}", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def import_status(req: func.HttpRequest) -> func.HttpResponse:
    """Status of the latest import run."""
    return handle_import_status(req, _get_importer())
