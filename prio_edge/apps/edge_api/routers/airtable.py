from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from prio_edge.apps.edge_api.cors import preflight_response, request_origin
from prio_edge.apps.edge_api.dependencies import get_airtable_proxy, get_app_settings
from prio_edge.apps.edge_api.responses import error_response, json_response
from prio_edge.apps.edge_api.security import get_client_key
from prio_edge.core.errors import internal_error
from prio_edge.core.result import Failure, Success
from prio_edge.core.settings import Settings
from prio_edge.domain.airtable import AirtableProxy, ProxyRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["airtable"])

PREFLIGHT_METHODS = ("GET", "POST", "PATCH", "DELETE", "OPTIONS")
PREFLIGHT_HEADERS = ("Content-Type", "Authorization")


@router.api_route(
    "/airtable",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
)
async def airtable_proxy(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    proxy: AirtableProxy = Depends(get_airtable_proxy),
) -> Response:
    origin = request_origin(request)
    if request.method == "OPTIONS":
        return preflight_response(origin, methods=PREFLIGHT_METHODS, headers=PREFLIGHT_HEADERS)

    try:
        body = await request.body() if request.method != "GET" else None
        result = await proxy.handle(
            ProxyRequest(
                method=request.method,
                client_key=get_client_key(request, trust_proxy_headers=settings.trust_proxy_headers),
                path=request.query_params.get("path"),
                body=body,
            )
        )
    except Exception:
        logger.exception("Airtable proxy error")
        return error_response(internal_error(), origin)

    match result:
        case Success(payload):
            return json_response(payload, origin)
        case Failure(error):
            return error_response(error, origin)
