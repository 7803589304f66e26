from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from starlette.responses import Response

from prio_edge.apps.edge_api.cors import preflight_response, request_origin
from prio_edge.apps.edge_api.dependencies import get_intent_scorer
from prio_edge.apps.edge_api.responses import error_response, json_response
from prio_edge.apps.edge_api.schemas import LeadScoreRequest
from prio_edge.core.errors import bad_request, internal_error, method_not_allowed, server_misconfig
from prio_edge.core.result import Failure, Success
from prio_edge.domain.scoring import IntentScorer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scoring"])

_NULL_SCORE = {"score": None}


@router.api_route("/intent-score", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def intent_score(
    request: Request,
    scorer: IntentScorer = Depends(get_intent_scorer),
) -> Response:
    origin = request_origin(request)
    if request.method == "OPTIONS":
        return preflight_response(origin, methods=("POST", "OPTIONS"), headers=("Content-Type",))
    if request.method != "POST":
        return error_response(method_not_allowed(), origin)
    if not scorer.configured:
        logger.error("OPENAI_TOKEN is not configured")
        return error_response(server_misconfig(), origin, extra=_NULL_SCORE)

    try:
        try:
            payload = LeadScoreRequest.model_validate(json.loads(await request.body()))
        except (ValueError, ValidationError):
            # json.JSONDecodeError is a ValueError; non-object bodies fail validation.
            return error_response(bad_request("Invalid request body"), origin, extra=_NULL_SCORE)

        result = await scorer.score(payload.model_dump())
    except Exception:
        logger.exception("Intent score error")
        return error_response(internal_error(), origin, extra=_NULL_SCORE)

    match result:
        case Success(score):
            return json_response({"score": score}, origin)
        case Failure(error):
            return error_response(error, origin, extra=_NULL_SCORE)
