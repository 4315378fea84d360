"""Callback handler for the hosted checkout redirect."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from checkout.api.dependencies import get_service
from checkout.api.schemas.payments import FlowStateResponse
from checkout.core.config import settings
from checkout.services import PaymentFlowService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["callback"])


@router.get("/callback", response_model=FlowStateResponse)
async def payment_callback(
    request: Request,
    service: PaymentFlowService = Depends(get_service),
) -> FlowStateResponse | JSONResponse:
    """Receive the callback forwarded by the browser collaborator.

    The query string is the one the provider appended to the app callback
    URI (``payment-id`` and ``state``). It is re-attached to the configured
    scheme/host and handled like the deep link itself.

    1. Correlate by state
    2. Poll status once if verified
    3. Return the flow snapshot
    """
    callback_url = f"{settings.callback_url}?{request.url.query}"
    logger.info("Callback received: payment_id=%s", request.query_params.get("payment-id"))

    outcome = await service.handle_callback(callback_url)

    if outcome.ignored or outcome.state is None:
        return JSONResponse(status_code=400, content={"error": "IGNORED", "message": "Not a payment callback"})

    response = FlowStateResponse.from_state(outcome.flow_id, outcome.state)
    if outcome.state.error_code:
        return JSONResponse(status_code=400, content=response.model_dump(mode="json"))
    return response
