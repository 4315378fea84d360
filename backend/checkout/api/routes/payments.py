"""Payment flow endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from checkout.api.dependencies import get_service, verify_api_key
from checkout.api.schemas.payments import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    ErrorResponse,
    FlowStateResponse,
)
from checkout.core.config import settings
from checkout.core.exceptions import FlowNotFoundError, FlowNotPollableError
from checkout.payments.environments import ApiEnvironment
from checkout.services import PaymentFlowService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/payments",
    tags=["payments"],
    dependencies=[Depends(verify_api_key)],
)


def _not_found(flow_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": FlowNotFoundError.error_code,
            "message": f"Payment flow {flow_id} not found",
        },
    )


@router.post(
    "",
    response_model=CreatePaymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Unauthorized"},
        502: {"model": ErrorResponse, "description": "Provider rejected or unreachable"},
        503: {"model": ErrorResponse, "description": "Provider credential not configured"},
    },
)
async def create_payment(
    body: CreatePaymentRequest,
    service: PaymentFlowService = Depends(get_service),
) -> CreatePaymentResponse:
    """Start a hosted checkout payment.

    Returns the URL the browser must open. The correlation state is kept by
    the service; it is also returned for callers that drive the browser.
    """
    outcome = await service.initiate(
        environment=body.environment or ApiEnvironment(settings.environment),
        currency=body.currency,
        amount_value=body.amount_value,
        local_instrument=body.local_instrument,
        creditor_name=body.creditor_name,
        creditor_iban=body.creditor_iban,
        creditor_sort_code=body.creditor_sort_code,
        creditor_account_number=body.creditor_account_number,
    )

    if not outcome.ok:
        error_code = outcome.state.error_code or "PAYMENT_ERROR"
        http_status = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if error_code in ("MISSING_CREDENTIAL", "CREDENTIAL_FORMAT")
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(
            status_code=http_status,
            detail={"error": error_code, "message": outcome.state.reason},
        )

    initiation = outcome.initiation
    return CreatePaymentResponse(
        flow_id=outcome.flow_id,
        redirect_url=initiation.redirect_url,
        ref_id=initiation.ref_id,
        state=initiation.state,
    )


@router.get("/{flow_id}", response_model=FlowStateResponse)
async def get_payment_flow(
    flow_id: str,
    service: PaymentFlowService = Depends(get_service),
) -> FlowStateResponse:
    """Current state of a payment flow."""
    try:
        flow = service.get_flow(flow_id)
    except FlowNotFoundError:
        raise _not_found(flow_id)

    return FlowStateResponse.from_state(flow_id, flow.state)


@router.post(
    "/{flow_id}/poll",
    response_model=FlowStateResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown or expired flow"},
        409: {"model": ErrorResponse, "description": "Callback not verified"},
    },
)
async def poll_payment_flow(
    flow_id: str,
    service: PaymentFlowService = Depends(get_service),
) -> FlowStateResponse:
    """Check provider status once.

    Only flows with a verified callback can be polled.
    """
    try:
        state = await service.poll(flow_id)
    except FlowNotFoundError:
        raise _not_found(flow_id)
    except FlowNotPollableError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": e.error_code, "message": e.message, "details": e.details},
        )

    return FlowStateResponse.from_state(flow_id, state)


@router.delete("/{flow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_payment_flow(
    flow_id: str,
    service: PaymentFlowService = Depends(get_service),
) -> None:
    """Dismiss a payment flow and forget its correlation state."""
    try:
        service.dismiss(flow_id)
    except FlowNotFoundError:
        raise _not_found(flow_id)
