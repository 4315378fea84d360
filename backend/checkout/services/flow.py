"""Payment flow state machine.

A flow moves through:

    IDLE -> AWAITING_CALLBACK -> AWAITING_STATUS -> COMPLETED

``transition`` is a pure function; ``PaymentFlow`` holds the current state
for one payment and notifies listeners on every change. Events that make no
sense in the current phase leave the state unchanged.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

from checkout.core.exceptions import MissingPaymentIdError, StateMismatchError
from checkout.core.logging import get_logger
from checkout.payments.environments import ApiEnvironment
from checkout.payments.schemas import CallbackParams, PaymentInitiation, PaymentStatusDetails
from checkout.payments.state import verify_state
from checkout.payments.status import PaymentStatus, map_status

logger = get_logger(__name__)


class FlowPhase(str, Enum):
    """Where a payment is in the checkout round trip."""

    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    AWAITING_STATUS = "awaiting_status"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PaymentFlowState:
    """Correlation and status state of one payment."""

    phase: FlowPhase = FlowPhase.IDLE
    expected_state: str | None = None
    ref_id: str | None = None
    payment_id: str | None = None
    redirect_url: str | None = None

    # Observable status
    status: PaymentStatus | None = None
    status_string: str = ""
    reason: str | None = None
    error_code: str | None = None
    currency: str = ""
    value: str = ""

    # Polling
    is_checking: bool = False
    polling_error: str | None = None
    unmapped_status: str | None = None

    @property
    def can_poll(self) -> bool:
        """Polling is allowed only after a verified callback."""
        return self.payment_id is not None and self.phase in (
            FlowPhase.AWAITING_STATUS,
            FlowPhase.COMPLETED,
        )

    @property
    def is_terminal(self) -> bool:
        return self.phase is FlowPhase.COMPLETED


# Events


@dataclass(frozen=True)
class PaymentInitiated:
    initiation: PaymentInitiation


@dataclass(frozen=True)
class InitiationFailed:
    error_code: str
    message: str


@dataclass(frozen=True)
class CallbackReceived:
    params: CallbackParams


@dataclass(frozen=True)
class PollStarted:
    pass


@dataclass(frozen=True)
class PollSucceeded:
    details: PaymentStatusDetails


@dataclass(frozen=True)
class PollFailed:
    error_code: str
    message: str


@dataclass(frozen=True)
class PollAborted:
    pass


@dataclass(frozen=True)
class PollTimedOut:
    message: str


@dataclass(frozen=True)
class FlowReset:
    pass


FlowEvent = (
    PaymentInitiated
    | InitiationFailed
    | CallbackReceived
    | PollStarted
    | PollSucceeded
    | PollFailed
    | PollAborted
    | PollTimedOut
    | FlowReset
)


def _fail_correlation(state: PaymentFlowState, error_code: str, reason: str) -> PaymentFlowState:
    return replace(
        state,
        phase=FlowPhase.COMPLETED,
        payment_id=None,
        status=PaymentStatus.FAILURE,
        reason=reason,
        error_code=error_code,
    )


def _on_callback(state: PaymentFlowState, params: CallbackParams) -> PaymentFlowState:
    if state.phase not in (FlowPhase.IDLE, FlowPhase.AWAITING_CALLBACK):
        # Duplicate or replayed callback
        return state

    if not params.payment_id:
        return _fail_correlation(state, MissingPaymentIdError.error_code, MissingPaymentIdError.message)

    if not verify_state(params.state, state.expected_state):
        return _fail_correlation(state, StateMismatchError.error_code, StateMismatchError.message)

    return replace(
        state,
        phase=FlowPhase.AWAITING_STATUS,
        payment_id=params.payment_id,
        status=PaymentStatus.PENDING,
        reason=None,
        error_code=None,
    )


def _on_poll_succeeded(state: PaymentFlowState, details: PaymentStatusDetails) -> PaymentFlowState:
    mapping = map_status(details.status)
    return replace(
        state,
        phase=FlowPhase.COMPLETED if mapping.status.is_terminal else FlowPhase.AWAITING_STATUS,
        status=mapping.status,
        status_string=details.status,
        reason=details.status_reason_information,
        error_code=None,
        currency=details.currency,
        value=details.value,
        ref_id=details.ref_id or state.ref_id,
        is_checking=False,
        polling_error=None,
        unmapped_status=details.status if mapping.is_unmapped else None,
    )


def transition(state: PaymentFlowState, event: FlowEvent) -> PaymentFlowState:
    """Apply event to state and return the new state."""
    if isinstance(event, FlowReset):
        return PaymentFlowState()

    if isinstance(event, PaymentInitiated):
        initiation = event.initiation
        return PaymentFlowState(
            phase=FlowPhase.AWAITING_CALLBACK,
            expected_state=initiation.state,
            ref_id=initiation.ref_id,
            redirect_url=initiation.redirect_url,
        )

    if isinstance(event, InitiationFailed):
        return PaymentFlowState(
            phase=FlowPhase.COMPLETED,
            status=PaymentStatus.FAILURE,
            reason=event.message,
            error_code=event.error_code,
        )

    if isinstance(event, CallbackReceived):
        return _on_callback(state, event.params)

    if isinstance(event, PollStarted):
        if not state.can_poll:
            return state
        return replace(state, is_checking=True, polling_error=None)

    if isinstance(event, PollSucceeded):
        if not state.is_checking:
            return state
        return _on_poll_succeeded(state, event.details)

    if isinstance(event, PollFailed):
        if not state.is_checking:
            return state
        # Last known status fields are kept
        return replace(state, is_checking=False, polling_error=event.message)

    if isinstance(event, PollAborted):
        return replace(state, is_checking=False)

    if isinstance(event, PollTimedOut):
        if not state.can_poll:
            return state
        return replace(state, is_checking=False, polling_error=event.message)

    raise TypeError(f"Unknown flow event: {event!r}")


FlowListener = Callable[[PaymentFlowState, PaymentFlowState, FlowEvent], None]


@dataclass
class PaymentFlow:
    """Holder of one payment's state.

    Owned by whoever drives the payment (an HTTP session, a worker, a UI
    controller). Not shared between payments.
    """

    environment: ApiEnvironment
    flow_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: PaymentFlowState = field(default_factory=PaymentFlowState)
    listeners: list[FlowListener] = field(default_factory=list)

    def dispatch(self, event: FlowEvent) -> PaymentFlowState:
        """Apply event and notify listeners if state changed."""
        previous = self.state
        self.state = transition(previous, event)

        if self.state != previous:
            logger.debug(
                "Flow %s: %s -> %s on %s",
                self.flow_id,
                previous.phase.value,
                self.state.phase.value,
                type(event).__name__,
            )
            for listener in self.listeners:
                listener(previous, self.state, event)

        return self.state

    def reset(self) -> PaymentFlowState:
        return self.dispatch(FlowReset())
