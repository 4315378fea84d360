"""Payment flow service.

Drives initiation, callback correlation and status polling for any number of
concurrent payments. Every failure is returned as a value (an outcome or a
flow state with status/reason set). The only exceptions raised to the caller
are FlowNotFoundError for an unknown or evicted flow id and
FlowNotPollableError when status is requested before a verified callback.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from checkout.core.config import Settings, settings
from checkout.core.exceptions import AppException, FlowNotFoundError, FlowNotPollableError
from checkout.core.logging import get_logger
from checkout.payments.callback import parse_callback
from checkout.payments.environments import ApiEnvironment
from checkout.payments.providers.base import PaymentApiClient
from checkout.payments.schemas import PaymentInitiation
from checkout.services.flow import (
    CallbackReceived,
    FlowListener,
    FlowPhase,
    InitiationFailed,
    PaymentFlow,
    PaymentFlowState,
    PaymentInitiated,
)
from checkout.services.poller import PollingPolicy, PollOutcome, StatusPoller

logger = get_logger(__name__)

TRANSPORT_ERROR_CODE = "TRANSPORT_ERROR"


class FlowRegistry:
    """In-memory index of live flows by id and by expected state.

    Flows are evicted once they have been COMPLETED for ``retention``
    seconds, or when they are older than ``max_age`` seconds without
    completing. Eviction runs on every add and lookup.
    """

    def __init__(
        self,
        retention: float = 3600.0,
        max_age: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retention = retention
        self.max_age = max_age
        self._clock = clock
        self._flows: dict[str, PaymentFlow] = {}
        self._by_state: dict[str, str] = {}
        self._created_at: dict[str, float] = {}
        self._completed_at: dict[str, float] = {}
        self._listeners: dict[str, FlowListener] = {}

    def add(self, flow: PaymentFlow) -> None:
        self.prune()
        flow_id = flow.flow_id
        self._flows[flow_id] = flow
        self._created_at[flow_id] = self._clock()
        if flow.state.expected_state:
            self._by_state[flow.state.expected_state] = flow_id

        def on_change(old: PaymentFlowState, new: PaymentFlowState, event: object) -> None:
            if new.phase is FlowPhase.COMPLETED:
                self._completed_at.setdefault(flow_id, self._clock())
            else:
                self._completed_at.pop(flow_id, None)

        self._listeners[flow_id] = on_change
        flow.listeners.append(on_change)

    def get(self, flow_id: str) -> PaymentFlow:
        self.prune()
        flow = self._flows.get(flow_id)
        if flow is None:
            raise FlowNotFoundError(details={"flow_id": flow_id})
        return flow

    def find_by_state(self, state: str | None) -> PaymentFlow | None:
        self.prune()
        if not state:
            return None
        flow_id = self._by_state.get(state)
        return self._flows.get(flow_id) if flow_id else None

    def remove(self, flow_id: str) -> PaymentFlow | None:
        flow = self._flows.pop(flow_id, None)
        if flow is None:
            return None

        self._by_state = {s: f for s, f in self._by_state.items() if f != flow_id}
        self._created_at.pop(flow_id, None)
        self._completed_at.pop(flow_id, None)
        listener = self._listeners.pop(flow_id, None)
        if listener in flow.listeners:
            flow.listeners.remove(listener)
        return flow

    def prune(self) -> list[str]:
        """Evict expired flows and return their ids."""
        now = self._clock()
        expired = []
        for flow_id, flow in self._flows.items():
            if flow.state.is_checking:
                continue
            completed_at = self._completed_at.get(flow_id)
            if completed_at is not None:
                if now - completed_at >= self.retention:
                    expired.append(flow_id)
            elif now - self._created_at[flow_id] >= self.max_age:
                expired.append(flow_id)

        for flow_id in expired:
            self.remove(flow_id)
        if expired:
            logger.info("Evicted %d expired payment flows", len(expired))
        return expired

    def __len__(self) -> int:
        return len(self._flows)


@dataclass(frozen=True)
class InitiationOutcome:
    """Result of starting a payment."""

    flow_id: str
    state: PaymentFlowState
    initiation: PaymentInitiation | None = None

    @property
    def ok(self) -> bool:
        return self.initiation is not None


@dataclass(frozen=True)
class CallbackOutcome:
    """Result of handling an inbound callback URI.

    ``ignored`` is True for URIs that are not our callback. ``flow_id`` is
    None when the callback could not be bound to any registered flow.
    """

    ignored: bool
    flow_id: str | None = None
    state: PaymentFlowState | None = None


class PaymentFlowService:
    """Orchestrates the hosted checkout round trip."""

    def __init__(
        self,
        client: PaymentApiClient,
        registry: FlowRegistry | None = None,
        config: Settings | None = None,
    ) -> None:
        self.client = client
        self.config = config or settings
        self.registry = registry or FlowRegistry(
            retention=self.config.flow_retention,
            max_age=self.config.flow_max_age,
        )
        self.poller = StatusPoller(client)

    async def initiate(
        self,
        environment: ApiEnvironment,
        currency: str,
        amount_value: str,
        local_instrument: str,
        creditor_name: str,
        creditor_iban: str | None = None,
        creditor_sort_code: str | None = None,
        creditor_account_number: str | None = None,
    ) -> InitiationOutcome:
        """Create a payment and register its flow.

        The flow keeps the generated state as the expected token before the
        redirect URL is handed out.
        """
        flow = PaymentFlow(environment=environment)

        try:
            initiation = await self.client.initiate_payment(
                environment=environment,
                currency=currency,
                amount_value=amount_value,
                local_instrument=local_instrument,
                creditor_name=creditor_name,
                creditor_iban=creditor_iban,
                creditor_sort_code=creditor_sort_code,
                creditor_account_number=creditor_account_number,
            )
        except AppException as e:
            logger.warning("Payment initiation failed: %s (%s)", e.message, e.error_code)
            flow.dispatch(InitiationFailed(error_code=e.error_code, message=e.message))
            return InitiationOutcome(flow_id=flow.flow_id, state=flow.state)
        except httpx.HTTPError as e:
            logger.warning("Payment initiation transport error: %s", e)
            flow.dispatch(
                InitiationFailed(
                    error_code=TRANSPORT_ERROR_CODE,
                    message=f"Network error: {type(e).__name__}: {e}",
                )
            )
            return InitiationOutcome(flow_id=flow.flow_id, state=flow.state)

        flow.dispatch(PaymentInitiated(initiation))
        self.registry.add(flow)

        logger.info("Flow %s awaiting callback: ref_id=%s", flow.flow_id, initiation.ref_id)
        return InitiationOutcome(flow_id=flow.flow_id, state=flow.state, initiation=initiation)

    async def handle_callback(self, url: str, poll: bool = True) -> CallbackOutcome:
        """Correlate a callback URI with its flow.

        The flow is looked up by the ``state`` parameter. A callback whose
        state matches no flow fails with "state mismatch" and is never polled.
        With ``poll`` set, a verified callback triggers one status check.
        Repeated callbacks for a flow past AWAITING_CALLBACK change nothing
        and are not polled.
        """
        params = parse_callback(url, self.config.callback_scheme, self.config.callback_host)
        if params is None:
            return CallbackOutcome(ignored=True)

        flow = self.registry.find_by_state(params.state)
        if flow is None:
            logger.warning("Callback with unknown state: payment_id=%s", params.payment_id)
            orphan = PaymentFlow(environment=ApiEnvironment(self.config.environment))
            orphan.dispatch(CallbackReceived(params))
            return CallbackOutcome(ignored=False, state=orphan.state)

        previous = flow.state
        state = flow.dispatch(CallbackReceived(params))
        verified = previous.phase is FlowPhase.AWAITING_CALLBACK and state.phase is FlowPhase.AWAITING_STATUS

        if state.phase is FlowPhase.COMPLETED and state.error_code:
            logger.warning("Flow %s callback rejected: %s", flow.flow_id, state.reason)
        elif not verified:
            logger.info("Flow %s ignored repeated callback in phase %s", flow.flow_id, state.phase.value)
        elif poll:
            state = await self.poller.poll(flow)

        return CallbackOutcome(ignored=False, flow_id=flow.flow_id, state=state)

    def get_flow(self, flow_id: str) -> PaymentFlow:
        return self.registry.get(flow_id)

    async def poll(self, flow_id: str) -> PaymentFlowState:
        """Single-shot status check for a flow.

        Raises:
            FlowNotFoundError: Unknown or evicted flow
            FlowNotPollableError: Callback not verified yet, or rejected
        """
        flow = self.registry.get(flow_id)
        if not flow.state.can_poll:
            raise FlowNotPollableError(details={"flow_id": flow_id, "phase": flow.state.phase.value})
        return await self.poller.poll(flow)

    async def poll_until_terminal(
        self,
        flow_id: str,
        policy: PollingPolicy | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PollOutcome:
        """Poll a flow with backoff until terminal status."""
        return await self.poller.poll_until_terminal(
            self.registry.get(flow_id),
            policy=policy or PollingPolicy.from_settings(self.config),
            cancel_event=cancel_event,
        )

    def dismiss(self, flow_id: str) -> None:
        """Reset and forget a flow."""
        flow = self.registry.remove(flow_id)
        if flow is None:
            raise FlowNotFoundError(details={"flow_id": flow_id})
        flow.reset()
        logger.info("Flow %s dismissed", flow_id)
