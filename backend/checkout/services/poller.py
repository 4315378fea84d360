"""Payment status polling."""

import asyncio
from dataclasses import dataclass
from enum import Enum

from checkout.core.config import Settings, settings
from checkout.core.exceptions import AppException
from checkout.core.logging import get_logger
from checkout.payments.providers.base import PaymentApiClient
from checkout.services.flow import (
    PaymentFlow,
    PaymentFlowState,
    PollAborted,
    PollFailed,
    PollStarted,
    PollSucceeded,
    PollTimedOut,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PollingPolicy:
    """Bounded retry policy for ``poll_until_terminal``."""

    initial_interval: float = 2.0
    backoff_factor: float = 1.5
    max_interval: float = 15.0
    max_wait: float = 120.0

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "PollingPolicy":
        config = config or settings
        return cls(
            initial_interval=config.poll_initial_interval,
            backoff_factor=config.poll_backoff_factor,
            max_interval=config.poll_max_interval,
            max_wait=config.poll_max_wait,
        )

    def next_interval(self, interval: float) -> float:
        return min(interval * self.backoff_factor, self.max_interval)


class PollStopReason(str, Enum):
    TERMINAL = "terminal"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    NOT_POLLABLE = "not_pollable"


@dataclass(frozen=True)
class PollOutcome:
    """Result of a polling loop."""

    state: PaymentFlowState
    attempts: int
    reason: PollStopReason


class StatusPoller:
    """Fetches provider status and feeds it into a flow."""

    def __init__(self, client: PaymentApiClient) -> None:
        self.client = client

    async def poll(self, flow: PaymentFlow) -> PaymentFlowState:
        """Single-shot status check.

        ``is_checking`` is set while the request is in flight and cleared on
        every exit path. Failures land in ``polling_error``; previously known
        status fields are kept.
        """
        state = flow.state
        if not state.can_poll:
            logger.warning("Flow %s is not pollable in phase %s", flow.flow_id, state.phase.value)
            return state

        flow.dispatch(PollStarted())
        try:
            details = await self.client.get_payment_status(state.payment_id, flow.environment)
        except AppException as e:
            logger.warning("Poll failed for flow %s: %s", flow.flow_id, e.message)
            flow.dispatch(PollFailed(error_code=e.error_code, message=e.message))
        else:
            flow.dispatch(PollSucceeded(details))
            logger.info(
                "Polled flow %s: status=%s -> %s",
                flow.flow_id,
                details.status,
                flow.state.status.value if flow.state.status else None,
            )
        finally:
            if flow.state.is_checking:
                flow.dispatch(PollAborted())

        return flow.state

    async def poll_until_terminal(
        self,
        flow: PaymentFlow,
        policy: PollingPolicy | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PollOutcome:
        """Poll with backoff until terminal status, timeout or cancellation.

        Cancellation is either ``cancel_event`` being set or the calling task
        being cancelled (CancelledError propagates after the flag is cleared).
        """
        policy = policy or PollingPolicy.from_settings()
        cancel_event = cancel_event or asyncio.Event()

        if not flow.state.can_poll:
            return PollOutcome(flow.state, attempts=0, reason=PollStopReason.NOT_POLLABLE)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + policy.max_wait
        interval = policy.initial_interval
        attempts = 0

        while True:
            if cancel_event.is_set():
                return PollOutcome(flow.state, attempts, PollStopReason.CANCELLED)

            attempts += 1
            state = await self.poll(flow)

            if state.is_terminal and state.polling_error is None:
                return PollOutcome(state, attempts, PollStopReason.TERMINAL)

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning("Polling timed out for flow %s after %d attempts", flow.flow_id, attempts)
                flow.dispatch(PollTimedOut(f"Payment status not final after {policy.max_wait:g}s"))
                return PollOutcome(flow.state, attempts, PollStopReason.TIMEOUT)

            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=min(interval, remaining))
            except TimeoutError:
                pass
            else:
                return PollOutcome(flow.state, attempts, PollStopReason.CANCELLED)

            interval = policy.next_interval(interval)
