"""Status poller tests."""

import asyncio

import httpx
import pytest

from checkout.core.exceptions import PaymentDecodingError, PaymentNetworkError
from checkout.payments.environments import ApiEnvironment
from checkout.payments.schemas import CallbackParams
from checkout.payments.status import PaymentStatus
from checkout.services.flow import CallbackReceived, PaymentFlow, PaymentInitiated
from checkout.services.poller import PollingPolicy, PollStopReason, StatusPoller
from conftest import FakePaymentClient

FAST = PollingPolicy(initial_interval=0.01, backoff_factor=2.0, max_interval=0.02, max_wait=5.0)


def verified_flow(initiation) -> PaymentFlow:
    flow = PaymentFlow(environment=ApiEnvironment.SANDBOX)
    flow.dispatch(PaymentInitiated(initiation))
    flow.dispatch(CallbackReceived(CallbackParams(payment_id=initiation.payment_id, state=initiation.state)))
    return flow


class TestPoll:
    """Single-shot poll."""

    pytestmark = [pytest.mark.asyncio]

    async def test_success(self, fresh_initiation):
        client = FakePaymentClient(["EXECUTION_SUCCESSFUL"])
        flow = verified_flow(fresh_initiation)

        state = await StatusPoller(client).poll(flow)

        assert state.status is PaymentStatus.SUCCESS
        assert state.status_string == "EXECUTION_SUCCESSFUL"
        assert not state.is_checking
        assert client.status_calls == 1

    async def test_checking_flag_set_during_request(self, fresh_initiation):
        client = FakePaymentClient(["INITIATION_PENDING"])
        flow = verified_flow(fresh_initiation)
        flags = []
        flow.listeners.append(lambda old, new, event: flags.append(new.is_checking))

        await StatusPoller(client).poll(flow)

        assert flags == [True, False]

    @pytest.mark.parametrize(
        "error",
        [
            PaymentNetworkError(httpx.ConnectError("refused")),
            PaymentDecodingError("Failed to decode payment status response", raw_body="{}"),
        ],
    )
    async def test_failure_clears_flag_and_keeps_status(self, fresh_initiation, error):
        client = FakePaymentClient(["INITIATION_PENDING", error])
        flow = verified_flow(fresh_initiation)
        poller = StatusPoller(client)
        await poller.poll(flow)

        state = await poller.poll(flow)

        assert not state.is_checking
        assert state.polling_error == error.message
        assert state.status is PaymentStatus.PENDING
        assert state.status_string == "INITIATION_PENDING"
        assert state.value == "10.00"

    async def test_unexpected_error_still_clears_flag(self, fresh_initiation):
        client = FakePaymentClient([RuntimeError("bug")])
        flow = verified_flow(fresh_initiation)

        with pytest.raises(RuntimeError):
            await StatusPoller(client).poll(flow)

        assert not flow.state.is_checking

    async def test_not_pollable_without_verified_callback(self, fresh_initiation):
        client = FakePaymentClient()
        flow = PaymentFlow(environment=ApiEnvironment.SANDBOX)
        flow.dispatch(PaymentInitiated(fresh_initiation))

        await StatusPoller(client).poll(flow)

        assert client.status_calls == 0

    async def test_repeat_poll_same_status(self, fresh_initiation):
        client = FakePaymentClient(["EXECUTION_SUCCESSFUL"])
        flow = verified_flow(fresh_initiation)
        poller = StatusPoller(client)

        first = await poller.poll(flow)
        second = await poller.poll(flow)

        assert first.status is second.status is PaymentStatus.SUCCESS


class TestPollUntilTerminal:
    """Bounded retry loop."""

    pytestmark = [pytest.mark.asyncio]

    async def test_stops_on_terminal(self, fresh_initiation):
        client = FakePaymentClient(["INITIATION_PENDING", "INITIATION_PROCESSING", "EXECUTION_SUCCESSFUL"])
        flow = verified_flow(fresh_initiation)

        outcome = await StatusPoller(client).poll_until_terminal(flow, FAST)

        assert outcome.reason is PollStopReason.TERMINAL
        assert outcome.attempts == 3
        assert outcome.state.status is PaymentStatus.SUCCESS

    async def test_retries_through_network_errors(self, fresh_initiation):
        client = FakePaymentClient([PaymentNetworkError(httpx.ReadTimeout("slow")), "CANCELLED"])
        flow = verified_flow(fresh_initiation)

        outcome = await StatusPoller(client).poll_until_terminal(flow, FAST)

        assert outcome.reason is PollStopReason.TERMINAL
        assert outcome.state.status is PaymentStatus.CANCELLED
        assert outcome.state.polling_error is None

    async def test_timeout(self, fresh_initiation):
        client = FakePaymentClient(["INITIATION_PENDING"])
        flow = verified_flow(fresh_initiation)
        policy = PollingPolicy(initial_interval=0.01, backoff_factor=1.0, max_interval=0.01, max_wait=0.05)

        outcome = await StatusPoller(client).poll_until_terminal(flow, policy)

        assert outcome.reason is PollStopReason.TIMEOUT
        assert outcome.state.status is PaymentStatus.PENDING
        assert "not final" in outcome.state.polling_error
        assert outcome.attempts >= 2

    async def test_cancel_event(self, fresh_initiation):
        client = FakePaymentClient(["INITIATION_PENDING"])
        flow = verified_flow(fresh_initiation)
        cancel = asyncio.Event()
        policy = PollingPolicy(initial_interval=10.0, max_interval=10.0, max_wait=60.0)

        task = asyncio.create_task(StatusPoller(client).poll_until_terminal(flow, policy, cancel))
        await asyncio.sleep(0.01)
        cancel.set()
        outcome = await asyncio.wait_for(task, timeout=1.0)

        assert outcome.reason is PollStopReason.CANCELLED
        assert outcome.attempts == 1
        assert not outcome.state.is_checking

    async def test_task_cancellation(self, fresh_initiation):
        client = FakePaymentClient(["INITIATION_PENDING"])
        flow = verified_flow(fresh_initiation)
        policy = PollingPolicy(initial_interval=10.0, max_interval=10.0, max_wait=60.0)

        task = asyncio.create_task(StatusPoller(client).poll_until_terminal(flow, policy))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert not flow.state.is_checking

    async def test_not_pollable(self, fresh_initiation):
        client = FakePaymentClient()
        flow = PaymentFlow(environment=ApiEnvironment.SANDBOX)

        outcome = await StatusPoller(client).poll_until_terminal(flow, FAST)

        assert outcome.reason is PollStopReason.NOT_POLLABLE
        assert client.status_calls == 0


def test_policy_backoff_is_capped():
    policy = PollingPolicy(initial_interval=1.0, backoff_factor=3.0, max_interval=5.0)

    assert policy.next_interval(1.0) == 3.0
    assert policy.next_interval(3.0) == 5.0
