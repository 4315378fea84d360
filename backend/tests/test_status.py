"""Provider status mapping tests."""

import logging

import pytest

from checkout.payments.status import PaymentStatus, map_status


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("execution_successful", PaymentStatus.SUCCESS),
        ("SETTLEMENT_COMPLETED", PaymentStatus.SUCCESS),
        ("authorization_failure", PaymentStatus.FAILURE),
        ("EXECUTION_REJECTED", PaymentStatus.FAILURE),
        ("expired", PaymentStatus.FAILURE),
        ("CANCELLED", PaymentStatus.CANCELLED),
        ("pending", PaymentStatus.PENDING),
        ("INITIATION_PENDING", PaymentStatus.PENDING),
        ("INITIATION_PENDING_REDIRECT_AUTH", PaymentStatus.PENDING),
        ("INITIATION_PROCESSING", PaymentStatus.PENDING),
    ],
)
def test_known_statuses(raw, expected):
    mapping = map_status(raw)

    assert mapping.status is expected
    assert not mapping.is_unmapped


def test_unknown_status_is_flagged_failure(caplog):
    with caplog.at_level(logging.WARNING, logger="checkout.payments.status"):
        mapping = map_status("foo_bar")

    assert mapping.status is PaymentStatus.FAILURE
    assert mapping.is_unmapped
    assert mapping.raw == "foo_bar"
    assert "Unmapped payment status" in caplog.text


def test_mapping_is_idempotent():
    assert map_status("EXECUTION_SUCCESSFUL") == map_status("EXECUTION_SUCCESSFUL")


def test_only_pending_is_not_terminal():
    assert not PaymentStatus.PENDING.is_terminal
    assert PaymentStatus.SUCCESS.is_terminal
    assert PaymentStatus.FAILURE.is_terminal
    assert PaymentStatus.CANCELLED.is_terminal
