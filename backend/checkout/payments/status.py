"""Provider status vocabulary mapping."""

from dataclasses import dataclass
from enum import Enum

from checkout.core.logging import get_logger

logger = get_logger(__name__)


class PaymentStatus(str, Enum):
    """Caller-facing payment status."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    PENDING = "pending"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


# Checked in order; first fragment contained in the raw status wins.
STATUS_TABLE: tuple[tuple[str, PaymentStatus], ...] = (
    ("execution_successful", PaymentStatus.SUCCESS),
    ("settlement_completed", PaymentStatus.SUCCESS),
    ("authorization_failure", PaymentStatus.FAILURE),
    ("execution_rejected", PaymentStatus.FAILURE),
    ("expired", PaymentStatus.FAILURE),
    ("cancelled", PaymentStatus.CANCELLED),
    ("initiation_pending", PaymentStatus.PENDING),
    ("pending", PaymentStatus.PENDING),
    ("processing", PaymentStatus.PENDING),
)

FALLBACK_STATUS = PaymentStatus.FAILURE


@dataclass(frozen=True)
class StatusMapping:
    """Outcome of mapping a raw provider status."""

    raw: str
    status: PaymentStatus
    matched: str | None

    @property
    def is_unmapped(self) -> bool:
        return self.matched is None


def map_status(raw: str) -> StatusMapping:
    """Map a provider status string to PaymentStatus.

    Unknown statuses fall back to FAILURE and are logged as unmapped so new
    provider statuses show up in logs.
    """
    lowered = raw.lower()
    for fragment, status in STATUS_TABLE:
        if fragment in lowered:
            return StatusMapping(raw=raw, status=status, matched=fragment)

    logger.warning("Unmapped payment status observed: %r, treating as %s", raw, FALLBACK_STATUS.value)
    return StatusMapping(raw=raw, status=FALLBACK_STATUS, matched=None)
