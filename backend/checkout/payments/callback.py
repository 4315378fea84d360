"""Callback URI parsing."""

from urllib.parse import parse_qsl, urlsplit

from checkout.core.logging import get_logger
from checkout.payments.schemas import CallbackParams

logger = get_logger(__name__)

PAYMENT_ID_PARAM = "payment-id"
STATE_PARAM = "state"


def parse_query(query: str) -> dict[str, str]:
    """Parse a query string. The first occurrence of a key wins."""
    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def matches_callback(url: str, scheme: str, host: str) -> bool:
    """Check that url is addressed to our callback."""
    parts = urlsplit(url)
    return (
        parts.scheme.lower() == scheme.lower()
        and (parts.hostname or "").lower() == host.lower()
    )


def parse_callback(url: str, scheme: str, host: str) -> CallbackParams | None:
    """Extract payment identity from a callback URI.

    Returns None for URIs that are not our callback; those are unrelated deep
    links and must be ignored, not treated as errors.

    Args:
        url: Inbound URI, e.g. ``paymentdemoapp://payment-complete?payment-id=pm:1&state=abc``
        scheme: Expected scheme
        host: Expected host

    Returns:
        Parsed params (payment_id/state are None when absent or empty)
    """
    if not matches_callback(url, scheme, host):
        logger.debug("Ignoring unrelated URI: %s", url)
        return None

    params = parse_query(urlsplit(url).query)

    payment_id = params.pop(PAYMENT_ID_PARAM, "") or None
    state = params.pop(STATE_PARAM, "") or None

    return CallbackParams(payment_id=payment_id, state=state, extra=params)
