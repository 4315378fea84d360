"""PaymentRequest construction."""

from checkout.core.config import Settings, settings
from checkout.payments.schemas import Amount, Creditor, Initiation, PaymentRequest
from checkout.payments.state import generate_ref_id, generate_state


def build_payment_request(
    currency: str,
    amount_value: str,
    local_instrument: str,
    creditor_name: str,
    creditor_iban: str | None = None,
    creditor_sort_code: str | None = None,
    creditor_account_number: str | None = None,
    config: Settings | None = None,
) -> tuple[PaymentRequest, str]:
    """Build a create-payment body with a fresh refId and callback state.

    ``amount_value`` is passed through as given; the provider validates it.

    Returns:
        Tuple of (request, state)
    """
    config = config or settings
    ref_id = generate_ref_id()
    state = generate_state()

    request = PaymentRequest(
        initiation=Initiation(
            ref_id=ref_id,
            flow_type=config.flow_type,
            remittance_information_primary=f"RP{ref_id}",
            remittance_information_secondary=f"RS{ref_id}",
            amount=Amount(value=amount_value, currency=currency),
            local_instrument=local_instrument,
            creditor=Creditor(
                name=creditor_name,
                iban=creditor_iban,
                sort_code=creditor_sort_code,
                account_number=creditor_account_number,
            ),
            callback_url=config.callback_url,
            callback_state=state,
        ),
    )
    return request, state
