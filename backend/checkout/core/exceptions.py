from typing import Any


class AppException(Exception):
    """Base application exception."""

    error_code: str = "APP_ERROR"
    message: str = "An application error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(error_code={self.error_code!r}, message={self.message!r})"


class ConfigurationError(AppException):
    """Configuration is missing or invalid."""

    error_code = "CONFIGURATION_ERROR"
    message = "Invalid configuration"


class MissingCredentialError(ConfigurationError):
    """No API credential for the selected environment."""

    error_code = "MISSING_CREDENTIAL"
    message = "API key is missing"


class CredentialFormatError(ConfigurationError):
    """Credential exists but cannot be used."""

    error_code = "CREDENTIAL_FORMAT"
    message = "API key has an unexpected format"


class PaymentApiError(AppException):
    """Provider answered with a non-2xx status.

    The HTTP status is the identifying code of the error: ``status_code``
    holds it as an int and ``error_code`` as a string.
    """

    error_code = "PAYMENT_API_ERROR"
    message = "Payment API request failed"

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(
            message=message or f"Payment API Error: {status_code}",
            error_code=str(status_code),
            details={"status_code": status_code, "response_body": response_body},
        )

    @property
    def is_auth_error(self) -> bool:
        """401/403 mean the credential was rejected."""
        return self.status_code in (401, 403)

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class PaymentNetworkError(AppException):
    """Transport failure while talking to the provider."""

    error_code = "NETWORK_ERROR"
    message = "Network error"

    def __init__(self, cause: Exception, message: str | None = None) -> None:
        self.cause = cause
        super().__init__(
            message=message or f"Network error: {type(cause).__name__}: {cause}",
            details={"cause": type(cause).__name__},
        )


class PaymentDecodingError(AppException):
    """Provider response body could not be decoded."""

    error_code = "DECODING_ERROR"
    message = "Failed to decode response"

    def __init__(self, message: str | None = None, raw_body: str | None = None) -> None:
        self.raw_body = raw_body
        super().__init__(
            message=message,
            details={"raw_body": raw_body},
        )


class CorrelationError(AppException):
    """Callback cannot be bound to an initiated payment."""

    error_code = "CORRELATION_ERROR"
    message = "Callback correlation failed"


class MissingPaymentIdError(CorrelationError):
    """Callback has no payment identifier."""

    error_code = "PAYMENT_ID_MISSING"
    message = "payment identifier missing"


class StateMismatchError(CorrelationError):
    """Callback state does not match the expected token."""

    error_code = "STATE_MISMATCH"
    message = "state mismatch"


class FlowNotFoundError(AppException):
    """No payment flow registered under the given key."""

    error_code = "FLOW_NOT_FOUND"
    message = "Payment flow not found"


class FlowNotPollableError(AppException):
    """Status requested before the callback was verified."""

    error_code = "FLOW_NOT_POLLABLE"
    message = "Payment flow has no verified callback"
