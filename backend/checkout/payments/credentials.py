"""API credential providers.

The credential store is an injected capability. The default provider reads
``API_KEY_<ENV>`` through Settings, so a process environment variable takes
precedence over the ``.env`` file. Other stores (a vault, a keychain bridge)
plug in by implementing ``SecretProvider``.
"""

from collections.abc import Mapping, Sequence
from typing import Protocol

from checkout.core.config import Settings, settings
from checkout.core.exceptions import CredentialFormatError, MissingCredentialError
from checkout.payments.environments import ApiEnvironment


class SecretProvider(Protocol):
    """Supplies the API credential for an environment."""

    def get_credential(self, environment: ApiEnvironment) -> str:
        """Return credential or raise MissingCredentialError/CredentialFormatError."""
        ...


def validate_credential(environment: ApiEnvironment, value: str | None) -> str:
    """Check a raw credential value.

    Raises:
        MissingCredentialError: If value is None or blank
        CredentialFormatError: If value contains whitespace or control characters
    """
    if value is None or not value.strip():
        raise MissingCredentialError(
            message=f"API key is missing for {environment.credential_name}",
            details={"environment": environment.value},
        )

    if any(ch.isspace() or not ch.isprintable() for ch in value):
        raise CredentialFormatError(
            message=f"API key for {environment.credential_name} has an unexpected format",
            details={"environment": environment.value},
        )

    return value


class SettingsSecretProvider:
    """Reads credentials from application settings."""

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings

    def get_credential(self, environment: ApiEnvironment) -> str:
        value = getattr(self.config, f"api_key_{environment.value}")
        return validate_credential(environment, value)


class StaticSecretProvider:
    """Credentials from an in-memory mapping."""

    def __init__(self, credentials: Mapping[ApiEnvironment, str]) -> None:
        self._credentials = dict(credentials)

    def get_credential(self, environment: ApiEnvironment) -> str:
        return validate_credential(environment, self._credentials.get(environment))


class ChainedSecretProvider:
    """Tries providers in order; first credential found wins.

    A missing credential moves on to the next provider. A format error is
    remembered and re-raised if no later provider has a usable credential.
    """

    def __init__(self, providers: Sequence[SecretProvider]) -> None:
        if not providers:
            raise ValueError("At least one secret provider required")
        self.providers = list(providers)

    def get_credential(self, environment: ApiEnvironment) -> str:
        format_error: CredentialFormatError | None = None

        for provider in self.providers:
            try:
                return provider.get_credential(environment)
            except MissingCredentialError:
                continue
            except CredentialFormatError as e:
                format_error = format_error or e

        if format_error is not None:
            raise format_error

        raise MissingCredentialError(
            message=f"API key is missing for {environment.credential_name}",
            details={"environment": environment.value},
        )
