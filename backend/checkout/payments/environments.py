"""Provider environments."""

from enum import Enum

from checkout.core.config import Settings, settings


class ApiEnvironment(str, Enum):
    """Provider environment. Each has its own base URL and credential."""

    DEV = "dev"
    SANDBOX = "sandbox"
    BETA = "beta"

    def base_url(self, config: Settings | None = None) -> str:
        """Base URL without trailing slash."""
        config = config or settings
        return getattr(config, f"base_url_{self.value}").rstrip("/")

    @property
    def credential_name(self) -> str:
        """Name of the credential, e.g. API_KEY_SANDBOX."""
        return f"API_KEY_{self.value.upper()}"
