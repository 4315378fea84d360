"""Settings tests."""

import pytest
from pydantic import ValidationError

from checkout.core.config import Settings


class TestApiSecretKey:
    """The service API secret has no default."""

    def test_unset_key_fails(self, monkeypatch):
        monkeypatch.delenv("API_SECRET_KEY", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)

        assert "api_secret_key" in str(exc_info.value)

    def test_blank_key_fails(self, monkeypatch):
        monkeypatch.setenv("API_SECRET_KEY", "")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_SECRET_KEY", "from-env")

        assert Settings(_env_file=None).api_secret_key == "from-env"


def test_callback_url(config):
    assert config.callback_url == "paymentdemoapp://payment-complete"
