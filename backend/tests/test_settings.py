import pytest
from pydantic import ValidationError

from foodbank.settings import Settings


def test_cors_origins_accepts_comma_and_json_lists():
    assert Settings(cors_origins="https://a.example, https://b.example").cors_origins == [
        "https://a.example",
        "https://b.example",
    ]
    assert Settings(cors_origins='["https://c.example"]').cors_origins == ["https://c.example"]
    assert Settings(cors_origins="").cors_origins == []


def test_prod_rejects_placeholder_secret():
    with pytest.raises(ValidationError, match="AUTH_SECRET_KEY"):
        Settings(app_env="prod", testing=False, auth_secret_key="dev-auth-secret", metrics_token="t")


def test_prod_rejects_short_secret():
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(app_env="prod", testing=False, auth_secret_key="short", metrics_token="t")


def test_prod_requires_metrics_token_when_enabled():
    with pytest.raises(ValidationError, match="METRICS_TOKEN"):
        Settings(app_env="prod", testing=False, auth_secret_key="x" * 40, metrics_enabled=True, metrics_token=None)


def test_prod_forbids_testing_mode():
    with pytest.raises(ValidationError, match="testing"):
        Settings(app_env="prod", testing=True, auth_secret_key="x" * 40, metrics_token="t")


def test_prod_settings_accepted():
    configured = Settings(app_env="prod", testing=False, auth_secret_key="x" * 40, metrics_token="t")

    assert configured.allow_test_principal is False


def test_limits_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(recent_transactions_limit=0)
