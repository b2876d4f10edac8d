# tests/unit/test_config.py

import pytest

from log_shipper.config import DEFAULT_CUSTOMER_CODE, get_config
from log_shipper.exceptions import ConfigurationError


def test_get_config_happy_path(shipper_env, monkeypatch):
    """Tests that configuration loads correctly when all env vars are set."""
    monkeypatch.setenv("GRAYLOG_TAGS", "env:prod")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "12.5")

    config = get_config()

    assert config.graylog_url == "http://x"
    assert config.auth_token_secret_id.endswith(":secret:token")
    assert config.customer_code == "acme"
    assert config.customer_code_defaulted is False
    assert config.tags == "env:prod"
    assert config.log_level == "DEBUG"
    assert config.http_timeout == (12.5, 12.5)


def test_get_config_uses_defaults(shipper_env, monkeypatch):
    """Tests that optional variables fall back to their default values."""
    monkeypatch.delenv("CUSTOMER_CODE", raising=False)

    config = get_config()

    assert config.customer_code == DEFAULT_CUSTOMER_CODE == "default"
    assert config.customer_code_defaulted is True
    assert config.tags is None
    assert config.log_level == "INFO"
    assert config.http_timeout == (30.0, 30.0)


@pytest.mark.parametrize("variable", ["CUSTOMER_CODE", "GRAYLOG_TAGS"])
def test_empty_optional_values_count_as_unset(shipper_env, monkeypatch, variable):
    monkeypatch.setenv(variable, "")

    config = get_config()

    if variable == "CUSTOMER_CODE":
        assert config.customer_code == "default"
        assert config.customer_code_defaulted is True
    else:
        assert config.tags is None


@pytest.mark.parametrize("variable", ["GRAYLOG_URL", "GRAYLOG_AUTH_TOKEN_SECRET_ARN"])
def test_get_config_missing_required_env_var(shipper_env, monkeypatch, variable):
    """Tests that ConfigurationError is raised when required env vars are missing."""
    monkeypatch.delenv(variable)

    with pytest.raises(ConfigurationError) as exc_info:
        get_config()

    assert variable in str(exc_info.value)
    assert exc_info.value.context["variable"] == variable


def test_get_config_empty_graylog_url(shipper_env, monkeypatch):
    monkeypatch.setenv("GRAYLOG_URL", "")

    with pytest.raises(ConfigurationError):
        get_config()


@pytest.mark.parametrize(
    "variable, value",
    [("HTTP_TIMEOUT_SECONDS", "soon"), ("HTTP_TIMEOUT_SECONDS", "0"), ("LOG_LEVEL", "LOUD")],
)
def test_get_config_invalid_values(shipper_env, monkeypatch, variable, value):
    """Tests that ConfigurationError is raised for invalid values."""
    monkeypatch.setenv(variable, value)

    with pytest.raises(ConfigurationError):
        get_config()


def test_get_config_caching(shipper_env):
    """Tests that get_config returns the same instance when called multiple times."""
    config1 = get_config()
    config2 = get_config()

    assert config1 is config2  # Same object instance due to lru_cache
