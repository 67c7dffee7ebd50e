from __future__ import annotations

import logging

import pytest

from acqorders.config import (
    ConfigurationError,
    MissingConfigurationError,
    build_okapi_config,
    configure_logging,
    get_okapi_config,
    require_env_vars,
)


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_okapi_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OKAPI_URL", "http://okapi.local:9130")
    monkeypatch.setenv("OKAPI_TENANT", "diku")
    monkeypatch.setenv("OKAPI_TOKEN", "token-1")
    monkeypatch.setenv("OKAPI_TIMEOUT_SECONDS", "12.5")

    config = get_okapi_config()

    assert config.headers == {
        "X-Okapi-Tenant": "diku",
        "X-Okapi-Url": "http://okapi.local:9130",
        "X-Okapi-Token": "token-1",
    }
    assert config.resilience.base_url == "http://okapi.local:9130"
    assert config.resilience.timeout_seconds == 12.5
    assert config.resilience.cache is None
    assert "POST" not in config.resilience.retry.allowed_methods
    assert config.reference_resilience.cache is not None
    assert config.reference_resilience.cache.backend == "memory"


def test_okapi_token_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OKAPI_URL", "http://okapi.local:9130")
    monkeypatch.setenv("OKAPI_TENANT", "diku")
    monkeypatch.delenv("OKAPI_TOKEN", raising=False)
    monkeypatch.delenv("OKAPI_TIMEOUT_SECONDS", raising=False)

    config = get_okapi_config()

    assert config.token is None
    assert "X-Okapi-Token" not in config.headers
    assert config.resilience.timeout_seconds == 30.0


def test_okapi_config_requires_url_and_tenant(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OKAPI_URL", raising=False)
    monkeypatch.delenv("OKAPI_TENANT", raising=False)

    with pytest.raises(MissingConfigurationError, match="OKAPI_TENANT, OKAPI_URL"):
        get_okapi_config()


def test_invalid_timeout_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OKAPI_URL", "http://okapi.local:9130")
    monkeypatch.setenv("OKAPI_TENANT", "diku")
    monkeypatch.setenv("OKAPI_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigurationError, match="OKAPI_TIMEOUT_SECONDS"):
        get_okapi_config()


def test_reference_cache_only_keeps_non_empty_collections() -> None:
    cache = build_okapi_config(url="http://x", tenant="t").reference_resilience.cache
    assert cache is not None
    assert cache.should_cache is not None

    assert cache.should_cache({"loantypes": [{"id": "1"}], "totalRecords": 1})
    assert not cache.should_cache({"loantypes": [], "totalRecords": 0})
    assert not cache.should_cache(["unexpected"])


def test_configure_logging_force_installs_stderr_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", logging.WARNING)

    configure_logging(level=logging.DEBUG, force=True)

    assert root.level == logging.DEBUG
    (handler,) = root.handlers
    assert handler.formatter is not None
    record = logging.LogRecord("acqorders.app", logging.INFO, __file__, 1, "ready", None, None)
    assert handler.formatter.format(record).endswith("INFO    acqorders.app: ready")


def test_configure_logging_keeps_existing_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    existing = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [existing])

    configure_logging(level=logging.DEBUG)

    assert root.handlers == [existing]
