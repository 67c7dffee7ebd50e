from __future__ import annotations

import pytest

OKAPI_ENV_VARS = ("OKAPI_URL", "OKAPI_TENANT", "OKAPI_TOKEN", "OKAPI_TIMEOUT_SECONDS")


@pytest.fixture(autouse=True)
def _isolate_okapi_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in OKAPI_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
