"""Connection settings for the storage and inventory modules behind Okapi."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from .env import optional_env_var, optional_float_env_var, require_env_vars
from .http_resilience import CacheConfig, ResilienceConfig, ShouldCacheHook

OKAPI_TIMEOUT_SECONDS: Final = 30.0
REFERENCE_CACHE_TTL_SECONDS: Final = 300.0

TENANT_HEADER: Final = "X-Okapi-Tenant"
TOKEN_HEADER: Final = "X-Okapi-Token"
URL_HEADER: Final = "X-Okapi-Url"


@dataclass(frozen=True, slots=True)
class OkapiConfig:
    url: str
    tenant: str
    token: str | None
    resilience: ResilienceConfig
    reference_resilience: ResilienceConfig

    @property
    def headers(self) -> dict[str, str]:
        headers = {TENANT_HEADER: self.tenant, URL_HEADER: self.url}
        if self.token:
            headers[TOKEN_HEADER] = self.token
        return headers


def _has_records(payload: object) -> bool:
    """Cache reference collections only when they are not empty."""

    if not isinstance(payload, dict):
        return False
    return any(isinstance(value, list) and value for value in payload.values())


def build_okapi_config(
    *,
    url: str,
    tenant: str,
    token: str | None = None,
    timeout_seconds: float = OKAPI_TIMEOUT_SECONDS,
    cache_predicate: ShouldCacheHook | None = None,
) -> OkapiConfig:
    headers = {TENANT_HEADER: tenant, URL_HEADER: url}
    if token:
        headers[TOKEN_HEADER] = token
    resilience = ResilienceConfig(
        name="okapi",
        base_url=url,
        timeout_seconds=timeout_seconds,
        default_headers=headers,
    )
    reference_resilience = replace(
        resilience,
        name="okapi-reference",
        cache=CacheConfig(
            backend="memory",
            default_ttl_seconds=REFERENCE_CACHE_TTL_SECONDS,
            should_cache=cache_predicate or _has_records,
        ),
    )
    return OkapiConfig(
        url=url,
        tenant=tenant,
        token=token,
        resilience=resilience,
        reference_resilience=reference_resilience,
    )


def get_okapi_config() -> OkapiConfig:
    values = require_env_vars(("OKAPI_URL", "OKAPI_TENANT"))
    return build_okapi_config(
        url=values["OKAPI_URL"],
        tenant=values["OKAPI_TENANT"],
        token=optional_env_var("OKAPI_TOKEN"),
        timeout_seconds=optional_float_env_var("OKAPI_TIMEOUT_SECONDS", OKAPI_TIMEOUT_SECONDS),
    )
