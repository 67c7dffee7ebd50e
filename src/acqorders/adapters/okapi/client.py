"""HTTP client for the Okapi-fronted storage and inventory modules."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final, cast

import httpx
from pydantic import ValidationError as PydanticValidationError

from acqorders.adapters.http_resilience import ResilientClient
from acqorders.domain.errors import OrdersError, StorageNotFound, ValidationError

from .schema import ErrorsPayload

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from acqorders.config import OkapiConfig, ResilienceConfig

log = getLogger(__name__)

DEFAULT_LANG: Final = "en"

type JsonObject = dict[str, object]
type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


class OkapiAPIError(OrdersError):
    """Raised when a module answers with an unexpected status."""

    def __init__(self, message: str, *, status_code: int | None = None, **parameters: str) -> None:
        super().__init__(message, **parameters)
        self.status_code = status_code
        if status_code is not None and status_code >= 400:  # noqa: PLR2004
            self.http_status = status_code


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = ErrorsPayload.model_validate(response.json())
    except (ValueError, PydanticValidationError):
        return response.text or response.reason_phrase
    if payload.errors:
        return payload.errors[0].message
    return response.text or response.reason_phrase


def raise_for_status(response: httpx.Response) -> None:
    """Translate a non-2xx response into the domain error taxonomy."""

    if response.is_success:
        return
    message = _error_message(response)
    path = response.request.url.path
    log.error("%s %s failed with %s: %s", response.request.method, path, response.status_code, message)
    if response.status_code == httpx.codes.NOT_FOUND:
        raise StorageNotFound(message, path=path)
    if response.status_code in {httpx.codes.BAD_REQUEST, httpx.codes.UNPROCESSABLE_ENTITY}:
        raise ValidationError(message, path=path)
    raise OkapiAPIError(message, status_code=response.status_code, path=path)


def created_record_id(response: httpx.Response) -> str:
    """Id of a freshly created record, from the body or the Location header."""

    if response.content:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            record_id = cast("JsonObject", body).get("id")
            if isinstance(record_id, str) and record_id:
                return record_id
    location = response.headers.get("Location")
    if location:
        return location.rstrip("/").rsplit("/", 1)[-1]
    raise OkapiAPIError(
        f"Created record at {response.request.url.path} has no id",
        status_code=response.status_code,
    )


class OkapiClient:
    """Issues JSON requests against Okapi.

    Record traffic goes through ``records``; reference-data lookups go through
    ``reference``, which is expected to be a caching client.
    """

    def __init__(
        self,
        records: ResilientClient,
        reference: ResilientClient | None = None,
        *,
        lang: str = DEFAULT_LANG,
    ) -> None:
        self.records = records
        self.reference = reference or records
        self.lang = lang

    @classmethod
    def from_config(
        cls,
        config: OkapiConfig,
        client_factory: ClientFactory = _default_client_factory,
    ) -> OkapiClient:
        return cls(
            client_factory(config.resilience),
            client_factory(config.reference_resilience),
        )

    async def __aenter__(self) -> OkapiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.records.aclose()
        if self.reference is not self.records:
            await self.reference.aclose()

    async def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, str | int] | None = None,
        reference: bool = False,
    ) -> JsonObject:
        client = self.reference if reference else self.records
        response = await client.get(path, params=self._params(params))
        raise_for_status(response)
        payload = response.json()
        if not isinstance(payload, dict):
            raise OkapiAPIError(f"Unexpected payload from {path}", status_code=response.status_code)
        return cast("JsonObject", payload)

    async def post_record(self, path: str, body: JsonObject) -> str:
        log.debug("POST %s: %s", path, body)
        response = await self.records.post(path, json=body, params=self._params(None))
        raise_for_status(response)
        return created_record_id(response)

    async def put_record(self, path: str, body: JsonObject) -> None:
        log.debug("PUT %s: %s", path, body)
        response = await self.records.put(path, json=body, params=self._params(None))
        raise_for_status(response)

    async def delete_record(self, path: str) -> None:
        log.debug("DELETE %s", path)
        response = await self.records.delete(path, params=self._params(None))
        raise_for_status(response)

    def _params(self, params: Mapping[str, str | int] | None) -> dict[str, str | int]:
        return {**(params or {}), "lang": self.lang}
