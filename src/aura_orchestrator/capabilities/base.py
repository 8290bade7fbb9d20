"""
aura_orchestrator.capabilities.base

Shared contract for capability clients (one per external provider family).

Responsibilities:
- Define the tagged result type (`Ok` / `Err`) returned by every provider call.
- Classify transport/HTTP/payload failures into a typed `ProviderError`.
- Provide the single-request helper used by all concrete clients.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, NoReturn, TypeVar, Union

import httpx

from aura_orchestrator.observability.logging import get_logger
from aura_orchestrator.settings import Settings

log = get_logger(__name__)

T = TypeVar("T")


class ProviderErrorKind(enum.StrEnum):
    auth = "auth"
    quota = "quota"
    timeout = "timeout"
    network = "network"
    upstream = "upstream"
    malformed = "malformed"
    unsupported = "unsupported"


@dataclass(frozen=True, slots=True)
class ProviderError:
    kind: ProviderErrorKind
    message: str
    provider: str
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.provider} {self.kind}: {self.message}"


class ProviderFailure(Exception):
    """
    Raised by `Err.unwrap()` so handlers can propagate a provider error as an exception.
    """

    def __init__(self, error: ProviderError) -> None:
        super().__init__(str(error))
        self.error = error


class ConfigurationError(RuntimeError):
    """
    Unrecoverable programmer error (a client built without required configuration).
    """


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T
    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    error: ProviderError
    ok: ClassVar[bool] = False

    def unwrap(self) -> NoReturn:
        raise ProviderFailure(self.error)


Result = Union[Ok[T], Err]


@dataclass(frozen=True, slots=True)
class InvokeOptions:
    # Unset fields fall back to the provider defaults from Settings.
    model: str | None = None
    max_output_units: int | None = None
    temperature: float | None = None
    system_prompt: str | None = None

    def __post_init__(self) -> None:
        if self.temperature is not None and not 0.0 <= self.temperature <= 1.0:
            raise ValueError("temperature must be within [0, 1]")
        if self.max_output_units is not None and self.max_output_units <= 0:
            raise ValueError("max_output_units must be positive")


class CapabilityClient:
    """
    Base adapter for one provider family.

    Contract:
    - One outbound request per invocation, no retries.
    - Expected failures (auth, quota, network, malformed payload) come back as `Err`.
    - Only missing required configuration raises (`ConfigurationError`).
    """

    provider: ClassVar[str] = "provider"
    requires_api_key: ClassVar[bool] = True

    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http
        if not self.base_url:
            raise ConfigurationError(f"{self.provider}: base URL is not configured")
        if not self.default_model:
            raise ConfigurationError(f"{self.provider}: default model is not configured")

    @property
    def base_url(self) -> str:
        raise NotImplementedError

    @property
    def api_key(self) -> str | None:
        raise NotImplementedError

    @property
    def default_model(self) -> str:
        raise NotImplementedError

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or not self.requires_api_key

    async def invoke(self, payload: Any, options: InvokeOptions | None = None) -> Result[Any]:
        # Text-in/text-out is the common denominator; media clients override this.
        if isinstance(payload, str):
            return await self.generate_text(payload, options)
        return self._unsupported("invoke with non-text payload")

    async def generate_text(self, prompt: str, options: InvokeOptions | None = None) -> Result[str]:
        return self._unsupported("generate_text")

    def _unsupported(self, operation: str) -> Err:
        return Err(
            ProviderError(
                kind=ProviderErrorKind.unsupported,
                message=f"{operation} is not offered by this provider",
                provider=self.provider,
            )
        )

    def _bearer(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _headers(self) -> dict[str, str]:
        return self._bearer()

    async def _send(
        self,
        method: str,
        url: str,
        *,
        parse: Callable[[Any], T],
        **kwargs: Any,
    ) -> Result[T]:
        if self.requires_api_key and not self.api_key:
            return self._fail(ProviderErrorKind.auth, "credential is not configured")

        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            r = await self._http.request(method, url, headers=headers, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            return self._fail(
                _kind_for_status(e.response.status_code),
                _upstream_message(e.response),
                status_code=e.response.status_code,
            )
        except httpx.TimeoutException:
            return self._fail(ProviderErrorKind.timeout, "request timed out")
        except httpx.RequestError as e:
            return self._fail(ProviderErrorKind.network, type(e).__name__)

        try:
            body = r.json()
        except ValueError:
            return self._fail(ProviderErrorKind.malformed, "response body is not JSON")

        try:
            return Ok(parse(body))
        except (KeyError, IndexError, TypeError, ValueError, AttributeError):
            return self._fail(ProviderErrorKind.malformed, "unexpected response shape")

    def _fail(
        self, kind: ProviderErrorKind, message: str, *, status_code: int | None = None
    ) -> Err:
        log.warning(
            "provider_call_failed",
            provider=self.provider,
            kind=str(kind),
            status_code=status_code,
            error=message,
        )
        return Err(
            ProviderError(kind=kind, message=message, provider=self.provider, status_code=status_code)
        )


def _kind_for_status(status_code: int) -> ProviderErrorKind:
    if status_code in (401, 403):
        return ProviderErrorKind.auth
    if status_code == 429:
        return ProviderErrorKind.quota
    if status_code in (408, 504):
        return ProviderErrorKind.timeout
    return ProviderErrorKind.upstream


def _upstream_message(response: httpx.Response) -> str:
    # Providers disagree on error envelopes: {"error": {"message"}}, {"error": "..."}, {"message"}.
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {response.status_code}"


# --- Module Notes -----------------------------------------------------------
# Retry/backoff, if ever added, belongs in a wrapper above `invoke` and must keep
# returning the same `Ok` / `Err` taxonomy.
