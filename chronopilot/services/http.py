"""HTTP utilities shared by the Supabase and SendGrid integrations."""

from __future__ import annotations

import logging
import os
import random
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, MutableMapping

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

from chronopilot.core.errors import ConfigError
from chronopilot.core.logger import get_logger

LOGGER = get_logger()

USER_AGENT = "ChronoPilot-Reports/0.1"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}
DEFAULT_TIMEOUT = 30.0

TIMEOUT_ENV = "CHRONOPILOT_TIMEOUT_SEC"
RETRY_ATTEMPTS_ENV = "CHRONOPILOT_RETRY_ATTEMPTS"
RETRY_BACKOFF_MS_ENV = "CHRONOPILOT_RETRY_BACKOFF_MS"


class ServiceError(RuntimeError):
    """Base error raised for remote service failures."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload if payload is not None else {}


class ServiceAuthError(ServiceError):
    """Raised when the service rejects the credentials."""


class ServiceNotFound(ServiceError):
    """Raised when the requested resource does not exist."""


class ServiceRetryableError(ServiceError):
    """Raised for retryable I/O issues (network/server errors)."""


class ServiceRequestError(ServiceError):
    """Raised for non-retryable HTTP or protocol errors."""


@dataclass(slots=True)
class RetryConfig:
    """Retry parameters for outgoing HTTP requests."""

    max_attempts: int = 3
    backoff_ms: int = 200
    max_backoff_ms: int = 2000

    @classmethod
    def from_env(cls) -> "RetryConfig":
        base = cls()
        attempts = _read_env_int(RETRY_ATTEMPTS_ENV)
        backoff = _read_env_int(RETRY_BACKOFF_MS_ENV)
        return cls(
            max_attempts=max(1, attempts) if attempts is not None else base.max_attempts,
            backoff_ms=backoff if backoff is not None else base.backoff_ms,
            max_backoff_ms=base.max_backoff_ms,
        )


def _read_env_int(key: str) -> int | None:
    value = (os.getenv(key) or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {key} must be an integer") from exc


def load_timeout() -> float:
    value = (os.getenv(TIMEOUT_ENV) or "").strip()
    if not value:
        return DEFAULT_TIMEOUT
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {TIMEOUT_ENV} must be a number") from exc


def safe_json(response: Response) -> Any:
    """Decode a JSON body, falling back to a truncated text excerpt."""

    try:
        return response.json()
    except ValueError:
        text = response.text
        if len(text) > 200:
            text = text[:200] + "..."
        return {"body": text}


def require_env(key: str) -> str:
    value = (os.getenv(key) or "").strip()
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    return value


class HttpClient:
    """Request helper wrapping base URL, default headers, retries and diagnostics."""

    def __init__(
        self,
        base_url: str,
        *,
        headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
        retries: RetryConfig | None = None,
        timeout: float | None = None,
        service: str = "http",
        logger: logging.Logger | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._headers = dict(headers or {})
        self._retries = retries or RetryConfig()
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._service = service
        self._logger = logger or LOGGER

    @property
    def session(self) -> requests.Session:
        return self._session

    def close(self) -> None:
        self._session.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        data: object | None = None,
        expected_status: Iterable[int] = (200,),
        allow_retry: bool = True,
    ) -> Response:
        """Send a request, retrying transport errors and 429/5xx responses."""

        url = self._compose_url(path)
        attempts = self._retries.max_attempts if allow_retry else 1
        base_backoff = max(0.05, self._retries.backoff_ms / 1000.0)
        max_backoff = max(base_backoff, self._retries.max_backoff_ms / 1000.0)
        expected = tuple(expected_status)
        request_headers: MutableMapping[str, str] = {**self._headers, **(headers or {})}
        last_error: ServiceError | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = self._session.request(
                    method,
                    url,
                    headers=request_headers,
                    params=dict(params or {}),
                    json=json_body,
                    data=data,
                    timeout=self._timeout,
                )
            except Timeout as exc:
                last_error = ServiceRetryableError("Request timed out", payload={"url": url})
                self._logger.warning(
                    "%s.http timeout method=%s url=%s attempt=%d", self._service, method, url, attempt, exc_info=exc
                )
            except (ConnectionError, RequestException) as exc:
                last_error = ServiceRetryableError("Request failed", payload={"url": url})
                self._logger.warning(
                    "%s.http connection_error method=%s url=%s attempt=%d error=%s",
                    self._service,
                    method,
                    url,
                    attempt,
                    type(exc).__name__,
                    exc_info=exc,
                )
            else:
                status = response.status_code
                if status in expected:
                    return response
                payload = safe_json(response)
                if status in (401, 403):
                    raise ServiceAuthError(f"{self._service} rejected credentials", status_code=status, payload=payload)
                if status == 404:
                    raise ServiceNotFound("Resource not found", status_code=status, payload=payload)
                if allow_retry and status in RETRYABLE_STATUS:
                    self._logger.warning(
                        "%s.http retryable_status method=%s url=%s status=%d", self._service, method, url, status
                    )
                    last_error = ServiceRetryableError("Retryable response", status_code=status, payload=payload)
                else:
                    raise ServiceRequestError(f"Unexpected status {status}", status_code=status, payload=payload)

            if attempt < attempts:
                self._sleep_with_backoff(base_backoff, max_backoff, attempt)

        if last_error is not None:
            raise last_error
        raise ServiceRetryableError("Exhausted retries", payload={"url": url})

    # Internal helpers -------------------------------------------------

    def _compose_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    def _sleep_with_backoff(self, base: float, maximum: float, attempt: int) -> None:
        delay = min(maximum, base * (2 ** (attempt - 1)))
        jitter = random.uniform(0, delay / 2)
        time.sleep(delay + jitter)


__all__ = [
    "HttpClient",
    "RetryConfig",
    "ServiceError",
    "ServiceAuthError",
    "ServiceNotFound",
    "ServiceRetryableError",
    "ServiceRequestError",
    "load_timeout",
    "require_env",
    "safe_json",
]
