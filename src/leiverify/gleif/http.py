from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    RETRY_BACKOFF_FACTOR,
    RETRY_STATUS_FORCELIST,
    ClientConfig,
)

JSON_API = "application/vnd.api+json"


# ---------- outcomes ----------
@dataclass(frozen=True)
class Success:
    body: Dict[str, Any]
    status: int = 200


@dataclass(frozen=True)
class NotFound:
    path: str

    @property
    def message(self) -> str:
        return f"not found: {self.path}"


@dataclass(frozen=True)
class HttpError:
    status: int
    snippet: str = ""

    @property
    def message(self) -> str:
        return f"GLEIF API error: {self.status}"


@dataclass(frozen=True)
class Timeout:
    seconds: float

    @property
    def message(self) -> str:
        return f"request timed out after {self.seconds:g}s"


@dataclass(frozen=True)
class NetworkError:
    reason: str

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class MalformedResponse:
    reason: str
    snippet: str = field(default="", compare=False)

    @property
    def message(self) -> str:
        return f"malformed response: {self.reason}"


TransportOutcome = Union[
    Success, NotFound, HttpError, Timeout, NetworkError, MalformedResponse
]


# ---------- session ----------
def make_session(config: Optional[ClientConfig] = None) -> requests.Session:
    config = config or ClientConfig()
    s = requests.Session()
    retry = Retry(
        total=config.retries,
        backoff_factor=RETRY_BACKOFF_FACTOR,
        status_forcelist=RETRY_STATUS_FORCELIST,
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers.update({"Accept": JSON_API, "User-Agent": config.user_agent})
    return s


def _snippet(text: Optional[str]) -> str:
    return (text or "")[:300].replace("\n", " ")


class RegistryTransport:
    """
    Issues single GETs against the GLEIF REST API.

    `fetch()` never raises: timeouts, connection failures, HTTP statuses and
    undecodable bodies all come back as a TransportOutcome variant.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._session = session or make_session(self._config)
        self._debug = self._config.debug

    @property
    def session(self) -> requests.Session:
        return self._session

    def url_for(self, path: str) -> str:
        return f"{self._config.base_url}/{path.lstrip('/')}"

    def fetch(
        self, path: str, query: Optional[Dict[str, str]] = None
    ) -> TransportOutcome:
        url = self.url_for(path)
        timeout = self._config.timeout_s
        try:
            r = self._session.get(url, params=query, timeout=timeout)
        except requests.Timeout:
            if self._debug:
                print(f"[gleif] timeout after {timeout}s: {url}", file=sys.stderr)
            return Timeout(seconds=timeout)
        except requests.RequestException as e:
            if self._debug:
                print(f"[gleif] {type(e).__name__} for {url}: {e}", file=sys.stderr)
            return NetworkError(reason=f"{type(e).__name__}: {e}")

        status = r.status_code
        if status == 404:
            return NotFound(path=path)
        if status >= 400:
            body = _snippet(r.text)
            if self._debug:
                print(
                    f"[gleif] HTTP {status} for {url} {query or ''} | body: {body}",
                    file=sys.stderr,
                )
            return HttpError(status=status, snippet=body)

        try:
            body = r.json()
        except ValueError as e:
            return MalformedResponse(
                reason=f"body is not JSON ({e})", snippet=_snippet(r.text)
            )
        if not isinstance(body, dict):
            return MalformedResponse(
                reason=f"expected a JSON object, got {type(body).__name__}",
                snippet=_snippet(r.text),
            )
        return Success(body=body, status=status)


def smoke_test(transport: RegistryTransport) -> TransportOutcome:
    outcome = transport.fetch("/lei-records", {"page[size]": "1"})
    status = outcome.status if isinstance(outcome, Success) else type(outcome).__name__
    print(
        f"[smoke] GET {transport.url_for('/lei-records')} -> {status}",
        file=sys.stderr,
    )
    if not isinstance(outcome, Success):
        print(f"[smoke] {outcome.message}", file=sys.stderr)
    return outcome
