# Response envelope and versioned request builder over requests
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional
from urllib.parse import urljoin

import requests

logger = logging.getLogger(__name__)

API_VERSION_V2 = "application/vnd.go.cd.v2+json"
DEFAULT_RETRY_AFTER_MILLIS = 1000
MAX_RETRY_AFTER_MILLIS = 3600 * 1000


@dataclass(frozen=True)
class ApiResult:
    status_code: int
    body: Any = None
    redirect_url: Optional[str] = None
    retry_after_millis: int = DEFAULT_RETRY_AFTER_MILLIS
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_message is None

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiResult":
        location = response.headers.get("Location")
        redirect_url = urljoin(response.url or "", location) if location else None
        retry_after = _retry_after_millis(response.headers.get("Retry-After"))

        if 200 <= response.status_code < 300:
            return cls(response.status_code, response.text, redirect_url, retry_after)
        return cls(
            response.status_code,
            response.text,
            redirect_url,
            retry_after,
            error_message=_error_message(response),
        )

    @classmethod
    def from_exception(cls, exc: Exception) -> "ApiResult":
        return cls(status_code=0, error_message=str(exc))

    def map(self, fn: Callable[[Any], Any]) -> "ApiResult":
        """Transform the body of a successful result, turning decode errors into failures."""
        if not self.ok:
            return self
        try:
            return replace(self, body=fn(self.body))
        except (ValueError, TypeError, AttributeError) as exc:
            return replace(self, error_message=f"Unable to parse response body: {exc}")

    def do(self, on_success: Callable[["ApiResult"], Any], on_failure: Callable[["ApiResult"], Any]):
        if self.ok:
            return on_success(self)
        return on_failure(self)


def _retry_after_millis(header: Optional[str]) -> int:
    """Retry-After in seconds as ms; HTTP-dates, negatives and non-finite values fall back to the default."""
    if not header:
        return DEFAULT_RETRY_AFTER_MILLIS
    try:
        seconds = float(header)
    except ValueError:
        return DEFAULT_RETRY_AFTER_MILLIS
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_RETRY_AFTER_MILLIS
    return min(int(seconds * 1000), MAX_RETRY_AFTER_MILLIS)


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"{response.status_code} {response.reason or ''}".strip()


class ApiRequestBuilder:
    """Sends requests with the API version header through one session."""

    def __init__(self, session: Optional[requests.Session] = None, token: Optional[str] = None,
                 timeout: float = 10.0, api_version: str = API_VERSION_V2):
        self.session = session or requests.Session()
        self.token = token
        self.timeout = timeout
        self.api_version = api_version

    def _headers(self, extra=None) -> dict:
        headers = {"Accept": self.api_version}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    def get(self, url: str) -> ApiResult:
        return self._send("GET", url, self._headers())

    def post(self, url: str, json_body=None) -> ApiResult:
        return self._send("POST", url, self._headers({"X-GoCD-Confirm": "true"}), json_body)

    def _send(self, method: str, url: str, headers: dict, json_body=None) -> ApiResult:
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, headers=headers, json=json_body, timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return ApiResult.from_exception(exc)
        return ApiResult.from_response(response)
