"""HTTP helpers for the catalog and OSV APIs.

All network I/O is isolated here — the rest of the package works with
in-memory data structures.
"""

import time
from typing import Any, Callable

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from . import __version__

DEFAULT_HTTP_TIMEOUT = 30


class QueryError(Exception):
    """Base class for OSV query failures.

    Attributes:
        status: HTTP status code, or ``None`` for non-HTTP failures.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class TransientQueryError(QueryError):
    """Rate-limited or server-side failure; eligible for retry."""


class PermanentQueryError(QueryError):
    """Failure that retrying will not fix (or retries are exhausted)."""


def is_transient_status(status: int) -> bool:
    """Return True for statuses worth retrying (429 and 5xx)."""
    return status == 429 or status >= 500


def requests_session() -> requests.Session:
    """Create a requests session with ForkScan headers.

    Returns:
        Configured ``requests.Session``.
    """
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": f"ForkScan/{__version__}",
            "Accept": "application/json",
        }
    )
    return s


@retry(stop=stop_after_attempt(5), wait=wait_exponential(multiplier=1, min=1, max=30))
def get_json(session: requests.Session, url: str, params: dict[str, Any] | None = None) -> Any:
    """Fetch JSON from a URL with retry logic.

    Args:
        session: Requests session.
        url: URL to fetch.
        params: Optional query string parameters.

    Returns:
        Parsed JSON data.
    """
    r = session.get(url, params=params, timeout=DEFAULT_HTTP_TIMEOUT)
    r.raise_for_status()
    return r.json()


def fetch_catalog_page(session: requests.Session, url: str, page: int) -> dict[str, Any]:
    """Fetch one page of the component catalog.

    Args:
        session: Requests session.
        url: Catalog endpoint.
        page: 1-based page number.

    Returns:
        Page dict with ``results`` and ``totalPages`` keys.
    """
    print(f"Fetching page {page}...")
    data = get_json(session, url, params={"page": page})
    if not isinstance(data, dict):
        raise ValueError(f"Catalog page {page} is not a JSON object")
    return data


class OsvClient:
    """OSV ``/v1/query`` client with exponential-backoff retry.

    Transient failures (HTTP 429 and 5xx) are retried up to
    ``retry_limit`` times, waiting ``initial_delay * 2**(n-1)`` seconds
    before retry ``n``. Anything else fails immediately.

    Attributes:
        session: Requests session used for every query.
        url: Query endpoint.
        retry_limit: Retries after the first attempt.
        initial_delay: First backoff delay in seconds.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        session: requests.Session,
        url: str = "https://api.osv.dev/v1/query",
        retry_limit: int = 5,
        initial_delay: float = 1.0,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.url = url
        self.retry_limit = retry_limit
        self.initial_delay = initial_delay
        self.timeout = timeout
        self._sleep = sleep

    def _post(self, payload: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise PermanentQueryError(f"Request failed: {e}") from e

        status = r.status_code
        if is_transient_status(status):
            raise TransientQueryError(f"Status {status}", status=status)
        if status < 200 or status >= 300:
            raise PermanentQueryError(f"HTTP {status}: {r.text[:200]}", status=status)

        try:
            data = r.json()
        except ValueError as e:
            raise PermanentQueryError(f"Malformed JSON payload: {e}", status=status) from e
        if not isinstance(data, dict):
            raise PermanentQueryError("Payload is not a JSON object", status=status)
        vulns = data.get("vulns") or []
        if not isinstance(vulns, list):
            raise PermanentQueryError("Payload 'vulns' is not a list", status=status)
        return vulns

    def _retrying(self, context: str) -> Retrying:
        max_delay = self.initial_delay * 2 ** max(self.retry_limit - 1, 0)

        def _log_retry(state: RetryCallState) -> None:
            delay = state.next_action.sleep if state.next_action else 0
            print(f"  Rate limited on {context} (attempt {state.attempt_number}) → waiting {delay:g}s")

        return Retrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.retry_limit + 1),
            wait=wait_exponential(multiplier=self.initial_delay, min=self.initial_delay, max=max_delay),
            retry=retry_if_exception_type(TransientQueryError),
            before_sleep=_log_retry,
            reraise=True,
        )

    def query(self, payload: dict[str, Any], context: str = "") -> list[dict[str, Any]]:
        """Run one OSV query, retrying transient failures.

        Args:
            payload: Request body, e.g. ``{"package": {"purl": ...}}``.
            context: Label used in log lines (e.g. ``component@forkPoint``).

        Returns:
            List of raw vulnerability dicts (possibly empty).

        Raises:
            PermanentQueryError: on a non-retryable failure or when the
                retry ceiling is exhausted.
        """
        try:
            return self._retrying(context or self.url)(self._post, payload)
        except TransientQueryError as e:
            raise PermanentQueryError(
                f"Gave up after {self.retry_limit + 1} attempts: {e}", status=e.status
            ) from e
