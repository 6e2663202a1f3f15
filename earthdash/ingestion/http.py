"""
EarthDash - Shared HTTP plumbing for upstream clients.

Every client owns an httpx client that can be given a custom transport,
which is how tests substitute canned upstream responses.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from earthdash.core.config import settings
from earthdash.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


def check_response(response: httpx.Response, source: str) -> httpx.Response:
    """Raise UpstreamUnavailable for a non-success status."""
    if response.is_success:
        return response
    logger.warning(f"{source} responded with HTTP {response.status_code}")
    raise UpstreamUnavailable(
        source,
        f"HTTP {response.status_code} {response.reason_phrase}".strip(),
        status=response.status_code,
        details={"body": response.text[:500]},
    )


def decode_json(response: httpx.Response, source: str, expect: type = dict) -> Any:
    """
    Decode a JSON body, treating garbage as an upstream failure.

    Args:
        response: Successful upstream response
        source: Upstream name used in error messages
        expect: Required top-level JSON type (dict for objects, list for arrays)
    """
    try:
        payload = response.json()
    except ValueError as e:
        raise UpstreamUnavailable(source, f"unparseable JSON payload: {e}") from e
    if not isinstance(payload, expect):
        raise UpstreamUnavailable(
            source,
            f"expected a JSON {'object' if expect is dict else 'array'}, got {type(payload).__name__}",
        )
    return payload


class UpstreamClient:
    """
    Base class for synchronous upstream clients.

    Usage:
        with SomeClient() as client:
            data = client.do_something()
    """

    SOURCE = "upstream"

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            headers: Extra default headers
        """
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport
        self._headers = {"User-Agent": settings.user_agent, **(headers or {})}
        self._client: Optional[httpx.Client] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                transport=self._transport,
                headers=self._headers,
                follow_redirects=True,
            )
        return self._client

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request; any transport error or bad status becomes UpstreamUnavailable."""
        try:
            response = self._get_client().request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{self.SOURCE} request failed: {e}")
            raise UpstreamUnavailable(self.SOURCE, str(e) or type(e).__name__) from e
        return check_response(response, self.SOURCE)

    def _get_json(self, url: str, expect: type = dict, **kwargs) -> Any:
        return decode_json(self._request("GET", url, **kwargs), self.SOURCE, expect)

    def _post_json(self, url: str, payload: dict, expect: type = dict, **kwargs) -> Any:
        return decode_json(self._request("POST", url, json=payload, **kwargs), self.SOURCE, expect)
