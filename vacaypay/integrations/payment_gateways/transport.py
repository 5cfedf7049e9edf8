"""
HTTP transport for gateway adapters.

A thin synchronous wrapper over ``httpx.Client`` that returns response text
and raises ``ResponseError`` for anything that is not a 2xx answer. Retries
and connection pooling are left to httpx.
"""

from typing import Dict, Optional

import httpx

from vacaypay.core.logging import get_logger

from .base import ResponseError

logger = get_logger(__name__)


class HttpTransport:
    """Issue GET/POST requests and hand back the raw response body."""

    def __init__(
        self,
        timeout_seconds: float = 30,
        client: Optional[httpx.Client] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.client = client or httpx.Client(timeout=timeout_seconds)

    def get(self, url: str, headers: Dict[str, str]) -> str:
        return self._request("GET", url, headers)

    def post(self, url: str, body: Optional[str], headers: Dict[str, str]) -> str:
        return self._request("POST", url, headers, body)

    def close(self) -> None:
        self.client.close()

    def _request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> str:
        try:
            response = self.client.request(method, url, headers=headers, content=body)
        except httpx.HTTPError as e:
            logger.warning("http_request_failed", method=method, url=url, error=str(e))
            raise ResponseError(f"Connection error: {e}") from e

        if response.status_code >= 300:
            raise ResponseError(
                f"Failed with {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )

        return response.text
