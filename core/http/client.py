"""
HTTP Client

JSON-over-POST transport for GraphQL endpoints, on a pooled requests
session. Status handling and payload interpretation are left to the
caller; only connection-level failures raise.
"""

from __future__ import annotations

import json as jsonlib
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests


logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass
class HttpResponse:
    """Status and raw body of a completed request."""
    status_code: int
    content: bytes
    url: str = ""
    elapsed_ms: float = 0.0

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body; raises ValueError on malformed JSON."""
        return jsonlib.loads(self.content)


class HttpError(Exception):
    """The request never produced a response (DNS, connect, timeout...)."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class HttpClient:
    """
    Posts JSON documents and returns the raw response.

    Usage:
        with HttpClient(timeout=30.0) as client:
            response = client.post(url, json={"query": "{ _meta { block { number } } }"})
            data = response.json()["data"]
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            timeout: Default per-request timeout in seconds
            proxy: Proxy URL applied to both http and https
            session: Pre-built session (tests inject a stub here)
        """
        self.timeout = timeout
        self.proxy = proxy
        self._session = session

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            if self.proxy:
                self._session.proxies = {"http": self.proxy, "https": self.proxy}
        return self._session

    def post(
        self,
        url: str,
        *,
        json: Any,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        POST ``json`` to ``url``.

        Raises:
            HttpError: If no response was received
        """
        request_headers = dict(JSON_HEADERS)
        if headers:
            request_headers.update(headers)

        try:
            response = self._get_session().request(
                method="POST",
                url=url,
                headers=request_headers,
                json=json,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            raise HttpError(str(e), url=url) from e

        elapsed_ms = response.elapsed.total_seconds() * 1000
        logger.debug(f"POST {url} -> {response.status_code} in {elapsed_ms:.0f}ms")
        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            url=str(response.url),
            elapsed_ms=elapsed_ms,
        )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
