"""
HTTP wrapper used by the proxy client
"""

import logging
from typing import Optional, Tuple

import requests

from .exceptions import HttpStatusError, RequestTimeoutError

logger = logging.getLogger(__name__)

USER_AGENT = 'egld-sdk / 1.0.0 <Posting to nodes>'

DEFAULT_TIMEOUT = 30


class HttpClientWrapper:
    """
    GET and POST against a base URL with fixed headers.

    Both primitives return the raw body and the HTTP status code; they only
    raise when no response was received at all, with RequestTimeoutError
    when the deadline passed.
    """

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Args:
            url: Base URL of the proxy or observer
            session: Session to send requests with (default: a new one)
            timeout: Request deadline in seconds
        """
        self.url = url.rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': USER_AGENT,
        })

    def get_http(self, endpoint: str, timeout: Optional[float] = None) -> Tuple[bytes, int]:
        """
        Make GET request.

        Args:
            endpoint: Route relative to the base URL
            timeout: Deadline for this request (default: the client's timeout)
        """
        return self._send('GET', endpoint, timeout)

    def post_http(self, endpoint: str, data: bytes, timeout: Optional[float] = None) -> Tuple[bytes, int]:
        """Make POST request with a raw JSON body"""
        return self._send(
            'POST',
            endpoint,
            timeout,
            data=data,
            headers={'Content-Type': 'application/json'},
        )

    def _send(self, method: str, endpoint: str, timeout: Optional[float], **kwargs) -> Tuple[bytes, int]:
        url = f"{self.url}/{endpoint}"
        if timeout is None:
            timeout = self.timeout
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.Timeout as exc:
            raise RequestTimeoutError(f"{method} {url} timed out after {timeout}s: {exc}") from exc
        except requests.RequestException as exc:
            raise HttpStatusError(f"{method} {url} failed: {exc}", 0) from exc
        return response.content, response.status_code

    def close(self):
        """Close the session"""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
