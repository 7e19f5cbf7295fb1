"""
requests-backed implementation of HTTPTransport
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from ..core.exceptions import NetworkError
from ..core.interfaces import HTTPTransport

logger = logging.getLogger(__name__)


class RequestsTransport(HTTPTransport):
    """
    Send prepared requests over a pooled requests.Session

    Only the connection pool is shared between calls. Cookies are set on
    each prepared request explicitly, and the session jar is emptied around
    every send so cookies from one call never follow a redirect of another.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def send(
        self, request: requests.PreparedRequest, timeout: Optional[float] = None
    ) -> requests.Response:
        logger.debug(f"{request.method} {request.url.split('?')[0]}")
        self.session.cookies.clear()
        try:
            response = self.session.send(request, timeout=timeout)
        except requests.Timeout as e:
            raise NetworkError(f"Timed out after {timeout}s talking to {_host(request)}") from e
        except requests.RequestException as e:
            raise NetworkError(f"Request to {_host(request)} failed: {e}") from e
        finally:
            self.session.cookies.clear()

        logger.debug(f"{request.method} {request.url.split('?')[0]} -> {response.status_code}")
        return response

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _host(request: requests.PreparedRequest) -> str:
    return urlparse(request.url).netloc
