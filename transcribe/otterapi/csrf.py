"""
Anti-CSRF token acquisition
"""

import logging
from typing import Optional

import requests

from ..core.exceptions import ProtocolError
from ..core.interfaces import HTTPTransport
from .endpoints import CSRF_COOKIE, CSRF_HEADER, OtterEndpoints

logger = logging.getLogger(__name__)


class CSRFTokenFetcher:
    """
    Fetches a fresh CSRF token for every state-changing call

    Tokens are never cached: each caller asks for its own.
    """

    def __init__(
        self,
        transport: HTTPTransport,
        endpoints: Optional[OtterEndpoints] = None,
        timeout: Optional[float] = None,
    ):
        self.transport = transport
        self.endpoints = endpoints or OtterEndpoints()
        self.timeout = timeout

    def fetch(self) -> str:
        """
        Get a CSRF token from the login_csrf endpoint

        Returns:
            Value of the csrftoken cookie

        Raises:
            ProtocolError: If the response carries no csrftoken cookie
            NetworkError: If the request could not be completed
        """
        request = requests.Request("GET", self.endpoints.login_csrf).prepare()
        response = self.transport.send(request, timeout=self.timeout)

        token = response.cookies.get(CSRF_COOKIE)
        if token:
            logger.debug("Obtained CSRF token")
            return token

        raise ProtocolError(
            f"Unable to find CSRF token (HTTP {response.status_code}): {response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    def protect(self, request: requests.Request) -> requests.Request:
        """
        Attach a freshly fetched token to a request as cookie and header

        Args:
            request: Unprepared request, modified in place

        Returns:
            The same request
        """
        token = self.fetch()
        request.cookies = dict(request.cookies or {})
        request.cookies[CSRF_COOKIE] = token
        request.headers = dict(request.headers or {})
        request.headers[CSRF_HEADER] = token
        return request
