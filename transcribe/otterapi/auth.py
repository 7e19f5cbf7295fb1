"""
Session login against the transcription service
"""

import logging
from typing import Optional

import requests

from ..core.exceptions import AuthenticationError
from ..core.interfaces import HTTPTransport
from ..core.models import Credentials
from .csrf import CSRFTokenFetcher
from .endpoints import SESSION_COOKIE, OtterEndpoints
from .transport import RequestsTransport

logger = logging.getLogger(__name__)


class SessionAuthenticator:
    """
    Logs in with HTTP basic auth plus a CSRF token and returns the session id
    """

    def __init__(
        self,
        transport: HTTPTransport,
        csrf: Optional[CSRFTokenFetcher] = None,
        endpoints: Optional[OtterEndpoints] = None,
        timeout: Optional[float] = None,
    ):
        self.transport = transport
        self.endpoints = endpoints or OtterEndpoints()
        self.timeout = timeout
        self.csrf = csrf or CSRFTokenFetcher(transport, self.endpoints, timeout)

    def login(self, credentials: Credentials) -> str:
        """
        Log in and return the session identifier

        Args:
            credentials: Username and password

        Returns:
            Value of the sessionid cookie, unmodified

        Raises:
            AuthenticationError: If the service did not issue a session
            ProtocolError: If no CSRF token could be obtained
            NetworkError: If a request could not be completed
        """
        request = requests.Request(
            "POST",
            self.endpoints.login(credentials.username),
            auth=(credentials.username, credentials.password),
        )
        self.csrf.protect(request)

        logger.info("Logging in")
        response = self.transport.send(request.prepare(), timeout=self.timeout)

        session_id = response.cookies.get(SESSION_COOKIE)
        if session_id:
            logger.info("Login succeeded")
            return session_id

        raise AuthenticationError(
            f"Unable to find session id in login response (HTTP {response.status_code}). "
            f"{AuthenticationError.hint}",
            status_code=response.status_code,
            body=response.text,
        )


def login(
    username: str,
    password: str,
    transport: Optional[HTTPTransport] = None,
    endpoints: Optional[OtterEndpoints] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Log into the service using a username and password

    Returns:
        Session identifier
    """
    owns_transport = transport is None
    transport = transport or RequestsTransport()
    try:
        authenticator = SessionAuthenticator(transport, endpoints=endpoints, timeout=timeout)
        return authenticator.login(Credentials(username, password))
    finally:
        if owns_transport:
            transport.close()
