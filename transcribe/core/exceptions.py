"""
Custom exceptions for the upload pipeline
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service errors"""

    def __init__(
        self,
        message: str,
        *,
        step: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class NetworkError(ServiceError):
    """Exception for transport failures (DNS, connect, TLS, timeout)"""

    pass


class AuthenticationError(ServiceError):
    """Exception for rejected logins"""

    hint = "Check your username and password and try again."


class ProtocolError(ServiceError):
    """Exception for responses that break the remote service contract"""

    pass


class ParseError(ProtocolError):
    """Exception for malformed JSON or XML bodies"""

    pass


class UploadError(ServiceError):
    """Exception for object store uploads that were not accepted"""

    pass


class ConfigurationError(ServiceError):
    """Exception for configuration and credential errors"""

    pass
