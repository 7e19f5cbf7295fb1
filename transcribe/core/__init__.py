"""
Core interfaces and models for the upload pipeline
"""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    ParseError,
    ProtocolError,
    ServiceError,
    UploadError,
)
from .interfaces import HTTPTransport
from .logging import configure_logging, get_logger
from .models import (
    CredentialSource,
    Credentials,
    TranscriptRecord,
    UploadPolicy,
    UploadReceipt,
)

__all__ = [
    # Interfaces
    "HTTPTransport",
    # Models
    "Credentials",
    "CredentialSource",
    "UploadPolicy",
    "UploadReceipt",
    "TranscriptRecord",
    # Exceptions
    "ServiceError",
    "NetworkError",
    "AuthenticationError",
    "ProtocolError",
    "ParseError",
    "UploadError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "get_logger",
]
