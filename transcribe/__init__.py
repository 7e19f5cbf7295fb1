"""
transcribe: upload audio files to otter.ai and get back a transcript link
"""

from .config import CredentialConfig, Settings, resolve_credentials
from .core import (
    AuthenticationError,
    ConfigurationError,
    Credentials,
    NetworkError,
    ParseError,
    ProtocolError,
    ServiceError,
    TranscriptRecord,
    UploadError,
    UploadPolicy,
    UploadReceipt,
)
from .pipeline import TranscriptionPipeline, transcribe_file

__version__ = "0.1.0"

__all__ = [
    "TranscriptionPipeline",
    "transcribe_file",
    "Settings",
    "CredentialConfig",
    "resolve_credentials",
    "Credentials",
    "UploadPolicy",
    "UploadReceipt",
    "TranscriptRecord",
    "ServiceError",
    "NetworkError",
    "AuthenticationError",
    "ProtocolError",
    "ParseError",
    "UploadError",
    "ConfigurationError",
]
