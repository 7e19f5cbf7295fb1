"""
Runtime settings for talking to the transcription service
"""

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://otter.ai"
DEFAULT_TIMEOUT = 30.0
DEFAULT_UPLOAD_TIMEOUT = 300.0

# The finish endpoint expects a fixed locale and user id
DEFAULT_LANGUAGE = "en"
DEFAULT_COUNTRY = "US"
DEFAULT_USER_ID = "821301"


@dataclass
class Settings:
    """
    Central configuration for the upload pipeline
    """

    # Service settings
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT

    # Transcript locale
    language: str = DEFAULT_LANGUAGE
    country: str = DEFAULT_COUNTRY
    user_id: str = DEFAULT_USER_ID

    # General settings
    log_level: str = "INFO"
    log_format: str = "text"
    service_name: str = "transcribe"

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        if self.timeout <= 0 or self.upload_timeout <= 0:
            raise ValueError("Timeouts must be positive")

    @property
    def transcript_url_prefix(self) -> str:
        """Prefix the transcript id is appended to"""
        return f"{self.base_url}/u/"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Create settings from environment variables

        Returns:
            Settings instance configured from environment
        """
        return cls(
            base_url=os.environ.get("OTTER_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.environ.get("OTTER_TIMEOUT", DEFAULT_TIMEOUT)),
            upload_timeout=float(os.environ.get("OTTER_UPLOAD_TIMEOUT", DEFAULT_UPLOAD_TIMEOUT)),
            language=os.environ.get("OTTER_LANGUAGE", DEFAULT_LANGUAGE),
            country=os.environ.get("OTTER_COUNTRY", DEFAULT_COUNTRY),
            user_id=os.environ.get("OTTER_USER_ID", DEFAULT_USER_ID),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "text"),
        )
