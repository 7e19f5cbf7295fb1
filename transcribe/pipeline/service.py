"""
End-to-end pipeline: login, negotiate, upload, finalize
"""

import os
from typing import BinaryIO, Optional

from ..config.settings import Settings
from ..core.exceptions import ServiceError
from ..core.interfaces import HTTPTransport
from ..core.logging import get_logger
from ..core.models import Credentials
from ..otterapi.auth import SessionAuthenticator
from ..otterapi.csrf import CSRFTokenFetcher
from ..otterapi.endpoints import OtterEndpoints
from ..otterapi.finalize import FinalizeNotifier
from ..otterapi.object_store import ObjectStoreUploader
from ..otterapi.transport import RequestsTransport
from ..otterapi.upload_params import UploadParamsNegotiator

logger = get_logger(__name__)

STEP_LOGIN = "login"
STEP_UPLOAD_PARAMS = "upload_params"
STEP_UPLOAD = "upload"
STEP_FINALIZE = "finalize"


class _Step:
    """Tags any ServiceError raised inside the block with the step name"""

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(__name__, {"step": name})

    def __enter__(self):
        self.logger.debug(f"Starting step {self.name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if isinstance(exc_val, ServiceError):
            if exc_val.step is None:
                exc_val.step = self.name
            self.logger.debug(f"Step {self.name} failed: {exc_type.__name__}")
        return False


class TranscriptionPipeline:
    """
    Uploads an audio file and returns the shareable transcript URL

    Every step runs strictly after the previous one succeeded. The first
    error propagates as raised, with its step attribute set.
    """

    def __init__(
        self,
        transport: Optional[HTTPTransport] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the pipeline

        Args:
            transport: HTTP transport, a RequestsTransport if not given
            settings: Service settings, defaults if not given
        """
        self.settings = settings or Settings()
        self._owns_transport = transport is None
        self.transport = transport or RequestsTransport()
        self.endpoints = OtterEndpoints(self.settings.base_url)

        timeout = self.settings.timeout
        csrf = CSRFTokenFetcher(self.transport, self.endpoints, timeout)
        self.authenticator = SessionAuthenticator(self.transport, csrf, self.endpoints, timeout)
        self.negotiator = UploadParamsNegotiator(self.transport, self.endpoints, timeout)
        self.uploader = ObjectStoreUploader(self.transport, self.settings.upload_timeout)
        self.notifier = FinalizeNotifier(
            self.transport,
            csrf,
            self.endpoints,
            timeout,
            language=self.settings.language,
            country=self.settings.country,
            user_id=self.settings.user_id,
        )

    def login(self, credentials: Credentials) -> str:
        """Log in and return the session identifier"""
        with _Step(STEP_LOGIN):
            return self.authenticator.login(credentials)

    def upload(self, session_id: str, audio_file: BinaryIO) -> str:
        """
        Upload a file for an existing session

        Args:
            session_id: Session identifier from login
            audio_file: Open, named binary stream

        Returns:
            Transcript URL
        """
        with _Step(STEP_UPLOAD_PARAMS):
            policy = self.negotiator.get_upload_params(session_id)

        with _Step(STEP_UPLOAD):
            receipt = self.uploader.upload(audio_file, policy)

        with _Step(STEP_FINALIZE):
            record = self.notifier.notify(session_id, receipt)

        transcript_url = record.transcript_url(self.settings.transcript_url_prefix)
        logger.info(f"Transcript available at {transcript_url}")
        return transcript_url

    def transcribe_file(self, credentials: Credentials, audio_file: BinaryIO) -> str:
        """
        Log in and upload a file for transcription

        Args:
            credentials: Username and password, used for login only
            audio_file: Open, named binary stream

        Returns:
            Transcript URL
        """
        logger.info(f"Transcribing {os.path.basename(getattr(audio_file, 'name', '') or '<stream>')}")
        session_id = self.login(credentials)
        return self.upload(session_id, audio_file)

    def close(self) -> None:
        """Close the transport if the pipeline created it"""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def transcribe_file(
    username: str,
    password: str,
    audio_file: BinaryIO,
    transport: Optional[HTTPTransport] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Upload a file with a fresh login and return the transcript URL
    """
    with TranscriptionPipeline(transport, settings) as pipeline:
        return pipeline.transcribe_file(Credentials(username, password), audio_file)
