"""
Hand-off of a finished object store upload to the transcription service
"""

import logging
from typing import Optional

import requests

from ..config.settings import DEFAULT_COUNTRY, DEFAULT_LANGUAGE, DEFAULT_USER_ID
from ..core.exceptions import ProtocolError
from ..core.interfaces import HTTPTransport
from ..core.models import TranscriptRecord, UploadReceipt
from .csrf import CSRFTokenFetcher
from .endpoints import SESSION_COOKIE, OtterEndpoints
from .upload_params import load_json_envelope

logger = logging.getLogger(__name__)

EMPTY_JSON_BODY = "{}"


def parse_finalize_response(body: str) -> TranscriptRecord:
    """
    Parse the finish_speech_upload response body

    Raises:
        ParseError: If the body is not a JSON object
        ProtocolError: If the status is not ok or otid is missing
    """
    envelope = load_json_envelope(body, "finish upload")

    otid = envelope.get("otid")
    if not otid:
        raise ProtocolError("Finish upload response has no otid", body=body)

    return TranscriptRecord(
        otid=str(otid),
        status=envelope.get("status"),
        speech_id=envelope.get("speech_id"),
        upload_id=envelope.get("upload_id"),
    )


class FinalizeNotifier:
    """
    Tells the service the upload is in the bucket and gets the transcript record
    """

    def __init__(
        self,
        transport: HTTPTransport,
        csrf: Optional[CSRFTokenFetcher] = None,
        endpoints: Optional[OtterEndpoints] = None,
        timeout: Optional[float] = None,
        language: str = DEFAULT_LANGUAGE,
        country: str = DEFAULT_COUNTRY,
        user_id: str = DEFAULT_USER_ID,
    ):
        self.transport = transport
        self.endpoints = endpoints or OtterEndpoints()
        self.timeout = timeout
        self.csrf = csrf or CSRFTokenFetcher(transport, self.endpoints, timeout)
        self.language = language
        self.country = country
        self.user_id = user_id

    def notify(self, session_id: str, receipt: UploadReceipt) -> TranscriptRecord:
        """
        Notify the service that the file has been uploaded

        A new CSRF token is fetched for this call.

        Args:
            session_id: Session identifier from login
            receipt: Object store receipt for the upload

        Returns:
            TranscriptRecord with the transcript id
        """
        url = self.endpoints.finish_speech_upload(
            bucket=receipt.bucket,
            key=receipt.key,
            language=self.language,
            country=self.country,
            user_id=self.user_id,
        )
        request = requests.Request(
            "POST",
            url,
            data=EMPTY_JSON_BODY,
            headers={"Content-Type": "application/json"},
            cookies={SESSION_COOKIE: session_id},
        )
        self.csrf.protect(request)

        response = self.transport.send(request.prepare(), timeout=self.timeout)

        try:
            record = parse_finalize_response(response.text)
        except ProtocolError as e:
            e.status_code = response.status_code
            raise

        logger.info(f"Upload finalized as transcript {record.otid}")
        return record
