"""
Negotiation of the signed S3 upload policy
"""

import json
import logging
from typing import Any, Optional

import requests

from ..core.exceptions import ParseError, ProtocolError
from ..core.interfaces import HTTPTransport
from ..core.models import UploadPolicy
from .endpoints import SESSION_COOKIE, OtterEndpoints

logger = logging.getLogger(__name__)

STATUS_OK = "ok"

# UploadPolicy attribute -> key in the response's data object
POLICY_FIELDS = {
    "algorithm": "x-amz-algorithm",
    "signature": "x-amz-signature",
    "form_action": "form_action",
    "key": "key",
    "date": "x-amz-date",
    "policy": "policy",
    "credential": "x-amz-credential",
    "success_action_status": "success_action_status",
    "acl": "acl",
}


def load_json_envelope(body: str, what: str) -> dict[str, Any]:
    """
    Decode a JSON object response and check its status field

    A missing status is accepted; any status other than "ok" is not.

    Raises:
        ParseError: If the body is not a JSON object
        ProtocolError: If the status reports a failure
    """
    try:
        envelope = json.loads(body)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Malformed JSON in {what} response: {e}", body=body) from e

    if not isinstance(envelope, dict):
        raise ParseError(f"Expected a JSON object in {what} response", body=body)

    status = envelope.get("status")
    if status is not None and status != STATUS_OK:
        raise ProtocolError(f"{what} request failed with status {status!r}", body=body)

    return envelope


def format_status(value: Any) -> str:
    """Render success_action_status as the object store expects it, 201.0 -> "201" """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_upload_params(body: str) -> UploadPolicy:
    """
    Parse the speech_upload_params response body

    Args:
        body: Raw JSON body

    Returns:
        UploadPolicy with the signed values untouched

    Raises:
        ParseError: If the body is not valid JSON
        ProtocolError: If the status is not ok or fields are missing
    """
    envelope = load_json_envelope(body, "upload params")

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise ProtocolError("Upload params response has no data object", body=body)

    missing = [name for name in POLICY_FIELDS.values() if data.get(name) is None]
    if missing:
        raise ProtocolError(
            f"Upload params response is missing fields: {', '.join(missing)}", body=body
        )

    values = {attr: data[name] for attr, name in POLICY_FIELDS.items()}
    values["success_action_status"] = format_status(values["success_action_status"])
    return UploadPolicy(**{attr: str(value) for attr, value in values.items()})


class UploadParamsNegotiator:
    """
    Requests a one-time signed upload policy for the logged in session
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

    def get_upload_params(self, session_id: str) -> UploadPolicy:
        """
        Get the parameters for a direct upload to the object store

        Args:
            session_id: Session identifier from login

        Returns:
            UploadPolicy for exactly one upload
        """
        request = requests.Request(
            "GET",
            self.endpoints.speech_upload_params,
            cookies={SESSION_COOKIE: session_id},
        ).prepare()
        response = self.transport.send(request, timeout=self.timeout)

        try:
            policy = parse_upload_params(response.text)
        except ProtocolError as e:
            e.status_code = response.status_code
            raise

        logger.info(f"Received upload policy for key {policy.key}")
        return policy
