"""
Direct upload of the audio file to S3 with a signed form policy
"""

import logging
import os
import stat
from typing import BinaryIO, Optional

import requests
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError as XMLParseError
from defusedxml.ElementTree import fromstring
from requests_toolbelt import MultipartEncoder

from ..core.exceptions import ParseError, ProtocolError, UploadError
from ..core.interfaces import HTTPTransport
from ..core.models import UploadPolicy, UploadReceipt

logger = logging.getLogger(__name__)

FILE_FIELD = "file"
FILE_CONTENT_TYPE = "application/octet-stream"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_upload_response(body) -> UploadReceipt:
    """
    Parse the object store's PostResponse XML

    Args:
        body: Raw XML body (str or bytes)

    Returns:
        UploadReceipt naming the stored object

    Raises:
        ParseError: If the body is not well-formed PostResponse XML
        ProtocolError: If Bucket or Key are missing
    """
    text = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
    try:
        root = fromstring(body)
    except (XMLParseError, DefusedXmlException) as e:
        raise ParseError(f"Malformed XML in upload response: {e}", body=text) from e

    if _local_name(root.tag) != "PostResponse":
        raise ParseError(f"Unexpected upload response element <{root.tag}>", body=text)

    values = {_local_name(child.tag): (child.text or "").strip() for child in root}

    missing = [name for name in ("Bucket", "Key") if not values.get(name)]
    if missing:
        raise ProtocolError(
            f"Upload response is missing elements: {', '.join(missing)}", body=text
        )

    return UploadReceipt(
        location=values.get("Location", ""),
        bucket=values["Bucket"],
        key=values["Key"],
        etag=values.get("ETag", ""),
    )


def _require_known_length(audio_file: BinaryIO) -> None:
    """The Content-Length is taken up front, so the size must be knowable"""
    try:
        fd = audio_file.fileno()
    except (AttributeError, OSError):
        return
    if not stat.S_ISREG(os.fstat(fd).st_mode):
        raise UploadError(
            f"Cannot upload {getattr(audio_file, 'name', 'stream')}: not a regular file"
        )


def build_form(audio_file: BinaryIO, policy: UploadPolicy) -> MultipartEncoder:
    """
    Create the streaming multipart body for an upload

    The signed fields come first in their fixed order and the file is the
    last part. The file is read in chunks as the body is sent.

    Args:
        audio_file: Open binary stream with a name attribute
        policy: Signed upload policy

    Raises:
        UploadError: If the stream is a pipe or device whose length is unknown

    Returns:
        MultipartEncoder usable directly as a request body
    """
    _require_known_length(audio_file)
    filename = os.path.basename(getattr(audio_file, "name", "") or FILE_FIELD)
    fields = policy.form_fields()
    fields.append((FILE_FIELD, (filename, audio_file, FILE_CONTENT_TYPE)))
    return MultipartEncoder(fields=fields)


class ObjectStoreUploader:
    """
    POSTs the audio file straight to the bucket named in the upload policy
    """

    def __init__(self, transport: HTTPTransport, timeout: Optional[float] = None):
        self.transport = transport
        self.timeout = timeout

    def upload(self, audio_file: BinaryIO, policy: UploadPolicy) -> UploadReceipt:
        """
        Upload a file using a signed policy

        Args:
            audio_file: Open binary stream, read exactly once
            policy: Policy from the negotiator, used for this upload only

        Returns:
            UploadReceipt from the object store

        Raises:
            UploadError: If the object store did not answer with a 2xx status
            ParseError: If the acknowledgement is not valid XML
        """
        form = build_form(audio_file, policy)
        request = requests.Request(
            "POST",
            policy.form_action,
            data=form,
            headers={"Content-Type": form.content_type},
        ).prepare()

        logger.info(f"Uploading {form.len / (1024 * 1024):.1f}MB to object store")
        response = self.transport.send(request, timeout=self.timeout)

        if not 200 <= response.status_code < 300:
            raise UploadError(
                f"Object store rejected upload with HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            receipt = parse_upload_response(response.content)
        except ProtocolError as e:
            e.status_code = response.status_code
            raise

        logger.info(f"Stored upload as {receipt.bucket}/{receipt.key}")
        return receipt
