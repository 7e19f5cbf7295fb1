"""
Data models for the upload pipeline
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CredentialSource(Enum):
    """Where the credentials for a run came from"""

    NONE = "none"
    ENV = "env"
    FILE = "file"
    ARG = "arg"
    PROMPT = "prompt"


@dataclass(frozen=True)
class Credentials:
    """Username and password for the transcription service"""

    username: str
    password: str = field(repr=False)

    @property
    def is_blank(self) -> bool:
        return not self.username or not self.password


@dataclass(frozen=True)
class UploadPolicy:
    """
    Signed S3 form policy for a single direct upload

    Values are kept exactly as the service returned them since the
    signature covers their bytes.
    """

    algorithm: str
    signature: str
    form_action: str
    key: str
    date: str
    policy: str
    credential: str
    success_action_status: str
    acl: str

    def form_fields(self) -> list[tuple[str, str]]:
        """
        Get the signed form fields in the order the object store expects

        Returns:
            List of (field name, value) pairs, file field excluded
        """
        return [
            ("x-amz-algorithm", self.algorithm),
            ("x-amz-signature", self.signature),
            ("key", self.key),
            ("x-amz-date", self.date),
            ("policy", self.policy),
            ("success_action_status", self.success_action_status),
            ("x-amz-credential", self.credential),
            ("acl", self.acl),
        ]


@dataclass(frozen=True)
class UploadReceipt:
    """Object store acknowledgement of an accepted upload"""

    location: str
    bucket: str
    key: str
    etag: str


@dataclass(frozen=True)
class TranscriptRecord:
    """Record returned once the service has taken over an upload"""

    otid: str
    status: Optional[str] = None
    speech_id: Optional[str] = None
    upload_id: Optional[int] = None

    def transcript_url(self, prefix: str) -> str:
        """Build the shareable transcript URL"""
        return f"{prefix}{self.otid}"
