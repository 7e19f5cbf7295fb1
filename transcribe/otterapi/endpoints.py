"""
URLs of the transcription service API
"""

from dataclasses import dataclass
from urllib.parse import urlencode

API_PREFIX = "/forward/api/v1"

CSRF_COOKIE = "csrftoken"
CSRF_HEADER = "X-Csrftoken"
SESSION_COOKIE = "sessionid"


@dataclass(frozen=True)
class OtterEndpoints:
    """Builds the URL for every call the pipeline makes"""

    base_url: str = "https://otter.ai"

    def _url(self, path: str, **params) -> str:
        url = f"{self.base_url.rstrip('/')}{API_PREFIX}/{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    @property
    def login_csrf(self) -> str:
        return self._url("login_csrf")

    def login(self, username: str) -> str:
        return self._url("login", username=username)

    @property
    def speech_upload_params(self) -> str:
        return self._url("speech_upload_params")

    def finish_speech_upload(
        self, bucket: str, key: str, language: str, country: str, user_id: str
    ) -> str:
        return self._url(
            "finish_speech_upload",
            bucket=bucket,
            key=key,
            language=language,
            country=country,
            userid=user_id,
        )
