"""
Client for the otter.ai speech upload API
"""

from .auth import SessionAuthenticator, login
from .csrf import CSRFTokenFetcher
from .endpoints import OtterEndpoints
from .finalize import FinalizeNotifier, parse_finalize_response
from .object_store import ObjectStoreUploader, build_form, parse_upload_response
from .transport import RequestsTransport
from .upload_params import UploadParamsNegotiator, parse_upload_params

__all__ = [
    "OtterEndpoints",
    "RequestsTransport",
    "CSRFTokenFetcher",
    "SessionAuthenticator",
    "UploadParamsNegotiator",
    "ObjectStoreUploader",
    "FinalizeNotifier",
    "login",
    "build_form",
    "parse_upload_params",
    "parse_upload_response",
    "parse_finalize_response",
]
