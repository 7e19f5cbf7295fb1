"""
Configuration for the upload pipeline and its command line front end
"""

from .credentials import (
    CredentialConfig,
    default_config_dir,
    default_config_file,
    resolve_credentials,
)
from .settings import Settings

__all__ = [
    "Settings",
    "CredentialConfig",
    "default_config_dir",
    "default_config_file",
    "resolve_credentials",
]
