"""
Credential discovery: flags, environment, config file and interactive prompt
"""

import getpass
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from platformdirs import user_config_dir

from ..core.exceptions import ConfigurationError
from ..core.logging import get_logger
from ..core.models import CredentialSource, Credentials

logger = get_logger(__name__)

APP_NAME = "transcribe"
APP_AUTHOR = "mulliken.net"
DEFAULT_CONFIG_FILE_NAME = "settings.json"

USERNAME_ENV = "OTTER_USERNAME"
PASSWORD_ENV = "OTTER_PASSWORD"


def default_config_dir() -> Path:
    """Get the per-user configuration directory for this OS"""
    return Path(user_config_dir(APP_NAME, APP_AUTHOR))


def default_config_file() -> Path:
    """Get the default configuration file path"""
    return default_config_dir() / DEFAULT_CONFIG_FILE_NAME


@dataclass
class CredentialConfig:
    """
    Credentials plus where they came from and where they would be saved
    """

    username: str = ""
    password: str = ""
    session_id: str = ""
    path: Optional[Path] = None
    source: CredentialSource = CredentialSource.NONE

    def __repr__(self) -> str:
        return (
            f"CredentialConfig(username={self.username!r}, path={self.path!r}, "
            f"source={self.source.value})"
        )

    @property
    def credentials(self) -> Credentials:
        return Credentials(username=self.username, password=self.password)

    @property
    def is_blank(self) -> bool:
        return not self.username or not self.password

    @classmethod
    def from_file(cls, config_path) -> "CredentialConfig":
        """
        Load credentials from a JSON configuration file

        Args:
            config_path: Path to JSON configuration file

        Returns:
            CredentialConfig sourced from the file
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with open(config_file, "r") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Unable to read configuration file {config_file}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file {config_file} must hold a JSON object")

        return cls(
            username=config_data.get("username") or "",
            password=config_data.get("password") or "",
            session_id=config_data.get("session_id") or "",
            path=config_file,
            source=CredentialSource.FILE,
        )

    def to_file(self, config_path=None) -> Path:
        """
        Save credentials to a JSON configuration file

        The directory is created owner-only and the file is written 0600.

        Args:
            config_path: Path to save to, defaults to this config's path

        Returns:
            The path written
        """
        config_file = Path(config_path or self.path or default_config_file())
        config_data = {
            "username": self.username,
            "password": self.password,
            "session_id": self.session_id,
        }

        try:
            config_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd = os.open(config_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                json.dump(config_data, f, indent=2)
            os.chmod(config_file, 0o600)
        except OSError as e:
            raise ConfigurationError(f"Unable to write configuration file {config_file}: {e}") from e

        self.path = config_file
        logger.info(f"Configuration saved to: {config_file}")
        return config_file


def prompt_for_credentials(
    input_func: Callable[[str], str] = input,
    password_func: Callable[[str], str] = getpass.getpass,
) -> tuple[str, str]:
    """Ask for a username and password on the terminal"""
    print("Enter your otter.ai credentials:")
    try:
        username = input_func("Username: ").strip()
        password = password_func("Password: ").strip()
    except EOFError as e:
        raise ConfigurationError("No credentials provided on standard input") from e
    return username, password


def resolve_credentials(
    username: Optional[str] = None,
    password: Optional[str] = None,
    config_path: Optional[str] = None,
    prompt: Callable[[], tuple[str, str]] = prompt_for_credentials,
) -> CredentialConfig:
    """
    Work out which credentials to use for this run

    Command line flags win, then the environment, then an explicit config
    file, then the default config file, and finally an interactive prompt.

    Args:
        username: Username from the command line
        password: Password from the command line
        config_path: Custom config file from the command line
        prompt: Callable returning (username, password) when nothing else is set

    Returns:
        CredentialConfig with its source recorded

    Raises:
        ConfigurationError: If a config file is unreadable or credentials are blank
    """
    if username and password:
        config = CredentialConfig(
            username=username,
            password=password,
            path=default_config_file(),
            source=CredentialSource.ARG,
        )
    elif os.environ.get(USERNAME_ENV) and os.environ.get(PASSWORD_ENV):
        config = CredentialConfig(
            username=os.environ[USERNAME_ENV],
            password=os.environ[PASSWORD_ENV],
            path=default_config_file(),
            source=CredentialSource.ENV,
        )
    elif config_path:
        config = CredentialConfig.from_file(config_path)
    elif default_config_file().exists():
        config = CredentialConfig.from_file(default_config_file())
    else:
        entered_username, entered_password = prompt()
        config = CredentialConfig(
            username=entered_username,
            password=entered_password,
            path=default_config_file(),
            source=CredentialSource.PROMPT,
        )

    logger.debug(f"Using credentials from {config.source.value}")

    if config.is_blank:
        raise ConfigurationError(
            f'Credentials provided are blank. Edit "{config.path}" or see -h for usage.'
        )

    return config
