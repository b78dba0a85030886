"""Client configuration: application credentials, redirect port and playback device."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PORT = 8888
FILE_NAME = "client.yml"
CONFIG_DIR = ".config"
APP_CONFIG_DIR = "spotify-tui"
TOKEN_CACHE_FILE = ".spotify_token_cache.json"

BANNER = r"""
   _________  ____  / /_(_) __/_  __      / /___  __(_)
  / ___/ __ \/ __ \/ __/ / /_/ / / /_____/ __/ / / / / 
 (__  ) /_/ / /_/ / /_/ / __/ /_/ /_____/ /_/ /_/ / /  
/____/ .___/\____/\__/_/_/  \__, /      \__/\__,_/_/   
    /_/                    /____/                      
"""

_PORT_PATTERN = re.compile(r"\+?[0-9]+")
_MAX_PORT = 65535


class ConfigError(Exception):
    """Raised when the client configuration cannot be located or parsed."""


@dataclass(frozen=True)
class ConfigPaths:
    """Locations of the configuration file and the token cache."""

    config_file_path: Path
    token_cache_path: Path


def build_config_paths(home: str | Path | None = None) -> ConfigPaths:
    """Return the config paths under ``home``, creating the directories if needed.

    When ``home`` is not given the user's home directory is used.
    """
    if home is None:
        try:
            home = Path.home()
        except (RuntimeError, KeyError) as exc:
            raise ConfigError("No $HOME directory found for client config") from exc
    app_config_dir = Path(home) / CONFIG_DIR / APP_CONFIG_DIR
    app_config_dir.mkdir(parents=True, exist_ok=True)
    return ConfigPaths(
        config_file_path=app_config_dir / FILE_NAME,
        token_cache_path=app_config_dir / TOKEN_CACHE_FILE,
    )


def _parse_port(text: str) -> int | None:
    text = text.strip()
    if not _PORT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _MAX_PORT else None


def _read_line(prompt: Callable[[], str]) -> str:
    try:
        return prompt()
    except EOFError:
        return ""


@dataclass
class ClientConfig:
    """Credentials and settings used to talk to the streaming service."""

    client_id: str = ""
    client_secret: str = ""
    device_id: str | None = None
    port: int | None = None

    def effective_port(self) -> int:
        """The configured port, or the default one."""
        return DEFAULT_PORT if self.port is None else self.port

    def redirect_uri(self) -> str:
        """The OAuth redirect URI on the local machine."""
        return f"http://localhost:{self.effective_port()}/callback"

    def to_yaml(self) -> str:
        """Serialise the configuration as a YAML document."""
        document = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "device_id": self.device_id,
            "port": self.port,
        }
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)

    @classmethod
    def from_yaml(cls, text: str) -> ClientConfig:
        """Parse a configuration from YAML text."""
        try:
            document: Any = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid config file: {exc}") from exc
        if not isinstance(document, dict):
            raise ConfigError("config file must hold a mapping")

        fields: dict[str, Any] = {}
        for name in ("client_id", "client_secret"):
            if name not in document:
                raise ConfigError(f"missing field `{name}`")
            if not isinstance(document[name], str):
                raise ConfigError(f"field `{name}` must be a string")
            fields[name] = document[name]

        device_id = document.get("device_id")
        if device_id is not None and not isinstance(device_id, str):
            raise ConfigError("field `device_id` must be a string")

        port = document.get("port")
        if port is not None and (
            isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= _MAX_PORT
        ):
            raise ConfigError("field `port` must be a number between 0 and 65535")

        return cls(device_id=device_id, port=port, **fields)

    def _assign(self, other: ClientConfig) -> None:
        self.client_id = other.client_id
        self.client_secret = other.client_secret
        self.device_id = other.device_id
        self.port = other.port

    def set_device_id(self, device_id: str, paths: ConfigPaths | None = None) -> None:
        """Remember ``device_id`` here and in the saved config file."""
        paths = paths or build_config_paths()
        stored = ClientConfig.from_yaml(paths.config_file_path.read_text(encoding="utf-8"))
        self.device_id = device_id
        stored.device_id = device_id
        paths.config_file_path.write_text(stored.to_yaml(), encoding="utf-8")

    def load_config(
        self,
        paths: ConfigPaths | None = None,
        prompt: Callable[[], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        """Load the saved config, or ask the user for one and save it."""
        paths = paths or build_config_paths()
        if paths.config_file_path.exists():
            text = paths.config_file_path.read_text(encoding="utf-8")
            self._assign(ClientConfig.from_yaml(text))
            return

        output(BANNER)
        output(f"Config will be saved to {paths.config_file_path}")
        output("\nHow to get setup:\n")
        instructions = (
            "Go to the Spotify developer dashboard and open your applications",
            "Click `Create a Client ID` and create an app",
            "Now click `Edit Settings`",
            f"Add `http://localhost:{DEFAULT_PORT}/callback` to the Redirect URIs",
            "You are now ready to authenticate with Spotify!",
        )
        for number, item in enumerate(instructions, start=1):
            output(f"  {number}. {item}")

        output("\nEnter your Client ID: ")
        client_id = _read_line(prompt)
        output("\nEnter your Client Secret: ")
        client_secret = _read_line(prompt)
        output(f"\nEnter port of redirect uri (default {DEFAULT_PORT}): ")
        port = _parse_port(_read_line(prompt))

        entered = ClientConfig(
            client_id=client_id.strip(),
            client_secret=client_secret.strip(),
            device_id=None,
            port=DEFAULT_PORT if port is None else port,
        )
        paths.config_file_path.write_text(entered.to_yaml(), encoding="utf-8")
        self._assign(entered)