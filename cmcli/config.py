"""Persisted target configuration for cm-cli.

The configuration is a single JSON object stored in ~/.config/cm/config.json:
{
  "api-url": "https://credhub.example.com:8844",
  "auth-url": "https://uaa.example.com:8443",
  "auth-client-id": "credhub_cli"
}

The file is replaced atomically and is readable and writable by its owner only.
"""

import contextlib
import getpass
import json
import os
import stat
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, IO, Iterator, Optional

from .errors import ConfigError


@dataclass(frozen=True)
class TargetConfig:
    """The API the client currently operates against."""

    api_url: str
    auth_url: str
    auth_client_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert the target to a dictionary for serialization."""
        return {
            "api-url": self.api_url,
            "auth-url": self.auth_url,
            "auth-client-id": self.auth_client_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["TargetConfig"]:
        """Create a TargetConfig from a dictionary.

        Returns None when either URL is missing, so a partial record is never
        treated as a target.
        """
        api_url = data.get("api-url")
        auth_url = data.get("auth-url")
        if not isinstance(api_url, str) or not api_url:
            return None
        if not isinstance(auth_url, str) or not auth_url:
            return None
        client_id = data.get("auth-client-id")
        return cls(
            api_url=api_url,
            auth_url=auth_url,
            auth_client_id=client_id if isinstance(client_id, str) else "",
        )


def get_config_path() -> Path:
    """Get the path to the cm-cli configuration file."""
    # Support override via environment variable
    if "CM_CONFIG" in os.environ:
        return Path(os.environ["CM_CONFIG"])

    # Use XDG_CONFIG_HOME if set, otherwise use ~/.config
    if "XDG_CONFIG_HOME" in os.environ:
        config_dir = Path(os.environ["XDG_CONFIG_HOME"]) / "cm"
    else:
        config_dir = Path.home() / ".config" / "cm"

    return config_dir / "config.json"


def read_config() -> Optional[TargetConfig]:
    """Load the persisted target.

    Returns:
        The stored TargetConfig, or None if there is none or it cannot be read
    """
    config_path = get_config_path()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError):
        # Missing, unreadable or corrupted: behave as if unset
        return None

    if not isinstance(data, dict):
        return None
    return TargetConfig.from_dict(data)


def write_config(config: TargetConfig) -> None:
    """Replace the persisted target with ``config``.

    Args:
        config: The target to save

    Raises:
        ConfigError: If the file could not be written. The previous file, if
            any, is left as it was.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with _atomic_replace(config_path) as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except (OSError, subprocess.SubprocessError) as e:
        raise ConfigError(f"Failed to save configuration: {e}") from e


@contextlib.contextmanager
def _atomic_replace(path: Path) -> Iterator[IO[str]]:
    """Yield a temporary file that replaces ``path`` when the block succeeds.

    The temporary file lives next to ``path`` so the final rename stays on one
    filesystem. It is restricted to the owner before any content is written.
    """
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            restrict_to_owner(tmp_path)
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise


def restrict_to_owner(path: Path) -> None:
    """Make ``path`` readable and writable by the current user only.

    POSIX systems get mode 0600. Windows has no such bits, so inherited ACEs
    are removed and full control is granted to the current user alone.
    """
    if os.name == "nt":
        subprocess.run(  # noqa: S603,S607
            [
                "icacls",
                str(path),
                "/inheritance:r",
                "/grant:r",
                f"{getpass.getuser()}:F",
            ],
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return
    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)


def check_config_file_permissions() -> Optional[str]:
    """Check if config file has appropriate permissions.

    Returns a warning message if permissions are too open, None otherwise.
    """
    if os.name == "nt":
        return None

    config_path = get_config_path()
    if not config_path.exists():
        return None

    try:
        mode = config_path.stat().st_mode
        # Check if group or others have any permissions
        if mode & (stat.S_IRWXG | stat.S_IRWXO):
            return (
                f"Warning: Config file {config_path} has overly permissive permissions. "
                "Consider running: chmod 600 " + str(config_path)
            )
    except OSError:
        pass

    return None
