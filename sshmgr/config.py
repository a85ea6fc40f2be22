"""Runtime settings for sshmgr.

Settings come from an optional YAML file. Every key is optional; anything
left out keeps the default below.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import click
import yaml

# ---------------------------------------------------------------------------
# Constants / paths
# ---------------------------------------------------------------------------

CONFIG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "sshmgr"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
SERVERS_CSV = CONFIG_DIR / "servers.csv"

CLIPBOARD_TIMEOUT = 10


class ConfigError(click.ClickException):
    """Raised when the settings file cannot be used."""


@dataclass
class Settings:
    inventory: Path = SERVERS_CSV
    ssh_command: list[str] = field(default_factory=lambda: ["ssh"])
    proxy_command: list[str] = field(default_factory=lambda: ["proxychains"])
    picker_command: list[str] = field(default_factory=lambda: ["fzf"])
    menu_command: list[str] = field(default_factory=lambda: ["dmenu"])
    xdotool_command: list[str] = field(default_factory=lambda: ["xdotool"])
    clipboard_timeout: int = CLIPBOARD_TIMEOUT


def _as_command(key: str, value) -> list[str]:
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings")


def load_settings(path: str | Path | None = None, inventory: str | Path | None = None) -> Settings:
    """Build Settings from *path* (or $SSHMGR_CONFIG, or the default file).

    The inventory location is resolved last: *inventory* beats
    $SSHMGR_INVENTORY, which beats the settings file.
    """
    explicit = path is not None or "SSHMGR_CONFIG" in os.environ
    config_path = Path(path or os.environ.get("SSHMGR_CONFIG", CONFIG_FILE)).expanduser()

    settings = Settings()
    if config_path.is_file():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse {config_path}: {exc}")
        _apply(settings, data, config_path)
    elif explicit:
        raise ConfigError(f"Settings file not found: {config_path}")

    env_inventory = os.environ.get("SSHMGR_INVENTORY")
    if inventory:
        settings.inventory = Path(inventory).expanduser()
    elif env_inventory:
        settings.inventory = Path(env_inventory).expanduser()

    return settings


def _apply(settings: Settings, data, source: Path) -> None:
    if not isinstance(data, dict):
        raise ConfigError(f"{source} must contain a mapping")

    known = {f.name for f in fields(Settings)}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"Unknown setting '{key}' in {source}")
        if key == "inventory":
            settings.inventory = Path(str(value)).expanduser()
        elif key == "clipboard_timeout":
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError("'clipboard_timeout' must be a non-negative integer")
            settings.clipboard_timeout = value
        else:
            setattr(settings, key, _as_command(key, value))
