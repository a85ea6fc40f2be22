"""Open an SSH session and run the post-connect automation beside it."""

import logging
import subprocess
import sys
from pathlib import Path

from sshmgr.config import Settings
from sshmgr.inventory import Record, field

logger = logging.getLogger(__name__)


def ssh_command(record: Record, proxied: bool = False, ssh: list[str] | None = None,
                proxy: list[str] | None = None) -> list[str]:
    cmd = list(ssh or ["ssh"]) + [
        "-p", field(record, "port"),
        f"{field(record, 'user')}@{field(record, 'address')}",
    ]
    if proxied:
        cmd = list(proxy or ["proxychains"]) + cmd
    return cmd


def automation_command(name: str, inventory: str | Path, config_path: str | Path | None = None) -> list[str]:
    """Command line that re-enters the CLI to run the post-connect sequence for *name*.

    Only the server name travels on the command line; the child reads the
    credential from the inventory itself.
    """
    cmd = [sys.executable, "-m", "sshmgr", "--inventory", str(inventory)]
    if config_path:
        cmd += ["--config", str(config_path)]
    return cmd + ["--post-connect", name]


def start_automation(cmd: list[str]) -> subprocess.Popen:
    """Start the post-connect sequence in its own session.

    It races the ssh session and keeps running after this process exits;
    the fixed delays inside the engine are the only pacing.
    """
    logger.debug("Starting post-connect automation: %s", " ".join(cmd))
    return subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def connect(record: Record, settings: Settings, proxied: bool = False,
            config_path: str | Path | None = None) -> int:
    """Start the automation, then block on ssh. Returns ssh's exit code."""
    cmd = ssh_command(record, proxied, settings.ssh_command, settings.proxy_command)
    start_automation(automation_command(record.name, settings.inventory, config_path))
    logger.debug("Running %s", " ".join(cmd))
    return subprocess.run(cmd).returncode
