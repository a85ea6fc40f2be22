"""Clipboard copies, with a detached auto-clear for secrets."""

import logging
import subprocess
import sys
import time

import pyperclip

from sshmgr.config import CLIPBOARD_TIMEOUT

logger = logging.getLogger(__name__)


def copy_plain(value: str) -> None:
    pyperclip.copy(value.rstrip("\r\n"))


def copy_sensitive(value: str, delay: int = CLIPBOARD_TIMEOUT) -> subprocess.Popen:
    """Copy *value* and schedule a clear *delay* seconds from now.

    The clear runs in its own session so it still fires after this
    process has exited. Nothing keeps track of it afterwards.
    """
    copy_plain(value)
    return schedule_clear(delay)


def schedule_clear(delay: int) -> subprocess.Popen:
    cmd = [
        sys.executable,
        "-m",
        "sshmgr",
        "--clear-clipboard-after",
        str(delay),
    ]
    logger.debug("Scheduling clipboard clear in %ss", delay)
    return subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def clear_after(delay: float, sleep=time.sleep) -> None:
    """Body of the detached clear: wait, then empty the clipboard."""
    sleep(delay)
    pyperclip.copy("")
