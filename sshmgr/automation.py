"""Post-connect conveniences, typed into the focused window with xdotool."""

import logging
import subprocess
import time
from collections.abc import Callable

from sshmgr.selector import Picker

logger = logging.getLogger(__name__)

PROMPT_COLORS = {
    "Red": "31",
    "Green": "32",
    "Yellow": "33",
    "Blue": "34",
    "Magenta": "35",
    "Cyan": "36",
    "White": "37",
}

KEY_DELAY = 0.1
SUDO_DELAY = 0.5
SUPERUSER_COMMAND = "sudo su"
CLEAR_COMMAND = "clear -x"


def prompt_command(color: str) -> str:
    """Return the PS1 assignment for *color*, which must be a PROMPT_COLORS key."""
    code = PROMPT_COLORS[color]
    return f"export PS1='\\e[1;{code}m\\u@\\h\\e[0m \\w\\n$ '"


class Keyboard:
    """Thin xdotool wrapper. Fire and forget; output is not inspected."""

    def __init__(self, command: list[str] | None = None):
        self.command = list(command or ["xdotool"])

    def type(self, text: str) -> None:
        subprocess.run(self.command + ["type", "--", text])

    def key(self, name: str) -> None:
        subprocess.run(self.command + ["key", name])


class AutomationEngine:
    """The four keystroke actions.

    Each action returns True once its keystrokes were sent and False when
    the operator declined. ``confirm`` is any callable that takes a prompt
    and answers yes or no.
    """

    def __init__(
        self,
        keyboard: Keyboard,
        confirm: Callable[[str], bool],
        color_picker: Picker | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.keyboard = keyboard
        self.confirm = confirm
        self.color_picker = color_picker
        self.sleep = sleep

    def _enter(self, text: str, delay: float = 0) -> None:
        self.keyboard.type(text)
        if delay:
            self.sleep(delay)
        self.keyboard.key("Return")

    def type_credential(self, secret: str) -> bool:
        if not self.confirm("Auto type password?"):
            return False
        self._enter(secret)
        return True

    def escalate_privilege(self, secret: str) -> bool:
        if not self.confirm("Escalate to super user?"):
            return False
        self._enter(SUPERUSER_COMMAND, KEY_DELAY)
        self.sleep(SUDO_DELAY)
        self._enter(secret, KEY_DELAY)
        return True

    def recolor_prompt(self, color: str | None = None) -> bool:
        if not color:
            if self.color_picker is None:
                return False
            picks = self.color_picker.choose(PROMPT_COLORS, prompt="Pick a prompt color:")
            # dmenu accepts typed text, so the answer may be off-palette
            if not picks or picks[0] not in PROMPT_COLORS:
                return False
            color = picks[0]
        logger.debug("Recoloring prompt to %s", color)
        self._enter(prompt_command(color), KEY_DELAY)
        return True

    def clear_screen(self) -> bool:
        self._enter(CLEAR_COMMAND, KEY_DELAY)
        return True

    def post_connect(self, secret: str) -> bool:
        """Log in, become root, paint the prompt white and clear the screen.

        Stops at the first declined step.
        """
        if not self.type_credential(secret):
            return False
        if not self.escalate_privilege(secret):
            return False
        self.sleep(KEY_DELAY)
        self.recolor_prompt("White")
        self.sleep(KEY_DELAY)
        return self.clear_screen()
