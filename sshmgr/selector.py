"""Interactive pickers (fzf, dmenu) driven as subprocesses."""

import logging
import subprocess
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class Picker:
    """Feed options to an external menu program and read back the choice.

    Options go to the program's stdin, one per line. Whatever lines it
    prints are the picks. A non-zero exit (no match, Escape, Ctrl-C) is
    treated as a cancel and yields no picks.
    """

    def __init__(self, command: list[str], prompt_flag: str = "--prompt", multi_flag: str | None = "-m"):
        self.command = list(command)
        self.prompt_flag = prompt_flag
        self.multi_flag = multi_flag

    def choose(self, options: Iterable[str], prompt: str | None = None, multi: bool = False) -> list[str]:
        options = list(options)
        if not options:
            return []

        cmd = list(self.command)
        if multi and self.multi_flag:
            cmd.append(self.multi_flag)
        if prompt:
            cmd += [self.prompt_flag, prompt]

        result = subprocess.run(cmd, input="\n".join(options) + "\n", stdout=subprocess.PIPE, text=True)
        if result.returncode != 0:
            logger.debug("%s exited with %d, treating as cancel", cmd[0], result.returncode)
            return []
        return [line for line in result.stdout.splitlines() if line.strip()]


def fzf(command: list[str] | None = None) -> Picker:
    return Picker(command or ["fzf"])


def dmenu(command: list[str] | None = None) -> Picker:
    return Picker(command or ["dmenu"], prompt_flag="-p", multi_flag=None)


def select(names: Iterable[str], picker: Picker | None = None) -> str | None:
    """Let the operator pick one of *names*. None means nothing was picked."""
    picks = (picker or fzf()).choose(sorted(names))
    return picks[0] if picks else None


def menu_confirm(picker: Picker):
    """Build a confirm(prompt) -> bool callable on top of *picker*.

    Only "Cancel" or an empty answer declines; dmenu lets the operator
    type free text, and any other answer counts as a yes.
    """

    def confirm(prompt: str) -> bool:
        picks = picker.choose(["Confirm", "Cancel"], prompt=prompt)
        return bool(picks) and picks[0].strip().lower() != "cancel"

    return confirm
