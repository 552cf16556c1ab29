"""Clipboard strategies for the CLI copy command.

Strategies are tried in order until one succeeds. The last resort prints the
document and asks the user to copy it by hand.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

import typer

logger = logging.getLogger(__name__)

MANUAL_COPY_MESSAGE = "Clipboard unavailable. Select the output above and copy it manually."
COPY_FAILED_MESSAGE = "Copy failed. You can manually select the text and copy."

CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


@dataclass(frozen=True)
class CopyOutcome:
    status: str
    message: str
    strategy: Optional[str] = None

    @property
    def copied(self) -> bool:
        return self.status == "copied"


class ClipboardStrategy(Protocol):
    name: str

    def write_text(self, text: str) -> bool:
        ...


class CommandClipboard:
    """Pipe text into a platform clipboard command if it is installed."""

    def __init__(
        self,
        command: Sequence[str],
        which: Callable[[str], Optional[str]] = shutil.which,
        timeout: float = 5.0,
    ) -> None:
        self.command = tuple(command)
        self.name = self.command[0]
        self._which = which
        self._timeout = timeout

    def write_text(self, text: str) -> bool:
        executable = self._which(self.command[0])
        if executable is None:
            return False
        try:
            subprocess.run(
                [executable, *self.command[1:]],
                input=text,
                text=True,
                check=True,
                capture_output=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Clipboard command failed: %s", exc, extra={"strategy": self.name})
            return False
        return True


class ManualCopy:
    """Print the document so the user can select and copy it."""

    name = "manual"

    def __init__(self, echo: Callable[[str], None] = typer.echo) -> None:
        self._echo = echo

    def write_text(self, text: str) -> bool:
        self._echo(text)
        return True


def default_strategies() -> list[ClipboardStrategy]:
    return [CommandClipboard(command) for command in CLIPBOARD_COMMANDS]


def copy_text(
    text: str,
    strategies: Optional[Sequence[ClipboardStrategy]] = None,
    fallback: Optional[ClipboardStrategy] = None,
) -> CopyOutcome:
    """Copy ``text`` with the first working strategy, falling back to manual copy."""
    for strategy in strategies if strategies is not None else default_strategies():
        if strategy.write_text(text):
            logger.info("Copied export to clipboard", extra={"strategy": strategy.name})
            return CopyOutcome(status="copied", message="Copied!", strategy=strategy.name)

    manual = fallback or ManualCopy()
    try:
        if manual.write_text(text):
            return CopyOutcome(status="manual", message=MANUAL_COPY_MESSAGE, strategy=manual.name)
    except OSError as exc:
        logger.warning("Manual copy fallback failed: %s", exc, extra={"strategy": manual.name})
    return CopyOutcome(status="failed", message=COPY_FAILED_MESSAGE)
