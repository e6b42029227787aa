"""
Run-command sub-mode state

Every submitted line runs as its own non-interactive ssh invocation
against the host chosen when the sub-mode was entered.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from ...core.constants import COMMAND_CHAR_LIMIT

NO_OUTPUT = "(no output) ..."


@dataclass
class RunCommandState:
    """Input line, transcript and scroll position of the run-command view"""
    host: str
    description: str = ""
    input: str = ""
    transcript: List[str] = field(default_factory=list)
    running: bool = False
    seq: int = 0
    scroll: int = 0  # lines scrolled up from the bottom
    page_size: int = 10

    # ------------------------------------------------------------
    # Input
    # ------------------------------------------------------------

    def type_text(self, text: str) -> None:
        if self.running:
            return
        room = COMMAND_CHAR_LIMIT - len(self.input)
        if room > 0:
            self.input += text[:room]

    def delete_char(self) -> None:
        if not self.running:
            self.input = self.input[:-1]

    def submit(self) -> str:
        """
        Take the input line as the next command.

        Returns:
            The command, or "" when there is nothing to run
        """
        if self.running:
            return ""
        command = self.input.strip()
        if not command:
            return ""
        self.input = ""
        self.seq += 1
        self.running = True
        self.append(f"$ {command}")
        return command

    # ------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------

    @property
    def lines(self) -> List[str]:
        out: List[str] = []
        for entry in self.transcript:
            out.extend(entry.rstrip("\n").split("\n"))
        return out

    def append(self, text: str) -> None:
        self.transcript.append(text)
        self.scroll = 0

    def finish(self, seq: int, output: str, error: Optional[str] = None) -> bool:
        """
        Record a command result.

        Results for anything but the current submission are stale (the
        command was cancelled) and are dropped.

        Returns:
            True if the result was recorded
        """
        if seq != self.seq or not self.running:
            return False
        if error:
            self.append(f"{error}\n{output}" if output else error)
        else:
            self.append(output if output else "")
        self.running = False
        return True

    def cancel(self) -> bool:
        """Mark the in-flight command cancelled; False when none was running"""
        if not self.running:
            self.append("[no running command to cancel]")
            return False
        self.running = False
        self.append("[command cancelled]")
        return True

    def clear(self) -> None:
        self.transcript = []
        self.scroll = 0

    # ------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------

    @property
    def max_scroll(self) -> int:
        return max(0, len(self.lines) - self.page_size)

    def scroll_up(self, steps: int = 1) -> None:
        self.scroll = min(self.max_scroll, self.scroll + steps)

    def scroll_down(self, steps: int = 1) -> None:
        self.scroll = max(0, self.scroll - steps)

    def window(self) -> List[str]:
        """Transcript lines visible at the current scroll position"""
        lines = self.lines
        if not lines:
            return [NO_OUTPUT]
        end = len(lines) - self.scroll
        start = max(0, end - self.page_size)
        return lines[start:end]

    @property
    def scroll_percent(self) -> float:
        if self.max_scroll == 0:
            return 1.0
        return 1.0 - self.scroll / self.max_scroll
