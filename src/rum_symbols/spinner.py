from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.status import Status


class Spinner:
    """Progress spinner on stderr.

    Log output written through a ``rich`` console while the spinner runs is
    printed above it, so logging does not need to pause the spinner.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)
        self._status: Optional[Status] = None

    def start(self, text: str = "") -> None:
        if self._status is None:
            self._status = self.console.status(text, spinner="dots", spinner_style="cyan")
            self._status.start()
        else:
            self._status.update(text)

    def update_text(self, text: str) -> None:
        if self._status is not None:
            self._status.update(text)

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
