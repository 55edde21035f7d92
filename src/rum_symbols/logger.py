"""
Console logging.

Info messages go to stdout without decoration so they can be piped; errors,
warnings and debug output go to stderr with a coloured level prefix.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from rich.console import Console
from rich.text import Text

LOGGER_NAME = "rum_symbols"

_PREFIXES: Dict[int, Tuple[str, str]] = {
    logging.ERROR: ("ERROR ", "red"),
    logging.WARNING: ("WARN ", "yellow"),
    logging.DEBUG: ("DEBUG ", "bright_black"),
}


class RichConsoleHandler(logging.Handler):
    def __init__(
        self,
        stdout: Optional[Console] = None,
        stderr: Optional[Console] = None,
    ) -> None:
        super().__init__()
        self.stdout = stdout or Console(highlight=False, soft_wrap=True)
        self.stderr = stderr or Console(stderr=True, highlight=False, soft_wrap=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno == logging.INFO:
                self.stdout.print(Text(message))
                return
            if record.levelno >= logging.ERROR:
                prefix, style = _PREFIXES[logging.ERROR]
            else:
                prefix, style = _PREFIXES.get(record.levelno, ("", ""))
            line = Text(prefix, style=style)
            line.append(message)
            self.stderr.print(line)
        except Exception:
            self.handleError(record)


def create_logger(
    debug: bool = False,
    stdout: Optional[Console] = None,
    stderr: Optional[Console] = None,
) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichConsoleHandler(stdout=stdout, stderr=stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False
    return logger
