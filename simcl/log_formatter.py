import logging
import os
import sys


class LogFormatter(logging.Formatter):
    """Console formatter: bracketed, padded level tag, coloured on a TTY."""

    LEVEL_TAGS = {
        logging.DEBUG: ("DEBUG", "2"),
        logging.INFO: ("INFO", "36"),
        logging.WARNING: ("WARN", "33"),
        logging.ERROR: ("ERROR", "31"),
        logging.CRITICAL: ("FATAL", "1;31"),
    }

    def __init__(self, stream=None):
        super().__init__("%(message)s")
        self.stream = stream if stream is not None else sys.stderr

    def _supports_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _tag(self, levelno: int) -> str:
        label, color_code = self.LEVEL_TAGS.get(levelno, ("LOG", "0"))
        padded = f"[{label:<6}]"
        if not self._supports_color():
            return padded
        return f"\x1b[{color_code}m{padded}\x1b[0m"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return f"{self._tag(record.levelno)} {message}"
