import logging
import sys
import os
from typing import Optional

import colorama
from colorama import Fore, Style


class ColoredFormatter(logging.Formatter):
    """
    Custom formatter to add colors to log levels for console output.
    INFO lines print as the bare message; other levels keep a `LEVEL:` prefix.
    """
    COLORS = {
        logging.DEBUG: Fore.BLUE,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def __init__(self, fmt: str = "%(message)s", use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color
        self._prefixed = logging.Formatter("%(levelname)s: " + fmt)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            result = super().format(record)
        else:
            result = self._prefixed.format(record)

        if not self.use_color:
            return result
        # Colour the rendered line only; the record is shared with the file handler.
        color = self.COLORS.get(record.levelno, "")
        return f"{color}{result}{Style.RESET_ALL}"


def setup_logging(
    console_level: int = logging.INFO,
    file_path: Optional[str] = None,
    file_level: int = logging.DEBUG,
    no_color: bool = False
) -> logging.Logger:
    """
    Sets up the root logger with:
    - Console handler (colored, formatting based on level)
    - Optional File handler (clean text, detailed format)
    """
    colorama.init(autoreset=True)

    # Check environment variable for color disable
    if os.environ.get("NO_COLOR"):
        no_color = True

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)  # Capture all, handlers filter

    # Remove existing handlers if any (to avoid duplicates on reload)
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)

    is_tty = sys.stdout.isatty() if hasattr(sys.stdout, "isatty") else False
    use_color = is_tty and not no_color

    console_handler.setFormatter(ColoredFormatter("%(message)s", use_color=use_color))
    logger.addHandler(console_handler)

    if file_path:
        file_handler = logging.FileHandler(file_path, mode='w', encoding='utf-8')
        file_handler.setLevel(file_level)
        # Detailed format for log file
        file_fmt = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(file_fmt)
        logger.addHandler(file_handler)

    return logger
