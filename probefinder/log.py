import logging
import sys
from typing import List, Optional, TextIO

from wcwidth import wcswidth

ROOT_LOGGER = "probefinder"
BANNER_WIDTH = 50

RESET = "\033[0m"
BOLD = "\033[1m"

# level -> (colour, icon)
LEVEL_STYLES = {
    "DEBUG": ("\033[36m", "🔍"),
    "INFO": ("\033[32m", "✅"),
    "WARNING": ("\033[33m", "⚠️ "),
    "ERROR": ("\033[31m", "❌"),
    "CRITICAL": ("\033[35m", "🔥"),
}


class PrettyFormatter(logging.Formatter):
    """Coloured, icon-prefixed console lines tagged with the emitting module."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{RESET}" if self.use_color else text

    def format(self, record):
        color, icon = LEVEL_STYLES.get(record.levelname, (RESET, ""))
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        # probefinder.indexing -> indexing
        source = record.name.split(".", 1)[1] if record.name.startswith(ROOT_LOGGER + ".") \
            else record.name
        formatted = (
            f"{self._paint(BOLD, f'[{timestamp}]')} "
            f"{self._paint(color, f'{icon} {record.levelname:<8}')} │ "
            f"{source}: {record.getMessage()}"
        )
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def setup_logging(level: int = logging.INFO, name: str = ROOT_LOGGER) -> logging.Logger:
    """Attach the pretty console handler to the *name* logger (once)."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(getattr(h, "_probefinder", False) for h in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(PrettyFormatter(use_color=sys.stdout.isatty()))
        console_handler._probefinder = True
        logger.addHandler(console_handler)
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


# ---------- console banners (plain prints, not log records) ---------- #

def _emit(text: str, stream: Optional[TextIO] = None) -> None:
    print(text, file=stream or sys.stdout)


def _center_display(s: str, target_cols: int) -> str:
    """Center using terminal display width (handles emoji/double-width chars)."""
    w = wcswidth(s)
    if w < 0:
        w = len(s)
    if w >= target_cols:
        return s
    left = (target_cols - w) // 2
    return " " * left + s + " " * (target_cols - w - left)


def banner_lines(title: str, width: int = BANNER_WIDTH) -> List[str]:
    border = "═" * width
    return [
        f"╔{border}╗",
        f"║ {_center_display(title, width - 2)} ║",
        f"╚{border}╝",
    ]


def log_section(title: str, width: int = BANNER_WIDTH, stream: Optional[TextIO] = None):
    """Print a boxed section header."""
    _emit("", stream)
    for line in banner_lines(title, width):
        _emit(f"\033[1;34m{line}{RESET}", stream)
    _emit("", stream)


def log_step(step_num: int, description: str, stream: Optional[TextIO] = None):
    _emit(f"  \033[1;36m[Step {step_num}]{RESET} ➜  {description}", stream)


def log_success(message: str, stream: Optional[TextIO] = None):
    _emit(f"  \033[1;32m✓{RESET} {message}", stream)


def log_detail(key: str, value, stream: Optional[TextIO] = None):
    _emit(f"      \033[90m•{RESET} {key}: {BOLD}{value}{RESET}", stream)


def log_match(title: Optional[str], match_rate: float, votes: int,
              offset_seconds: Optional[float], stream: Optional[TextIO] = None):
    """Print a recognition outcome: the winner's details, or a no-match line."""
    if not title:
        _emit(f"  \033[1;31m✗{RESET} No match found", stream)
        return
    log_success(f"Match found: {title}", stream)
    log_detail("Match rate", f"{match_rate:.2%}", stream)
    log_detail("Votes at best offset", votes, stream)
    if offset_seconds is not None:
        log_detail("Offset", f"{offset_seconds:.2f}s", stream)
