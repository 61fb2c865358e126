"""
Colored console logging for LAN discovery runs.

Probe threads log concurrently, so every write goes through one module-level
lock. Loggers created without an explicit level follow the level set with
set_log_level(), which lets the CLI switch all components to DEBUG at once.
"""

import sys
import threading
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple
from colorama import Fore, Style, init

init(autoreset=True)

_output_lock = threading.Lock()


class LogLevel(Enum):
    """Log levels in increasing severity."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {LogLevel.DEBUG: 0, LogLevel.INFO: 1, LogLevel.WARNING: 2, LogLevel.ERROR: 3}

# label -> (color, symbol)
_LABEL_STYLES = {
    "DEBUG": (Fore.CYAN, "🔍"),
    "INFO": (Fore.GREEN, "ℹ️"),
    "WARNING": (Fore.YELLOW, "⚠️"),
    "ERROR": (Fore.RED, "❌"),
    "SUCCESS": (Fore.GREEN, "✅"),
    "SCAN": (Fore.BLUE, "⏳"),
}

_global_level = [LogLevel.INFO]

BAR_WIDTH = 20


def _details(kwargs) -> str:
    if not kwargs:
        return ""
    pairs = " | ".join(f"{key}={value}" for key, value in kwargs.items())
    return f" {Style.DIM}({pairs}){Style.RESET_ALL}"


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """Render a fixed width text bar, e.g. ``[#####---------------]``."""
    fraction = min(max(fraction, 0.0), 1.0)
    filled = int(round(fraction * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


class Logger:
    """
    Console logger with colored levels, section headers, a scan progress
    line and fixed-width host tables.

    Messages accept keyword context that is rendered as ``key=value`` pairs
    after the text. ERROR lines go to stderr, everything else to stdout.
    """

    def __init__(self, name: str = "LanDiscovery", min_level: Optional[LogLevel] = None):
        self.name = name
        self._min_level = min_level
        self._last_progress_step = -1

    @property
    def min_level(self) -> LogLevel:
        return self._min_level if self._min_level is not None else _global_level[0]

    @min_level.setter
    def min_level(self, level: LogLevel) -> None:
        self._min_level = level

    def enabled_for(self, level: LogLevel) -> bool:
        return level.rank >= self.min_level.rank

    def _emit(self, text: str, stream=None) -> None:
        with _output_lock:
            print(text, file=stream or sys.stdout, flush=True)

    def _line(self, label: str, message: str, kwargs=None, bright: bool = False) -> str:
        color, symbol = _LABEL_STYLES[label]
        timestamp = datetime.now().strftime("%H:%M:%S")
        body = f"{Style.BRIGHT}{message}{Style.RESET_ALL}" if bright else message
        return (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{color}{symbol} {label:<7}{Style.RESET_ALL} {body}{_details(kwargs)}"
        )

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        if not self.enabled_for(level):
            return
        stream = sys.stderr if level is LogLevel.ERROR else sys.stdout
        self._emit(self._line(level.value, message, kwargs), stream)

    def debug(self, message: str, **kwargs) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        """
        Log an error, appending ``ExceptionType: text`` when an exception is given.
        """
        if exception is not None:
            kwargs["exception"] = f"{type(exception).__name__}: {exception}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log a highlighted completion message at INFO level."""
        if self.enabled_for(LogLevel.INFO):
            self._emit(self._line("SUCCESS", message, kwargs, bright=True))

    def section(self, title: str) -> None:
        if not self.enabled_for(LogLevel.INFO):
            return
        rule = "=" * 60
        self._emit(f"\n{Fore.BLUE}{Style.BRIGHT}{rule}\n  {title.upper()}\n{rule}{Style.RESET_ALL}\n")

    def scan_progress(self, fraction: float, phase: str, hosts: int, step: float = 0.1) -> None:
        """
        Print a progress line each time the scan crosses another ``step``.

        Repeated calls inside the same step are ignored, so this can be wired
        straight to a session listener that fires on every merge.
        """
        current = int(fraction / step)
        if current <= self._last_progress_step or not self.enabled_for(LogLevel.INFO):
            return
        self._last_progress_step = current
        self._emit(self._line("SCAN", f"{progress_bar(fraction)} {fraction:4.0%} {phase} - {hosts} hosts"))

    def reset_progress(self) -> None:
        self._last_progress_step = -1

    def key_values(self, title: str, rows: Iterable[Tuple[str, object]]) -> None:
        """Print an aligned ``label: value`` block under a title."""
        if not self.enabled_for(LogLevel.INFO):
            return
        rows = list(rows)
        pad = max((len(label) for label, _ in rows), default=0) + 1
        lines = [f"\n{Fore.CYAN}{Style.BRIGHT}{title}{Style.RESET_ALL}"]
        for label, value in rows:
            lines.append(f"  {label + ':':<{pad}} {Style.BRIGHT}{value}{Style.RESET_ALL}")
        self._emit("\n".join(lines) + "\n")

    def table_header(self, headers: Sequence[str], widths: Sequence[int]) -> None:
        if not self.enabled_for(LogLevel.INFO):
            return
        header = " | ".join(f"{name:<{width}}" for name, width in zip(headers, widths))
        rule = "-+-".join("-" * width for width in widths)
        self._emit(f"{Style.BRIGHT}{header}{Style.RESET_ALL}\n{Style.DIM}{rule}{Style.RESET_ALL}")

    def table_row(self, values: List[str], widths: Sequence[int], highlight: bool = False) -> None:
        """Print one row; values longer than their column are cut."""
        if not self.enabled_for(LogLevel.INFO):
            return
        row = " | ".join(f"{str(value)[:width]:<{width}}" for value, width in zip(values, widths))
        self._emit(f"{Style.BRIGHT}{row}{Style.RESET_ALL}" if highlight else row)


logger = Logger()


def set_log_level(level: LogLevel) -> None:
    """Set the level followed by every logger without an explicit one."""
    _global_level[0] = level


def get_logger(name: str = "LanDiscovery") -> Logger:
    return Logger(name)
