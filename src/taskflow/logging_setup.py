# src/taskflow/logging_setup.py

"""
Logging for the taskflow console.

stderr carries taskflow's own records at the configured level and only
errors from everything else; the REPL shares stderr with these lines, so
SDK chatter would drown the prompt. The per-app log file under the data
directory keeps full DEBUG output, including every store mutation and the
raw text of unusable AI replies.
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Any

PACKAGE_LOGGER = "taskflow"

# The LLM request stack logs each HTTP exchange at INFO.
_QUIET_LIBRARIES = ("httpx", "httpcore", "openai")

_UNSAFE_FILE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class _ConsoleNoiseFilter(logging.Filter):
    """Pass taskflow records; everything else (py.warnings, SDKs) only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
            return True
        return record.levelno >= logging.ERROR


def resolve_level(raw: Any, default: int = logging.INFO) -> int:
    """'debug', 'WARNING', '10' or an int; anything unrecognised gives `default`."""
    if isinstance(raw, int):
        return raw
    text = str(raw or "").strip().upper()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text)
    return level if isinstance(level, int) else default


def log_file_name(app_name: str) -> str:
    stem = _UNSAFE_FILE_CHARS.sub("_", (app_name or "").strip()).strip("._")
    return f"{stem or PACKAGE_LOGGER}.log"


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskflow",
    app_name: str = PACKAGE_LOGGER,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console and file handlers on the root logger and return the
    log file path. Call once, before the first record is emitted; handlers
    from an earlier call are replaced, not stacked.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name(app_name)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    # warnings.warn(...) -> 'py.warnings'
    logging.captureWarnings(True)
    return log_file


def setup_logging_from_settings(settings: Any) -> Path:
    """Console level from `log_level`, file `<app_name>.log` under `data_dir`."""
    return setup_logging(
        log_dir=getattr(settings, "data_dir", ".local/taskflow"),
        app_name=str(getattr(settings, "app_name", PACKAGE_LOGGER)),
        console_level=resolve_level(getattr(settings, "log_level", "INFO")),
    )
