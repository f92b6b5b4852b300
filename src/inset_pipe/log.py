"""Console logging for the inset engine.

Engine modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves; the CLI (or the host application) calls
:func:`setup_logging` once.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import logging
import os
import time
from typing import Iterator

from rich.logging import RichHandler


LOG_LEVEL_ENV = "INSET_LOG_LEVEL"
_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def resolve_level(level: str | None = None) -> str:
    """Argument, then ``$INSET_LOG_LEVEL``, then ``INFO``. Unknown names fall back to ``INFO``."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    name = str(level).upper().strip()
    return name if name in _LEVELS else "INFO"


def setup_logging(level: str | None = None) -> None:
    """Install a single RichHandler on the root logger (idempotent)."""
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    logging.basicConfig(
        level=resolve_level(level),
        format="%(message)s",
        datefmt="[%H:%M:%S]",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                show_path=False,
                show_time=True,
            )
        ],
    )


@dataclass
class Timing:
    name: str
    elapsed: float = 0.0


@contextmanager
def timer(name: str, logger: logging.Logger | None = None) -> Iterator[Timing]:
    """Log how long a pipeline stage took.

    Example:
        with timer("resample", log) as t:
            ...
        t.elapsed  # seconds
    """
    logger = logger or logging.getLogger("inset_pipe")
    t = Timing(name)
    t0 = time.perf_counter()
    logger.debug("▶ %s…", name)
    try:
        yield t
    except BaseException as exc:
        t.elapsed = time.perf_counter() - t0
        logger.error("✗ %s FAILED (%.3f s): %s", name, t.elapsed, exc)
        raise
    t.elapsed = time.perf_counter() - t0
    logger.debug("✓ %s (%.3f s)", name, t.elapsed)
