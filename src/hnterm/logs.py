"""Logging setup — rich console handler, or a log file while the TUI owns the screen."""

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_level(verbose: bool = False) -> int:
    """DEBUG with --verbose, else $HNTERM_LOG, else WARNING."""
    if verbose:
        return logging.DEBUG
    name = os.environ.get("HNTERM_LOG", "").upper()
    level = logging.getLevelName(name) if name else logging.WARNING
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(
    verbose: bool = False,
    log_file: str | None = None,
    to_file: bool = False,
) -> logging.Handler:
    """Attach a single handler to the hnterm logger and return it."""
    root = logging.getLogger("hnterm")
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    if to_file and log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=True
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root.addHandler(handler)
    root.setLevel(resolve_level(verbose))
    root.propagate = False
    return handler
