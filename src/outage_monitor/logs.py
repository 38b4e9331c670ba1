from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from . import config


def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
):
    """Route log records to the terminal through rich, and optionally a file."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    root.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            log_time_format=config.LOG_TIME_FORMAT,
        )
    )

    if log_file:
        maybe_rotate_log(log_file)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(message)s",
                datefmt=config.LOG_TIME_FORMAT,
            )
        )
        root.addHandler(file_handler)


def maybe_rotate_log(path: str, max_age_days: int = config.LOG_MAX_AGE_DAYS) -> Optional[str]:
    """Rename ``path`` aside if it was last modified more than ``max_age_days`` ago.

    Returns the new name when a rotation happened.
    """
    try:
        last_mod_time = os.path.getmtime(path)
    except FileNotFoundError:
        return None  # file doesn't exist yet, that's ok
    if time.time() - last_mod_time <= max_age_days * 24 * 60 * 60:
        return None
    new_name = path + "." + datetime.fromtimestamp(last_mod_time).strftime("%Y%m%d%H%M%S")
    os.rename(path, new_name)
    return new_name
