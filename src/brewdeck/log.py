"""Logging setup."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, log_path: Path | None = None) -> None:
    """Configure the brewdeck logger.

    One-shot commands log to stderr through rich. The interactive browser owns
    the terminal, so it logs to a file instead.
    """
    logger = logging.getLogger("brewdeck")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=verbose,
            show_path=False,
            markup=False,
        )
        handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    logger.addHandler(handler)
    logger.propagate = False
