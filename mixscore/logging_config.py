"""Logging configuration for mixscore."""

import logging
import sys


def log_level(verbose: bool = False, quiet: bool = False) -> int:
    """Level for the CLI flags. --verbose wins over --quiet."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(verbose: bool = False, quiet: bool = False):
    """Configure root logging to stderr.

    Args:
        verbose: Enable debug logging (per-metric and per-category detail).
        quiet: Only show warnings, hiding applied-gate notices.
    """
    logging.basicConfig(
        level=log_level(verbose, quiet),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # rich's markup parser logs at debug level
    logging.getLogger("markdown_it").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger, typically get_logger(__name__)."""
    return logging.getLogger(name)
