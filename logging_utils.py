"""Logging setup for bwtool.

Diagnostics (chosen cutoffs, iteration counts, decode failures) go to
stderr so that ``--json`` reports on stdout stay machine-readable.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

LOG_LEVEL_CHOICES: Iterable[str] = tuple(LOG_LEVELS.keys())

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Levels reached by -qq, -q, nothing and -v; further -v or -q flags clamp
VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG)
DEFAULT_VERBOSITY = VERBOSITY_LEVELS.index(logging.INFO)

# Pillow logs every PNG chunk at DEBUG
NOISY_LOGGERS = ("PIL",)


def add_logging_args(parser) -> None:
    """Add --log-level, -v and -q to the bwtool argument parser."""
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Diagnostic verbosity on stderr (overrides -v/-q)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Trace cutoffs and objective values of each selector",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="count",
        default=0,
        help="Only report warnings such as non-convergence (-qq for errors only)",
    )


def resolve_log_level(
    log_level: str | None = None,
    verbose: int = 0,
    quiet: int = 0,
) -> int:
    """Map --log-level, or else the -v/-q counts, to a numeric log level."""
    if log_level:
        return LOG_LEVELS[log_level.lower()]

    index = DEFAULT_VERBOSITY + verbose - quiet
    index = min(max(index, 0), len(VERBOSITY_LEVELS) - 1)
    return VERBOSITY_LEVELS[index]


def configure_logging(
    log_level: str | None = None,
    verbose: int = 0,
    quiet: int = 0,
) -> int:
    """Configure root logging on stderr and return the active level.

    Calling it again (tests, repeated ``main()`` calls) only adjusts the
    level of the existing handlers. Loggers in NOISY_LOGGERS never go below
    INFO, even with ``-v``.
    """
    level = resolve_log_level(log_level=log_level, verbose=verbose, quiet=quiet)
    root_logger = logging.getLogger()

    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
    else:
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt="%H:%M:%S",
            stream=sys.stderr,
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    return level
