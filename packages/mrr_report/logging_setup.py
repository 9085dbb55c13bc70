"""Logging for ``mrr_report``.

Every module logs under the ``"mrr_report"`` hierarchy through
:func:`get_logger` and never installs handlers of its own. Until
:func:`configure_logging` runs, the package logger only carries a
``NullHandler``, so importing the library stays silent. The CLI configures
output once at startup; embedding applications can do the same or attach
their own handlers instead.

The level comes from ``MRR_REPORT_LOG_LEVEL`` (a name such as ``DEBUG`` or a
number such as ``10``) unless given explicitly.
"""

from __future__ import annotations

import logging
import os
import sys

_PKG_LOGGER_NAME = "mrr_report"
_LEVEL_ENV_VAR = "MRR_REPORT_LOG_LEVEL"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip().upper()
    if text.isdigit():
        return int(text)
    named = logging.getLevelNamesMapping().get(text)
    # Unrecognized names fall back to INFO.
    return named if named is not None else logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Send package log records to stderr at ``level``.

    Only the first call has an effect. ``level`` may be a number or a level
    name; when omitted, ``MRR_REPORT_LOG_LEVEL`` is consulted and INFO is the
    fallback.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Records stop at the package logger; the root logger never sees them.
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger called ``name`` (normally ``"mrr_report.<module>"``)."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


def reset_logging() -> None:
    """Return the package logger to its unconfigured state."""

    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _CONFIGURED = False
