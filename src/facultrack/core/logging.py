"""Logging setup shared by the API process and the sweep job."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: str = "INFO") -> None:
    """Install a single console handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """

    root = logging.getLogger()
    root.setLevel(_LEVELS.get(level.upper(), logging.INFO))

    if any(getattr(handler, "_facultrack", False) for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._facultrack = True  # type: ignore[attr-defined]
    root.addHandler(handler)
