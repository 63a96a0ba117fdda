"""Process-wide logging setup."""

from __future__ import annotations

import logging

_LOGGING_CONFIGURED = False


def configure_logging(level_name: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""

    global _LOGGING_CONFIGURED
    level = getattr(logging, level_name.upper(), logging.INFO)

    if _LOGGING_CONFIGURED:
        logging.getLogger().setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # passlib probes bcrypt's version attribute and logs a traceback when it is missing
    logging.getLogger("passlib").setLevel(logging.ERROR)
    _LOGGING_CONFIGURED = True
