from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Installs a single stderr handler on the package logger.

    stdout is reserved for the CLI's JSON results, so log lines never mix with them.
    Calling it again only updates the level.
    """
    root = logging.getLogger("parcel_labels")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_parcel_labels", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        handler._parcel_labels = True  # type: ignore[attr-defined]
        root.addHandler(handler)
