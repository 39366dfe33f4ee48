"""
Process-wide logging setup.
"""

from __future__ import annotations

import logging

from . import config

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    root = logging.getLogger()
    root.setLevel(config.log_level())
    # uvicorn installs its own handlers; only add ours once.
    if any(getattr(h, "_beyou", False) for h in root.handlers):
        return None

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._beyou = True  # type: ignore[attr-defined]
    root.addHandler(handler)
