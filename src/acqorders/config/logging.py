"""Root logger setup for the ``acqorders`` command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send records at ``level`` and above to stderr.

    Does nothing when the root logger already has handlers, unless ``force``
    replaces them.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
