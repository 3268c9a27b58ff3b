"""
Logging setup.

Everything goes to stdout; gunicorn / uvicorn and the hosting platform
collect it from there. Modules log through `logging.getLogger(__name__)`,
so every logger lives under the `devflow` namespace.
"""
import logging
import sys
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stdout handler to the `devflow` logger (idempotent)."""
    from devflow.core.config import settings

    logger = logging.getLogger("devflow")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_devflow", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._devflow = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
