"""Log handlers for the ``figma_intent`` package.

Every module logs through ``logging.getLogger(__name__)``, so all of them sit
under the ``figma_intent`` logger. An embedding host calls
get_pipeline_logger() once to route that whole tree to pipeline.log plus
the console; get_cache_logger() splits cache traffic into cache.log.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import LOG_DIR

FILE_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(name)s] %(message)s"

# Logger names that already carry our handlers
_configured_loggers: set[str] = set()


def setup_logger(
    name: str,
    filename: str,
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Attach a file and a console handler to a ``figma_intent.*`` logger.

    Handlers are attached on the first call per name only; later calls
    return the logger untouched. Propagation is switched off so records
    handled here are not repeated by the host's root handlers.

    Args:
        name: ``figma_intent`` or one of its children, e.g. ``figma_intent.cache``
        filename: File created under log_dir, e.g. 'pipeline.log'
        log_dir: Target directory (created if missing), LOG_DIR when omitted
        level: Applied to the logger and both handlers

    Returns:
        The configured logger
    """
    if name in _configured_loggers:
        return logging.getLogger(name)

    target_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    handlers = (
        (logging.FileHandler(target_dir / filename, encoding="utf-8"), FILE_FORMAT),
        (logging.StreamHandler(), CONSOLE_FORMAT),
    )
    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    _configured_loggers.add(name)
    return logger


def get_pipeline_logger(log_dir: Optional[Path] = None) -> logging.Logger:
    """Package-wide logger: traversal, normalization, inference and pipeline."""
    return setup_logger("figma_intent", "pipeline.log", log_dir=log_dir)


def get_cache_logger(log_dir: Optional[Path] = None) -> logging.Logger:
    """Cache hits, misses and evictions (``figma_intent.cache``)."""
    return setup_logger("figma_intent.cache", "cache.log", log_dir=log_dir)
