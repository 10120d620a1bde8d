"""
Beacon: Logging Setup

Process-wide logging for the planning engine and its scripts. Every
module obtains its logger through :func:`get_logger`, which guarantees
that handlers exist before the first record is emitted.

Key responsibilities:
- Attach a stderr console handler and an optional file handler to the
  root logger, once per process
- Apply the configured level to the root and ``beacon`` loggers
- Hand out loggers under the ``beacon`` namespace

External dependencies:
- logging: Python standard library logging framework

Thread safety: Thread-safe for emitting records; ``setup_logging`` is
meant to run once during start-up

Author: Beacon Team
Created: 2025-11-24
Last Modified: 2025-12-02
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

import logging
import sys
from typing import List, Optional

from beacon.core.config import BeaconConfig, get_config

# ============================================================================
# Constants
# ============================================================================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NAMESPACE = "beacon"

# ============================================================================
# Public API
# ============================================================================


def _build_handlers(config: BeaconConfig) -> List[logging.Handler]:
    # stdout is reserved for machine-readable CLI output.
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))
    return handlers


def setup_logging(config: Optional[BeaconConfig] = None) -> None:
    """Attach Beacon's handlers to the root logger.

    Calling this again once the root logger has handlers is a no-op, so
    library code may call it freely.

    Args:
        config: Settings providing ``log_level`` and ``log_file``. When
            omitted, :func:`get_config` supplies them. An empty
            ``log_file`` leaves the file handler out.
    """

    if config is None:
        config = get_config()
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    for handler in _build_handlers(config):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    root_logger.setLevel(level)
    logging.getLogger(_NAMESPACE).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``beacon`` namespace.

    ``get_logger(__name__)`` inside the package keeps the module path as
    is; any other name is prefixed, so ``"core.test"`` maps to
    ``"beacon.core.test"``.
    """

    setup_logging()
    if name == _NAMESPACE or name.startswith(_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_NAMESPACE}.{name}")
