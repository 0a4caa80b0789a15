'''
Process-wide initialization of optimizer and JIT-compiler logging.

SciPy reports optimizer trouble through ``OptimizeWarning`` and Numba logs
compilation details through the ``numba`` logger. Both are noisy inside the
inner loop of an estimator, so they are quieted once per process unless
``logging.solver_logging`` is enabled in the configuration. The call is
idempotent and thread-safe; every estimation routes through it before the
first optimizer run.
'''

import logging
import threading
import warnings
from typing import Optional

from scipy.optimize import OptimizeWarning

from .config import get_logging_config

logger = logging.getLogger("rarma.core.solver_logging")

_lock = threading.Lock()
_initialized = False


def initialize_solver_logging(enable: Optional[bool] = None) -> bool:
    """
    Configure optimizer logging once per process.

    Args:
        enable: Let optimizer and compiler messages through. ``None`` reads
            ``logging.solver_logging`` from the configuration.

    Returns:
        True if this call performed the initialization, False if it had
        already been done.
    """
    global _initialized

    if _initialized:
        return False

    with _lock:
        if _initialized:
            return False

        if enable is None:
            enable = get_logging_config().solver_logging

        if not enable:
            logging.getLogger("numba").setLevel(logging.WARNING)
            warnings.filterwarnings("ignore", category=OptimizeWarning)

        _initialized = True

    logger.debug(f"Solver logging initialized (enabled={enable})")
    return True


def is_solver_logging_initialized() -> bool:
    """Return whether ``initialize_solver_logging`` has run."""
    return _initialized


def reset_solver_logging() -> None:
    """Forget the initialization so the next call runs again (test helper)."""
    global _initialized
    with _lock:
        _initialized = False
