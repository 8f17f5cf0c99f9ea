"""
Serialization Guard

ARPACK keeps state in SAVE variables between calls, so only one solve may be
inside the protocol loop per process. `SolveGuard` is a lock with a re-entry
check: another thread blocks until the active solve releases it, a nested solve
on the same thread (e.g. started from inside the matvec callback) fails at once
instead of deadlocking.
"""

import threading
from typing import Optional

from .errors import ReentrantSolveError

# ----------------------------------------------------------------------------------------

class SolveGuard:
    '''
    Context manager granting exclusive access to the solver.

    Example:
        >>> guard = SolveGuard("busy")
        >>> with guard:
        ...     pass
    '''

    def __init__(self, message: str):
        self._rlock     = threading.RLock()
        self._entered   = False
        self._owner     : Optional[int] = None
        self._message   = message

    def __enter__(self):
        self._rlock.acquire()
        if self._entered:
            # same thread, RLock let us in
            self._rlock.release()
            raise ReentrantSolveError(self._message)
        self._entered   = True
        self._owner     = threading.get_ident()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._entered   = False
        self._owner     = None
        self._rlock.release()
        return False

    @property
    def active(self) -> bool:
        return self._entered

    @property
    def owner(self) -> Optional[int]:
        '''Thread identifier of the active solve, if any.'''
        return self._owner

# ----------------------------------------------------------------------------------------

_ARPACK_GUARD = SolveGuard("Nested solves are not allowed: ARPACK is not re-entrant.")

def solve_in_progress() -> bool:
    '''
    Whether some thread is currently inside a solve.
    '''
    return _ARPACK_GUARD.active

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
