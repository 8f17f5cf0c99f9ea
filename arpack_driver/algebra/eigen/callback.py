"""
Callback Adapter

Wraps the caller's operator application so the driver can serve a
`RequestMatVec` with one call. Two conventions are accepted:

    matvec(x)       -> y        returns a new vector
    matvec(x, out)  -> None     writes into `out`

The input view is read-only and, like the output view, only valid during the
call.
"""

import inspect
from typing import Callable, Optional, Type

import numpy as np
from numpy.typing import NDArray

from ..utils import MACHINE_EPS
from .errors import ArpackError, ArpackErrorMsg
from .protocol import RequestMatVec

# ----------------------------------------------------------------------------------------

MatVecFunc = Callable[..., Optional[NDArray]]

# imaginary round-off tolerated in a real solve, relative to the largest |y_i|
IMAG_RTOL  = 1e4 * MACHINE_EPS

def _takes_output(func: Callable) -> bool:
    '''
    True when the callable has two required positional parameters.
    '''
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    positional = [
        p for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    ]
    return len(positional) >= 2

class MatVecAdapter:
    '''
    Operator application served from the solver's scratch buffer.

    Args:
        matvec:
            The operator, in one of the two conventions above.
        n:
            Dimension of the operator.
        dtype:
            Scalar type of the solve.
        inplace:
            Force the `matvec(x, out)` convention (True) or the returning one
            (False). Detected from the signature when None.
    '''

    def __init__(self, matvec: MatVecFunc, n: int, dtype: Type, inplace: Optional[bool] = None):
        if not callable(matvec):
            raise TypeError(f"matvec must be callable, got {type(matvec).__name__}")
        self.matvec     = matvec
        self.n          = n
        self.dtype      = np.dtype(dtype)
        self.inplace    = _takes_output(matvec) if inplace is None else bool(inplace)
        self.calls      = 0

    def __call__(self, workd: NDArray, request: RequestMatVec) -> None:
        x                   = workd[request.source]
        x.flags.writeable   = False
        out                 = workd[request.target]

        if self.inplace:
            self.matvec(x, out)
        else:
            y = self.matvec(x)
            self._store(y, out)
        self.calls += 1

    def _store(self, y, out: NDArray) -> None:
        y = np.asarray(y)
        if y.shape != (self.n,):
            # column vectors, e.g. from scipy sparse matrices
            if y.ndim != 2 or y.size != self.n:
                raise ArpackError(ArpackErrorMsg.DIM_MISMATCH,
                    f"matvec returned shape {y.shape}, expected ({self.n},)")
            y = y.reshape(self.n)
        if np.iscomplexobj(y) and not np.iscomplexobj(out):
            if np.max(np.abs(y.imag), initial=0.0) > IMAG_RTOL * np.max(np.abs(y), initial=0.0):
                raise ArpackError(ArpackErrorMsg.DTYPE_MISMATCH,
                    "matvec returned complex values for a real symmetric solve")
            y = y.real
        out[:] = y

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
