# file        :   arpack_driver/algebra/utils.py

'''
Configuration of the ARPACK driver.

All settings are read once from the environment when the module is imported
and exposed as module constants:

- ARPACK_LIBRARY:
    Path (or name) of the shared ARPACK-NG library. When unset the library is
    located with `ctypes.util.find_library('arpack')`.
- ARPACK_ILP64:
    Set to '1' when the library was built with 64-bit integers.
- ARPACK_TOL:
    Convergence tolerance handed to the solver. Defaults to the machine epsilon
    of float64.

It also defines the array types used by each scalar domain.
'''

import os
from typing import Optional, Type

import numpy as np

# ---------------------------------------------------------------------
#! Environment variable names
# ---------------------------------------------------------------------

ARPACK_LIBRARY_STR      : str               = "ARPACK_LIBRARY"
ARPACK_ILP64_STR        : str               = "ARPACK_ILP64"
ARPACK_TOL_STR          : str               = "ARPACK_TOL"

# ---------------------------------------------------------------------
#! Defaults
# ---------------------------------------------------------------------

DEFAULT_NP_INT_TYPE     : Type              = np.int32
DEFAULT_NP_ILP64_TYPE   : Type              = np.int64
DEFAULT_NP_FLOAT_TYPE   : Type              = np.float64
DEFAULT_NP_CPX_TYPE     : Type              = np.complex128
MACHINE_EPS             : float             = float(np.finfo(DEFAULT_NP_FLOAT_TYPE).eps)

# ---------------------------------------------------------------------
#! Values read from the environment
# ---------------------------------------------------------------------

def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")

def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a floating point number, got {raw!r}") from e

ARPACK_LIBRARY          : Optional[str]     = os.environ.get(ARPACK_LIBRARY_STR) or None
ARPACK_ILP64            : bool              = _env_flag(ARPACK_ILP64_STR)
DEFAULT_TOL             : float             = _env_float(ARPACK_TOL_STR, MACHINE_EPS)

def arpack_int_type(ilp64: Optional[bool] = None) -> Type:
    '''
    Integer type of the control arrays for the configured library.
    '''
    ilp64 = ARPACK_ILP64 if ilp64 is None else ilp64
    return DEFAULT_NP_ILP64_TYPE if ilp64 else DEFAULT_NP_INT_TYPE

def resolve_tol(tol: Optional[float]) -> float:
    '''
    Per-call tolerance, falling back to the configured default.
    '''
    return DEFAULT_TOL if tol is None else float(tol)

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
