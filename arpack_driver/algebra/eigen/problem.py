"""
Problem Descriptor

Describes one ARPACK solve: dimension, number of requested eigenpairs, Krylov
subspace size, iteration bound, selection criterion and scalar domain.

The sizing rules are checked here, before any buffer is sized from them:
    n       > 0
    nev     > 0
    ncv     - nev >= 2 and ncv <= n
    maxiter > 0
"""

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional, Type, Union

import numpy as np

from ..utils import DEFAULT_NP_FLOAT_TYPE, DEFAULT_NP_CPX_TYPE, resolve_tol
from .errors import (
    IllegalParameterError,
    MSG_N_POSITIVE, MSG_NEV_POSITIVE, MSG_NCV_RANGE, MSG_MAXITER,
)

# ----------------------------------------------------------------------------------------
#! Scalar domain
# ----------------------------------------------------------------------------------------

@unique
class ScalarDomain(Enum):
    '''
    Scalar field of the operator and the routine pair that serves it.
    '''
    REAL_SYMMETRIC  = 'd'   # dsaupd / dseupd
    COMPLEX_GENERAL = 'z'   # znaupd / zneupd

    @property
    def dtype(self) -> Type:
        return DEFAULT_NP_FLOAT_TYPE if self is ScalarDomain.REAL_SYMMETRIC else DEFAULT_NP_CPX_TYPE

    @property
    def is_complex(self) -> bool:
        return self is ScalarDomain.COMPLEX_GENERAL

    @classmethod
    def from_any(cls, value: Union['ScalarDomain', str]) -> 'ScalarDomain':
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        if key in ('real', 'symmetric', 'hermitian', 'float64'):
            return cls.REAL_SYMMETRIC
        if key in ('complex', 'general', 'complex128'):
            return cls.COMPLEX_GENERAL
        raise ValueError(f"Unknown scalar domain: {value!r}")

# ----------------------------------------------------------------------------------------
#! Selection criterion
# ----------------------------------------------------------------------------------------

@unique
class Which(Enum):
    '''
    Which part of the spectrum the solver targets.
    '''
    LARGEST_MAGNITUDE       = 'LM'
    SMALLEST_MAGNITUDE      = 'SM'
    LARGEST_REAL_PART       = 'LR'
    SMALLEST_REAL_PART      = 'SR'
    LARGEST_IMAGINARY_PART  = 'LI'
    SMALLEST_IMAGINARY_PART = 'SI'
    LARGEST_ALGEBRAIC       = 'LA'
    SMALLEST_ALGEBRAIC      = 'SA'

    @classmethod
    def from_any(cls, value: Union['Which', str]) -> 'Which':
        '''
        Accepts a member, its two-letter code or its name (case-insensitive).
        '''
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        for member in cls:
            if key in (member.value, member.name):
                return member
        raise ValueError(f"Invalid which={value!r}. Must be one of {[m.value for m in cls]}")

    def code_for(self, domain: ScalarDomain) -> str:
        '''
        Two-character code understood by the routines of the given domain.

        The symmetric routines know LM/SM/LA/SA, the complex ones
        LM/SM/LR/SR/LI/SI. Real and algebraic ordering coincide for real
        eigenvalues, so they are swapped as needed.
        '''
        if domain is ScalarDomain.REAL_SYMMETRIC:
            if self in (Which.LARGEST_IMAGINARY_PART, Which.SMALLEST_IMAGINARY_PART):
                raise IllegalParameterError(f"WHICH = '{self.value}' has no meaning for a real symmetric operator.")
            return {Which.LARGEST_REAL_PART: 'LA', Which.SMALLEST_REAL_PART: 'SA'}.get(self, self.value)
        return {Which.LARGEST_ALGEBRAIC: 'LR', Which.SMALLEST_ALGEBRAIC: 'SR'}.get(self, self.value)

# ----------------------------------------------------------------------------------------
#! Descriptor
# ----------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ArpackProblem:
    '''
    Parameters of a single solve.

    Attributes:
        n       : dimension of the operator
        nev     : number of requested eigenpairs
        ncv     : number of Lanczos/Arnoldi vectors
        maxiter : maximum number of restarts
        which   : selection criterion
        domain  : scalar domain
        tol     : convergence tolerance (machine epsilon by default)
    '''
    n       : int
    nev     : int
    ncv     : int
    maxiter : int
    which   : Which             = Which.LARGEST_MAGNITUDE
    domain  : ScalarDomain      = ScalarDomain.COMPLEX_GENERAL
    tol     : Optional[float]   = None

    def __post_init__(self):
        if self.tol is None:
            object.__setattr__(self, 'tol', resolve_tol(None))

    @classmethod
    def create(cls, n, nev, ncv, maxiter, which='LM', domain=ScalarDomain.COMPLEX_GENERAL, tol=None) -> 'ArpackProblem':
        '''
        Normalise loosely typed arguments and validate them.
        '''
        problem = cls(
            n       = _as_int(n, 'n'),
            nev     = _as_int(nev, 'nev'),
            ncv     = _as_int(ncv, 'ncv'),
            maxiter = _as_int(maxiter, 'maxiter'),
            which   = Which.from_any(which),
            domain  = ScalarDomain.from_any(domain),
            tol     = resolve_tol(tol),
        )
        problem.validate()
        return problem

    def validate(self) -> None:
        '''
        Raise IllegalParameterError with the solver's code if a sizing rule fails.
        '''
        if self.n <= 0:
            raise IllegalParameterError(MSG_N_POSITIVE, -1)
        if self.nev <= 0:
            raise IllegalParameterError(MSG_NEV_POSITIVE, -2)
        if self.ncv - self.nev < 2 or self.ncv > self.n:
            raise IllegalParameterError(MSG_NCV_RANGE, -3)
        if self.maxiter <= 0:
            raise IllegalParameterError(MSG_MAXITER, -4)
        # raises for LI/SI on the symmetric domain
        self.which.code_for(self.domain)

    @property
    def which_code(self) -> str:
        return self.which.code_for(self.domain)

    @property
    def dtype(self) -> Type:
        return self.domain.dtype

    @property
    def lworkl(self) -> int:
        return 3 * self.ncv ** 2 + 6 * self.ncv

def _as_int(value, name: str) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    return int(value)

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
