"""
Workspace Manager

Owns every buffer of one solve. The arrays are laid out the way the Fortran
routines expect them (contiguous, column-major for matrices), zero-initialised,
mutated in place across iterations and dropped after extraction.

Sizes (n = dimension, ncv = subspace size):
    resid   : n
    v       : n x ncv
    iparam  : 11
    ipntr   : 14
    workd   : 3 n
    workl   : 3 ncv^2 + 6 ncv
    rwork   : ncv           (complex domain only)
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Type

import numpy as np
from numpy.typing import NDArray

from ..utils import DEFAULT_NP_INT_TYPE
from .problem import ArpackProblem

# ----------------------------------------------------------------------------------------

IPARAM_SIZE         = 11
IPNTR_SIZE          = 14

# slots of the control array (0-based)
IPARAM_ISHIFT       = 0 # 1 = exact shifts
IPARAM_MXITER       = 2 # in: maxiter, out: number of restarts taken
IPARAM_NCONV        = 4 # out: number of converged Ritz values
IPARAM_MODE         = 6 # 1 = standard problem, identity B

# reverse-communication token values
IDO_FIRST           = 0
IDO_DONE            = 99

# ----------------------------------------------------------------------------------------

class ExtractionBuffers(NamedTuple):
    '''
    Arrays handed to the backward (extraction) step.
    '''
    select  : NDArray               # ncv logical mask, unused with HOWMNY='A'
    d       : NDArray               # nev + 1 eigenvalues, last slot reserved
    z       : NDArray               # n x nev eigenvectors
    workev  : Optional[NDArray]     # 2 ncv, complex domain only

@dataclass
class Workspace:
    '''
    State of one reverse-communication loop.

    Attributes:
        problem : descriptor the buffers were sized from
        ido     : protocol token, mutated by the forward step
        info    : status code, mutated by both steps
    '''
    problem     : ArpackProblem
    resid       : NDArray
    v           : NDArray
    iparam      : NDArray
    ipntr       : NDArray
    workd       : NDArray
    workl       : NDArray
    rwork       : Optional[NDArray]
    ido         : int   = IDO_FIRST
    info        : int   = 0
    calls       : int   = field(default=0)

    @classmethod
    def allocate(cls, problem: ArpackProblem, int_dtype: Type = DEFAULT_NP_INT_TYPE) -> 'Workspace':
        '''
        Fresh, zero-initialised workspace for the problem (cold start).
        '''
        problem.validate()
        n, ncv  = problem.n, problem.ncv
        dtype   = problem.dtype

        iparam                  = np.zeros(IPARAM_SIZE, dtype=int_dtype)
        iparam[IPARAM_ISHIFT]   = 1
        iparam[IPARAM_MXITER]   = problem.maxiter
        iparam[IPARAM_MODE]     = 1

        return cls(
            problem = problem,
            resid   = np.zeros(n, dtype=dtype),
            v       = np.zeros((n, ncv), dtype=dtype, order='F'),
            iparam  = iparam,
            ipntr   = np.zeros(IPNTR_SIZE, dtype=int_dtype),
            workd   = np.zeros(3 * n, dtype=dtype),
            workl   = np.zeros(problem.lworkl, dtype=dtype),
            rwork   = np.zeros(ncv, dtype=np.float64) if problem.domain.is_complex else None,
        )

    # --------------------------------------------------------------------------------

    def extraction_buffers(self, int_dtype: Optional[Type] = None) -> ExtractionBuffers:
        '''
        Output arrays for the extraction step.
        '''
        p       = self.problem
        dtype   = p.dtype
        return ExtractionBuffers(
            select  = np.zeros(p.ncv, dtype=int_dtype or self.iparam.dtype),
            d       = np.zeros(p.nev + 1, dtype=dtype),
            z       = np.zeros((p.n, p.nev), dtype=dtype, order='F'),
            workev  = np.zeros(2 * p.ncv, dtype=dtype) if p.domain.is_complex else None,
        )

    # --------------------------------------------------------------------------------

    @property
    def n(self) -> int:
        return self.problem.n

    @property
    def iterations(self) -> int:
        '''Number of restarts reported by the solver (valid after the loop).'''
        return int(self.iparam[IPARAM_MXITER])

    @property
    def nconv(self) -> int:
        '''Number of converged Ritz values (valid after the loop).'''
        return int(self.iparam[IPARAM_NCONV])

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
