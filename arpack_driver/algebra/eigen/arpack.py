"""
ARPACK Eigenvalue Solver

Finds a few eigenvalues (and eigenvectors) of a large operator that is only
known through its action on a vector, using the implicitly restarted
Arnoldi/Lanczos method of ARPACK-NG.

Key Features:
    - Closure entry points for implicit, sparse or stencil-defined operators
    - Dense entry points for square matrices (NumPy, SciPy sparse, LinearOperator)
    - Real symmetric (dsaupd/dseupd) and complex general (znaupd/zneupd) domains
    - One solve at a time per process, enforced internally

Entry points:
    eigenvalues(matvec, n, which, nev, ncv, maxiter)
    eigenvectors(matvec, n, which, nev, ncv, maxiter)
    eigenvalues_dense(A, which, nev, ncv, maxiter)
    eigenvectors_dense(A, which, nev, ncv, maxiter)

Example:
    >>> N = 100
    >>> def ring(x):
    ...     return np.roll(x, -1) + np.roll(x, 1)
    >>> vals = eigenvalues(ring, N, 'LR', 2, 10, 100)
"""

from typing import Optional, Tuple, Union, Literal

import numpy as np
from numpy.typing import NDArray

try:
    import scipy.sparse as sp
    from scipy.sparse.linalg import LinearOperator, aslinearoperator
except ImportError as e:
    raise ImportError("SciPy is required for the ARPACK driver.") from e

from .callback import MatVecFunc
from .driver import run_arpack
from .errors import NonSquareInputError
from .kernel import ArpackKernel
from .problem import ArpackProblem, ScalarDomain, Which
from .result import EigenResult, EigenSolver

WhichLike   = Union[Which, Literal['LM', 'SM', 'LR', 'SR', 'LI', 'SI', 'LA', 'SA'], str]
DomainLike  = Union[ScalarDomain, str]

# dense entry points only: pick REAL_SYMMETRIC for real symmetric matrices
DOMAIN_AUTO = 'auto'

# ----------------------------------------------------------------------------------------
#! Closure entry points
# ----------------------------------------------------------------------------------------

def _solve(matvec, n, which, nev, ncv, maxiter, vectors, *, domain, tol, kernel, inplace, require_convergence) -> EigenResult:
    problem = ArpackProblem.create(n, nev, ncv, maxiter, which=which, domain=domain, tol=tol)
    return run_arpack(problem, matvec, vectors=vectors, kernel=kernel, inplace=inplace,
                      require_convergence=require_convergence)

def eigenvalues(matvec              : MatVecFunc,
                n                   : int,
                which               : WhichLike,
                nev                 : int,
                ncv                 : int,
                maxiter             : int,
                *,
                domain              : DomainLike                = ScalarDomain.COMPLEX_GENERAL,
                tol                 : Optional[float]           = None,
                kernel              : Optional[ArpackKernel]    = None,
                inplace             : Optional[bool]            = None,
                require_convergence : bool                      = False) -> NDArray:
    '''
    The `nev` eigenvalues of the operator selected by `which`.

    Args:
        matvec:
            y = A x, either `matvec(x) -> y` or `matvec(x, out)`.
        n:
            Dimension of the operator.
        which:
            Selection criterion ('LM', 'SM', 'LR', 'SR', 'LI', 'SI', 'LA', 'SA').
        nev:
            Number of eigenvalues.
        ncv:
            Subspace size, ncv - nev >= 2 and ncv <= n.
        maxiter:
            Maximum number of restarts.
        domain:
            REAL_SYMMETRIC or COMPLEX_GENERAL (default).
        tol:
            Convergence tolerance, machine epsilon by default.
        kernel:
            External solver, the native ARPACK-NG library by default.
        require_convergence:
            Raise instead of returning when the iteration limit was reached.
    Returns:
        Array of `nev` eigenvalues in solver order.
    '''
    return _solve(matvec, n, which, nev, ncv, maxiter, False, domain=domain, tol=tol, kernel=kernel,
                  inplace=inplace, require_convergence=require_convergence).eigenvalues

def eigenvectors(matvec              : MatVecFunc,
                 n                   : int,
                 which               : WhichLike,
                 nev                 : int,
                 ncv                 : int,
                 maxiter             : int,
                 *,
                 domain              : DomainLike                = ScalarDomain.COMPLEX_GENERAL,
                 tol                 : Optional[float]           = None,
                 kernel              : Optional[ArpackKernel]    = None,
                 inplace             : Optional[bool]            = None,
                 require_convergence : bool                      = False) -> Tuple[NDArray, NDArray]:
    '''
    Eigenvalues and eigenvectors, see `eigenvalues` for the arguments.

    Returns:
        (values, vectors) with `values.shape == (nev,)` and
        `vectors.shape == (n, nev)`; column i belongs to values[i].
    '''
    res = _solve(matvec, n, which, nev, ncv, maxiter, True, domain=domain, tol=tol, kernel=kernel,
                 inplace=inplace, require_convergence=require_convergence)
    return res.eigenvalues, res.eigenvectors

# ----------------------------------------------------------------------------------------
#! Dense entry points
# ----------------------------------------------------------------------------------------

def _operator_shape(A) -> Tuple[int, ...]:
    shape = getattr(A, 'shape', None)
    if shape is None:
        shape = np.shape(A)
    return tuple(int(s) for s in shape)

def check_square(A) -> int:
    '''
    Dimension of a square operator.

    Raises:
        NonSquareInputError: if A is not a square matrix.
    '''
    shape = _operator_shape(A)
    if len(shape) != 2 or shape[0] != shape[1]:
        raise NonSquareInputError(shape)
    return shape[0]

def infer_domain(A) -> ScalarDomain:
    '''
    REAL_SYMMETRIC for real symmetric matrices, COMPLEX_GENERAL otherwise.

    LinearOperators cannot be inspected and are treated as general.
    '''
    if isinstance(A, LinearOperator):
        return ScalarDomain.COMPLEX_GENERAL
    dtype = A.dtype if hasattr(A, 'dtype') else np.asarray(A).dtype
    if np.issubdtype(dtype, np.complexfloating):
        return ScalarDomain.COMPLEX_GENERAL
    if EigenSolver._is_hermitian(A if sp.issparse(A) else np.asarray(A)):
        return ScalarDomain.REAL_SYMMETRIC
    return ScalarDomain.COMPLEX_GENERAL

def dense_matvec(A, domain: ScalarDomain) -> MatVecFunc:
    '''
    y = A x for a matrix, sparse matrix or LinearOperator, in the domain's dtype.
    '''
    if isinstance(A, LinearOperator) or sp.issparse(A):
        op = aslinearoperator(A)
        return lambda x: op.matvec(x)
    A = np.asarray(A, dtype=np.result_type(np.asarray(A).dtype, domain.dtype))
    return lambda x: A @ x

def resolve_dense_domain(A, domain: Optional[DomainLike]) -> ScalarDomain:
    '''
    Domain of a dense solve. COMPLEX_GENERAL unless given, as for the closure
    entry points, so both give the same eigenvalues for the same `which`.
    'auto' infers it from A.
    '''
    if domain is None:
        return ScalarDomain.COMPLEX_GENERAL
    if isinstance(domain, str) and domain.strip().lower() == DOMAIN_AUTO:
        return infer_domain(A)
    return ScalarDomain.from_any(domain)

def _solve_dense(A, which, nev, ncv, maxiter, vectors, *, domain, tol, kernel, require_convergence) -> EigenResult:
    n       = check_square(A)
    domain  = resolve_dense_domain(A, domain)
    return _solve(dense_matvec(A, domain), n, which, nev, ncv, maxiter, vectors, domain=domain, tol=tol,
                  kernel=kernel, inplace=False, require_convergence=require_convergence)

def eigenvalues_dense(A,
                      which                 : WhichLike,
                      nev                   : int,
                      ncv                   : int,
                      maxiter               : int,
                      *,
                      domain                : Optional[DomainLike]      = None,
                      tol                   : Optional[float]           = None,
                      kernel                : Optional[ArpackKernel]    = None,
                      require_convergence   : bool                      = False) -> NDArray:
    '''
    `eigenvalues` for a square matrix; the operator is y = A x.

    The domain defaults to COMPLEX_GENERAL like `eigenvalues`; pass
    domain='real_symmetric' (or 'auto' to infer it from A) to use the
    symmetric routines. Raises NonSquareInputError before any solver call
    when A is not square.
    '''
    return _solve_dense(A, which, nev, ncv, maxiter, False, domain=domain, tol=tol, kernel=kernel,
                        require_convergence=require_convergence).eigenvalues

def eigenvectors_dense(A,
                       which                : WhichLike,
                       nev                  : int,
                       ncv                  : int,
                       maxiter              : int,
                       *,
                       domain               : Optional[DomainLike]      = None,
                       tol                  : Optional[float]           = None,
                       kernel               : Optional[ArpackKernel]    = None,
                       require_convergence  : bool                      = False) -> Tuple[NDArray, NDArray]:
    '''
    `eigenvectors` for a square matrix; the operator is y = A x.
    '''
    res = _solve_dense(A, which, nev, ncv, maxiter, True, domain=domain, tol=tol, kernel=kernel,
                       require_convergence=require_convergence)
    return res.eigenvalues, res.eigenvectors

# ----------------------------------------------------------------------------------------
#! Solver class
# ----------------------------------------------------------------------------------------

class ArpackEigensolver(EigenSolver):
    """
    Implicitly restarted Arnoldi/Lanczos through ARPACK-NG.

    Args:
        k: Number of eigenvalues to compute
        which: Which eigenvalues to compute
               'LM' = largest magnitude
               'SM' = smallest magnitude
               'LR' = largest real part
               'SR' = smallest real part
               'LI' = largest imaginary part
               'SI' = smallest imaginary part
               'LA' = largest algebraic
               'SA' = smallest algebraic
        ncv: Subspace size (default: min(n, max(2*k + 1, 20)))
        maxiter: Maximum number of restarts (default: 10 * n)
        domain: 'real_symmetric', 'complex_general' (default) or 'auto' to infer from A
        tol: Convergence tolerance (default: machine epsilon)
        return_vectors: Whether to compute eigenvectors (default: True)
        require_convergence: Raise if the iteration limit was reached
        kernel: External solver (default: native library)

    Example:
        >>> A = create_sparse_symmetric_matrix(10000)
        >>> solver = ArpackEigensolver(k=6, which='SA')
        >>> result = solver.solve(A=A)
        >>> print(result.eigenvalues)
    """

    def __init__(
        self,
        k                   : int                       = 6,
        which               : WhichLike                 = 'LM',
        ncv                 : Optional[int]             = None,
        maxiter             : Optional[int]             = None,
        domain              : Optional[DomainLike]      = None,
        tol                 : Optional[float]           = None,
        return_vectors      : bool                      = True,
        require_convergence : bool                      = False,
        kernel              : Optional[ArpackKernel]    = None,
    ):
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        self.k                      = k
        self.which                  = Which.from_any(which)
        self.ncv                    = ncv
        self.maxiter                = maxiter
        self.domain                 = domain if domain is None or domain == DOMAIN_AUTO else ScalarDomain.from_any(domain)
        self.tol                    = tol
        self.return_vectors         = return_vectors
        self.require_convergence    = require_convergence
        self.kernel                 = kernel

    @staticmethod
    def is_iterative_solver() -> bool:
        return True

    def _sizes(self, n: int) -> Tuple[int, int]:
        ncv     = self.ncv if self.ncv is not None else min(n, max(2 * self.k + 1, 20))
        maxiter = self.maxiter if self.maxiter is not None else 10 * n
        return ncv, maxiter

    def solve(
        self,
        A       : Optional[NDArray]     = None,
        matvec  : Optional[MatVecFunc]  = None,
        n       : Optional[int]         = None,
    ) -> EigenResult:
        """
        Solve for eigenvalues (and eigenvectors).

        Args:
            A: Matrix, sparse matrix or LinearOperator
            matvec: Matrix-vector product function (if A not provided)
            n: Dimension (required if matvec provided)

        Returns:
            EigenResult
        """
        if A is not None:
            n               = check_square(A)
            ncv, maxiter    = self._sizes(n)
            return _solve_dense(A, self.which, self.k, ncv, maxiter, self.return_vectors,
                                domain=self.domain, tol=self.tol, kernel=self.kernel,
                                require_convergence=self.require_convergence)
        if matvec is None:
            raise ValueError("Either A or matvec must be provided")
        if n is None:
            raise ValueError("n must be provided when using matvec")

        # a bare matvec cannot be inspected, 'auto' falls back to the general domain
        ncv, maxiter    = self._sizes(n)
        domain          = self.domain if isinstance(self.domain, ScalarDomain) else ScalarDomain.COMPLEX_GENERAL
        return _solve(matvec, n, self.which, self.k, ncv, maxiter, self.return_vectors,
                      domain=domain, tol=self.tol, kernel=self.kernel,
                      inplace=None, require_convergence=self.require_convergence)

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
