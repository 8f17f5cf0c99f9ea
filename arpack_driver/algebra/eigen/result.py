"""
Eigenvalue Solver Result Types

Standardized result container for the ARPACK driver.
"""

from typing import Optional, NamedTuple

import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp

from .errors import ArpackStatus

class EigenSolver:
    """
    Marker class for eigenvalue solver types.
    """

    @staticmethod
    def _is_hermitian(A, tol=1e-12):
        """Check if A is symmetric/Hermitian, works for dense and sparse."""
        if sp.issparse(A):
            diff = A - A.T.conjugate()
            return diff.nnz == 0 or np.all(np.abs(diff.data) < tol)
        return np.allclose(A, A.T.conj(), atol=tol)

    @staticmethod
    def is_iterative_solver() -> bool:
        """Indicate if the solver is iterative."""
        return False

    def solve(self, *args, **kwargs) -> 'EigenResult':
        """
        Solve the eigenvalue problem.

        Returns:
            EigenResult: Standardized result container.
        """
        raise NotImplementedError("This method should be implemented by subclasses.")

# ---------------------------------------------------------------------------------

class EigenResult(NamedTuple):
    r"""
    Standardized result from the ARPACK driver.

    Attributes:
        eigenvalues:
            The `nev` computed eigenvalues, in the order reported by the solver
            (not sorted by magnitude)
        eigenvectors:
            Corresponding eigenvectors as columns (n x nev), None when only
            eigenvalues were requested
        iterations:
            Number of restarts performed by the solver
        converged:
            Whether the solver reported full convergence (status 0)
        status:
            Termination status of the iteration
        nconv:
            Number of Ritz values that met the tolerance
        matvecs:
            Number of operator applications
    """
    eigenvalues     : NDArray
    eigenvectors    : Optional[NDArray] = None
    iterations      : Optional[int]     = None
    converged       : bool              = True
    status          : ArpackStatus      = ArpackStatus.CONVERGED
    nconv           : Optional[int]     = None
    matvecs         : int               = 0

    def __repr__(self):
        n_eigs      = len(self.eigenvalues) if self.eigenvalues is not None else 0
        iter_str    = f"{self.iterations}" if self.iterations is not None else "N/A"
        return (f"EigenResult(n_eigenvalues={n_eigs}, status={self.status.name}, "
                f"converged={self.converged}, iterations={iter_str}, matvecs={self.matvecs})")

    def __str__(self):
        return f'converged={self.converged}, iterations={self.iterations}'

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
