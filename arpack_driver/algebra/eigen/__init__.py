"""
Eigenvalue Solvers Module

Drives the implicitly restarted Arnoldi/Lanczos iteration of ARPACK-NG through
its reverse-communication interface, for operators given only as a
matrix-vector product.

Entry points:
    - eigenvalues / eigenvectors             : closure based
    - eigenvalues_dense / eigenvectors_dense : square matrices
    - ArpackEigensolver                      : solver class returning EigenResult

Building blocks:
    - ArpackProblem, Which, ScalarDomain     : problem descriptor
    - Workspace                              : solver buffers
    - decode_token                           : protocol decoding
    - MatVecAdapter                          : operator callback
    - ArpackKernel, NativeArpackKernel       : external solver entry points
    - run_arpack                             : driver loop and extraction
    - ArpackError and subclasses             : error classification

This module uses lazy imports to minimize startup overhead.
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    # Facade
    'eigenvalues'               : ('.arpack', 'eigenvalues'),
    'eigenvectors'              : ('.arpack', 'eigenvectors'),
    'eigenvalues_dense'         : ('.arpack', 'eigenvalues_dense'),
    'eigenvectors_dense'        : ('.arpack', 'eigenvectors_dense'),
    'ArpackEigensolver'         : ('.arpack', 'ArpackEigensolver'),
    # Problem
    'ArpackProblem'             : ('.problem', 'ArpackProblem'),
    'Which'                     : ('.problem', 'Which'),
    'ScalarDomain'              : ('.problem', 'ScalarDomain'),
    # Machinery
    'Workspace'                 : ('.workspace', 'Workspace'),
    'decode_token'              : ('.protocol', 'decode_token'),
    'MatVecAdapter'             : ('.callback', 'MatVecAdapter'),
    'ArpackKernel'              : ('.kernel', 'ArpackKernel'),
    'NativeArpackKernel'        : ('.kernel', 'NativeArpackKernel'),
    'get_default_kernel'        : ('.kernel', 'get_default_kernel'),
    'run_arpack'                : ('.driver', 'run_arpack'),
    'solve_in_progress'         : ('.guard', 'solve_in_progress'),
    # Errors
    'ArpackError'               : ('.errors', 'ArpackError'),
    'ArpackErrorMsg'            : ('.errors', 'ArpackErrorMsg'),
    'ArpackStatus'              : ('.errors', 'ArpackStatus'),
    'NonSquareInputError'       : ('.errors', 'NonSquareInputError'),
    'IllegalParameterError'     : ('.errors', 'IllegalParameterError'),
    'ArpackStatusError'         : ('.errors', 'ArpackStatusError'),
    'NotConvergedError'         : ('.errors', 'NotConvergedError'),
    'ReentrantSolveError'       : ('.errors', 'ReentrantSolveError'),
    'ProtocolError'             : ('.errors', 'ProtocolError'),
    'ArpackLibraryError'        : ('.errors', 'ArpackLibraryError'),
    # Result type
    'EigenResult'               : ('.result', 'EigenResult'),
}

_LAZY_CACHE = {}

# For type checking only
if TYPE_CHECKING:
    from .arpack    import eigenvalues, eigenvectors, eigenvalues_dense, eigenvectors_dense, ArpackEigensolver
    from .problem   import ArpackProblem, Which, ScalarDomain
    from .workspace import Workspace
    from .protocol  import decode_token
    from .callback  import MatVecAdapter
    from .kernel    import ArpackKernel, NativeArpackKernel, get_default_kernel
    from .driver    import run_arpack
    from .guard     import solve_in_progress
    from .errors    import (ArpackError, ArpackErrorMsg, ArpackStatus, NonSquareInputError, IllegalParameterError,
                            ArpackStatusError, NotConvergedError, ReentrantSolveError, ProtocolError, ArpackLibraryError)
    from .result    import EigenResult

# -----------------------------------------------------------------------------------------------

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports.
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name = _LAZY_IMPORTS[name]
    module = importlib.import_module(module_path, package=__name__)
    result = module if attr_name is None else getattr(module, attr_name)
    _LAZY_CACHE[name] = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
