# arpack_driver/__init__.py

"""
ARPACK driver - a few eigenpairs of large operators given as matrix-vector products.

The package drives the implicitly restarted Arnoldi/Lanczos iteration of
ARPACK-NG through its reverse-communication interface. Only one solve runs at
a time per process; concurrent callers are serialized.

Modules:
--------
- algebra   : the driver, its facade and configuration
- common    : logging

Examples:
---------
>>> import numpy as np
>>> import arpack_driver as ad
>>> ring = lambda x: np.roll(x, -1) + np.roll(x, 1)
>>> vals = ad.eigenvalues(ring, 100, 'LR', 2, 10, 100)

File    : arpack_driver/__init__.py
Version : 0.1.0
License : MIT
"""

import importlib

# Package metadata
__version__         = "0.1.0"
__license__         = "MIT"

# List of available modules (not imported by default)
__all__             = ["algebra", "common",
                       "eigenvalues", "eigenvectors", "eigenvalues_dense", "eigenvectors_dense",
                       "ArpackEigensolver", "Which", "ScalarDomain"]

_SHORTCUTS = {
    "eigenvalues"           : ".algebra.eigen.arpack",
    "eigenvectors"          : ".algebra.eigen.arpack",
    "eigenvalues_dense"     : ".algebra.eigen.arpack",
    "eigenvectors_dense"    : ".algebra.eigen.arpack",
    "ArpackEigensolver"     : ".algebra.eigen.arpack",
    "Which"                 : ".algebra.eigen.problem",
    "ScalarDomain"          : ".algebra.eigen.problem",
}

def list_available_modules():
    """
    List all available modules in the package.
    """
    return ["algebra", "common"]

# Lazy import subpackages on attribute access (PEP 562)
def __getattr__(name):  # pragma: no cover - simple indirection
    if name in _SHORTCUTS:
        return getattr(importlib.import_module(_SHORTCUTS[name], __name__), name)
    if name in list_available_modules():
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

def __dir__():  # pragma: no cover
    return sorted(list(globals().keys()) + __all__)

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
