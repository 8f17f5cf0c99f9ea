"""
Linear algebra part of the ARPACK driver.

Sub-packages:
    - eigen : reverse-communication driver for ARPACK-NG and its facade
    - utils : configuration read from the environment

This module uses lazy imports to minimize startup overhead.
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    'eigen'                 : ('.eigen', None),
    'utils'                 : ('.utils', None),
    'eigenvalues'           : ('.eigen.arpack', 'eigenvalues'),
    'eigenvectors'          : ('.eigen.arpack', 'eigenvectors'),
    'eigenvalues_dense'     : ('.eigen.arpack', 'eigenvalues_dense'),
    'eigenvectors_dense'    : ('.eigen.arpack', 'eigenvectors_dense'),
    'ArpackEigensolver'     : ('.eigen.arpack', 'ArpackEigensolver'),
    'get_logger'            : ('..common.flog', 'get_global_logger'),
}

_LAZY_CACHE = {}

if TYPE_CHECKING:
    from . import eigen, utils
    from .eigen.arpack import eigenvalues, eigenvectors, eigenvalues_dense, eigenvectors_dense, ArpackEigensolver

def __getattr__(name: str):
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
