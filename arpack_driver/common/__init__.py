"""
Common utilities shared by the ARPACK driver.

**Logging and Monitoring:**
- Console/file logger with verbosity control (`Logger`, `get_global_logger`)

Example:
    >>> from arpack_driver.common import get_global_logger
    >>> log = get_global_logger()
    >>> log.debug("ready")
"""

import  importlib
from    typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .flog          import Logger, Colors, get_global_logger

# Lazy loading registry
_LAZY_IMPORTS = {
    'Logger'                    : ('.flog', 'Logger'),
    'Colors'                    : ('.flog', 'Colors'),
    'get_global_logger'         : ('.flog', 'get_global_logger'),
}

# Cache for loaded modules
_LOADED = {}

def __getattr__(name: str):
    if name in _LOADED:
        return _LOADED[name]
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_path, attr_name = _LAZY_IMPORTS[name]
    module          = importlib.import_module(module_path, package=__name__)
    result          = module if attr_name is None else getattr(module, attr_name)
    _LOADED[name]   = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
