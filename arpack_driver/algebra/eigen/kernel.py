"""
External Solver Binding

The implicitly restarted Arnoldi/Lanczos iteration is not implemented here. It
is reached through four entry points of ARPACK-NG:

    dsaupd / dseupd     real symmetric forward step / extraction
    znaupd / zneupd     complex general forward step / extraction

`ArpackKernel` is the interface the driver talks to; `entry_points(domain)`
hands back the forward/backward pair for a scalar domain, so the driver loop
is written once for both domains.

`NativeArpackKernel` binds the Fortran symbols of the shared library with
ctypes. Fortran passes every argument by reference and appends the lengths of
character arguments at the end of the call.
"""

import os
import ctypes
import ctypes.util
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

import numpy as np

from ..utils import ARPACK_LIBRARY, ARPACK_ILP64, arpack_int_type
from .errors import ArpackLibraryError
from .problem import ScalarDomain
from .workspace import Workspace, ExtractionBuffers

# ----------------------------------------------------------------------------------------

ForwardStep     = Callable[[Workspace], None]
BackwardStep    = Callable[[Workspace, bool, ExtractionBuffers], None]

BMAT_IDENTITY   = b'I'  # standard problem, B = I
HOWMNY_ALL      = b'A'  # compute all nev Ritz vectors

# ----------------------------------------------------------------------------------------
#! Interface
# ----------------------------------------------------------------------------------------

class ArpackKernel(ABC):
    '''
    The four entry points of the external solver.

    Forward steps advance the iteration by one reverse-communication round
    and update `ws.ido`, `ws.info`, the pointer and control arrays in place.
    Backward steps fill `out.d` (and `out.z` when `rvec`) and update `ws.info`.
    '''

    #: integer type of iparam/ipntr/select
    int_dtype = np.int32

    @abstractmethod
    def dsaupd(self, ws: Workspace) -> None: ...

    @abstractmethod
    def dseupd(self, ws: Workspace, rvec: bool, out: ExtractionBuffers) -> None: ...

    @abstractmethod
    def znaupd(self, ws: Workspace) -> None: ...

    @abstractmethod
    def zneupd(self, ws: Workspace, rvec: bool, out: ExtractionBuffers) -> None: ...

    def entry_points(self, domain: ScalarDomain) -> Tuple[ForwardStep, BackwardStep]:
        '''
        Forward and backward step for the scalar domain.
        '''
        if domain is ScalarDomain.REAL_SYMMETRIC:
            return self.dsaupd, self.dseupd
        if domain is ScalarDomain.COMPLEX_GENERAL:
            return self.znaupd, self.zneupd
        raise ValueError(f"Unsupported scalar domain: {domain}")

    def __repr__(self):
        return f"{self.__class__.__name__}(int_dtype={np.dtype(self.int_dtype).name})"

# ----------------------------------------------------------------------------------------
#! Native library
# ----------------------------------------------------------------------------------------

_LIBRARY_CANDIDATES = ('libarpack.so.2', 'libarpack.so', 'libarpack.dylib', 'arpack.dll', 'libarpack.dll')

def find_arpack_library(library: Optional[str] = None) -> str:
    '''
    Locate the shared ARPACK library.

    Order: the explicit argument, ARPACK_LIBRARY, `ctypes.util.find_library`,
    then a few well-known file names.
    '''
    library = library or ARPACK_LIBRARY
    if library:
        return library
    found = ctypes.util.find_library('arpack')
    if found:
        return found
    for name in _LIBRARY_CANDIDATES:
        try:
            ctypes.CDLL(name)
        except OSError:
            continue
        return name
    raise ArpackLibraryError("Cannot find the ARPACK-NG shared library. Install it "
                             "(e.g. libarpack2 / arpack-ng) or point ARPACK_LIBRARY to it.")

def load_library(library: Optional[str] = None) -> ctypes.CDLL:
    path = find_arpack_library(library)
    try:
        if os.path.isdir(path):
            return np.ctypeslib.load_library('libarpack', path)
        return ctypes.CDLL(path)
    except OSError as e:
        raise ArpackLibraryError(f"Cannot load the ARPACK library '{path}': {e}") from e

def _symbol(lib: ctypes.CDLL, name: str):
    # gfortran mangles with one trailing underscore, some compilers with none or two
    for candidate in (f"{name}_", name, f"{name}__"):
        try:
            func = getattr(lib, candidate)
        except AttributeError:
            continue
        func.restype = None
        return func
    raise ArpackLibraryError(f"Symbol '{name}' not found in the ARPACK library.")

def _ptr(arr: np.ndarray) -> ctypes.c_void_p:
    return arr.ctypes.data_as(ctypes.c_void_p)

class NativeArpackKernel(ArpackKernel):
    '''
    ctypes binding of the Fortran ARPACK-NG routines.

    Args:
        library:
            Path or name of the shared library (see `find_arpack_library`).
        ilp64:
            The library uses 64-bit integers (ARPACK_ILP64 by default).
    '''

    def __init__(self, library: Optional[str] = None, ilp64: Optional[bool] = None):
        self.lib        = load_library(library)
        self.ilp64      = ARPACK_ILP64 if ilp64 is None else bool(ilp64)
        self.int_dtype  = arpack_int_type(self.ilp64)
        self._c_int     = ctypes.c_int64 if self.ilp64 else ctypes.c_int32
        self._dsaupd    = _symbol(self.lib, 'dsaupd')
        self._dseupd    = _symbol(self.lib, 'dseupd')
        self._znaupd    = _symbol(self.lib, 'znaupd')
        self._zneupd    = _symbol(self.lib, 'zneupd')

    # --------------------------------------------------------------------------------

    def _check(self, ws: Workspace) -> None:
        if ws.iparam.dtype != self.int_dtype or ws.ipntr.dtype != self.int_dtype:
            raise ArpackLibraryError(f"Workspace integer type {ws.iparam.dtype} does not match the library ({np.dtype(self.int_dtype)}).")

    def _scalars(self, ws: Workspace):
        p = ws.problem
        return self._c_int(p.n), self._c_int(p.nev), self._c_int(p.ncv), self._c_int(p.lworkl), ctypes.c_double(p.tol)

    def _forward(self, func, ws: Workspace) -> None:
        self._check(ws)
        p                           = ws.problem
        n, nev, ncv, lworkl, tol    = self._scalars(ws)
        ido                         = self._c_int(ws.ido)
        info                        = self._c_int(ws.info)
        args = [
            ctypes.byref(ido),
            ctypes.c_char_p(BMAT_IDENTITY),
            ctypes.byref(n),
            ctypes.c_char_p(p.which_code.encode()),
            ctypes.byref(nev),
            ctypes.byref(tol),
            _ptr(ws.resid),
            ctypes.byref(ncv),
            _ptr(ws.v),
            ctypes.byref(n),            # ldv
            _ptr(ws.iparam),
            _ptr(ws.ipntr),
            _ptr(ws.workd),
            _ptr(ws.workl),
            ctypes.byref(lworkl),
        ]
        if ws.rwork is not None:
            args.append(_ptr(ws.rwork))
        args += [ctypes.byref(info), ctypes.c_size_t(1), ctypes.c_size_t(2)]
        func(*args)
        ws.ido  = int(ido.value)
        ws.info = int(info.value)

    def _backward(self, func, ws: Workspace, rvec: bool, out: ExtractionBuffers) -> None:
        self._check(ws)
        p                           = ws.problem
        n, nev, ncv, lworkl, tol    = self._scalars(ws)
        info                        = self._c_int(ws.info)
        c_rvec                      = self._c_int(1 if rvec else 0)
        sigma                       = np.zeros(1, dtype=p.dtype)
        args = [
            ctypes.byref(c_rvec),
            ctypes.c_char_p(HOWMNY_ALL),
            _ptr(out.select),
            _ptr(out.d),
            _ptr(out.z),
            ctypes.byref(n),            # ldz
            _ptr(sigma),
        ]
        if out.workev is not None:
            args.append(_ptr(out.workev))
        args += [
            ctypes.c_char_p(BMAT_IDENTITY),
            ctypes.byref(n),
            ctypes.c_char_p(p.which_code.encode()),
            ctypes.byref(nev),
            ctypes.byref(tol),
            _ptr(ws.resid),
            ctypes.byref(ncv),
            _ptr(ws.v),
            ctypes.byref(n),            # ldv
            _ptr(ws.iparam),
            _ptr(ws.ipntr),
            _ptr(ws.workd),
            _ptr(ws.workl),
            ctypes.byref(lworkl),
        ]
        if ws.rwork is not None:
            args.append(_ptr(ws.rwork))
        args += [ctypes.byref(info), ctypes.c_size_t(1), ctypes.c_size_t(1), ctypes.c_size_t(2)]
        func(*args)
        ws.info = int(info.value)

    # --------------------------------------------------------------------------------

    def dsaupd(self, ws: Workspace) -> None:
        self._forward(self._dsaupd, ws)

    def dseupd(self, ws: Workspace, rvec: bool, out: ExtractionBuffers) -> None:
        self._backward(self._dseupd, ws, rvec, out)

    def znaupd(self, ws: Workspace) -> None:
        self._forward(self._znaupd, ws)

    def zneupd(self, ws: Workspace, rvec: bool, out: ExtractionBuffers) -> None:
        self._backward(self._zneupd, ws, rvec, out)

# ----------------------------------------------------------------------------------------

_DEFAULT_KERNEL         = None
_DEFAULT_KERNEL_LOCK    = threading.Lock()

def get_default_kernel() -> NativeArpackKernel:
    '''
    The native kernel, loaded once per process.

    Raises:
        ArpackLibraryError: when the library cannot be loaded.
    '''
    global _DEFAULT_KERNEL
    if _DEFAULT_KERNEL is not None:
        return _DEFAULT_KERNEL
    with _DEFAULT_KERNEL_LOCK:
        if _DEFAULT_KERNEL is None:
            _DEFAULT_KERNEL = NativeArpackKernel()
    return _DEFAULT_KERNEL

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
