"""
Shared fixtures for the ARPACK driver tests.

`DenseReferenceKernel` speaks the same reverse-communication protocol as the
ARPACK routines: it requests y = A e_j for every unit vector through the
scratch buffer, then diagonalizes the probed matrix densely. Like ARPACK it
keeps its progress in instance state, so it notices when two solves are
interleaved.
"""

import threading

import numpy as np
import pytest

from arpack_driver.algebra.eigen.kernel import ArpackKernel, get_default_kernel
from arpack_driver.algebra.eigen.errors import ArpackLibraryError
from arpack_driver.algebra.eigen.workspace import IPARAM_MXITER, IPARAM_NCONV

# value left in the reserved last slot of d, must never reach the caller
RESERVED_SLOT_SENTINEL = 777.0

# ----------------------------------

def select_order(values, which_code, nev):
    """Indices of the nev values preferred by the selection code."""
    keys = {
        'LM': -np.abs(values),
        'SM': np.abs(values),
        'LR': -np.real(values),
        'LA': -np.real(values),
        'SR': np.real(values),
        'SA': np.real(values),
        'LI': -np.imag(values),
        'SI': np.imag(values),
    }
    return np.argsort(keys[which_code], kind='stable')[:nev]

class DenseReferenceKernel(ArpackKernel):
    """Protocol-faithful test double for the four ARPACK entry points."""

    def __init__(self, final_info=0, extract_info=0, nconv=None, iterations=1):
        self.final_info     = final_info
        self.extract_info   = extract_info
        self.nconv          = nconv
        self.iterations     = iterations
        self.forward_calls  = 0
        self.backward_calls = 0
        self.last_rvec      = None
        self.interleaved    = False
        self.requests       = []
        self._active        = None
        self._pending       = None
        self._columns       = []
        self._result        = None
        self._bookkeeping   = threading.Lock()

    @property
    def calls(self):
        return self.forward_calls + self.backward_calls

    # ----------------------------------

    @staticmethod
    def _validate(p):
        if p.n <= 0:
            return -1
        if p.nev <= 0:
            return -2
        if p.ncv <= p.nev or p.ncv > p.n:
            return -3
        if p.maxiter <= 0:
            return -4
        return 0

    def _forward(self, ws):
        with self._bookkeeping:
            self.forward_calls += 1
        p = ws.problem
        if ws.ido == 0:
            info = self._validate(p)
            if info:
                ws.ido, ws.info = 99, info
                return
            self._active    = id(ws)
            self._columns   = []
        elif self._active != id(ws):
            self.interleaved = True
            ws.ido, ws.info = 99, -9999
            return
        else:
            self._columns.append(np.array(ws.workd[p.n:2 * p.n]))

        j = len(self._columns)
        if j < p.n:
            ws.workd[:p.n]  = 0
            ws.workd[j]     = 1
            ws.ipntr[0]     = 1
            ws.ipntr[1]     = p.n + 1
            ws.ido          = -1 if j == 0 else 1
            self.requests.append((int(ws.ipntr[0]), int(ws.ipntr[1])))
            return

        A = np.column_stack(self._columns)
        if p.domain.is_complex:
            vals, vecs = np.linalg.eig(A)
        else:
            vals, vecs = np.linalg.eigh(0.5 * (A + A.T))
        idx                     = select_order(vals, p.which_code, p.nev)
        self._result            = (vals[idx], vecs[:, idx])
        ws.iparam[IPARAM_MXITER] = self.iterations
        ws.iparam[IPARAM_NCONV] = p.nev if self.nconv is None else self.nconv
        ws.ido                  = 99
        ws.info                 = self.final_info
        self._active            = None
        self._pending           = id(ws)

    def _backward(self, ws, rvec, out):
        with self._bookkeeping:
            self.backward_calls += 1
        self.last_rvec = rvec
        if self._pending != id(ws):
            self.interleaved = True
            ws.info = -9999
            return
        self._pending   = None
        vals, vecs      = self._result
        nev             = ws.problem.nev
        out.d[:nev]     = vals
        out.d[nev]      = RESERVED_SLOT_SENTINEL
        if rvec:
            out.z[:, :] = vecs
        ws.info         = self.extract_info

    def dsaupd(self, ws):
        self._forward(ws)

    def dseupd(self, ws, rvec, out):
        self._backward(ws, rvec, out)

    def znaupd(self, ws):
        self._forward(ws)

    def zneupd(self, ws, rvec, out):
        self._backward(ws, rvec, out)

class TokenKernel(ArpackKernel):
    """Returns a fixed token and pointer pair on every forward step."""

    def __init__(self, ido, ipntr=(1, 1)):
        self.ido    = ido
        self.ipntr  = ipntr
        self.calls  = 0

    def _forward(self, ws):
        self.calls      += 1
        ws.ido          = self.ido
        ws.ipntr[0]     = self.ipntr[0]
        ws.ipntr[1]     = self.ipntr[1]

    def dsaupd(self, ws):
        self._forward(ws)

    def znaupd(self, ws):
        self._forward(ws)

    def dseupd(self, ws, rvec, out):
        raise AssertionError("extraction must not be reached")

    def zneupd(self, ws, rvec, out):
        raise AssertionError("extraction must not be reached")

# ----------------------------------
#! Helper functions to create test operators
# ----------------------------------

def ring_matvec(n):
    """Nearest-neighbour coupling on a ring: y[i] = x[i+1] + x[i-1]."""
    def matvec(x):
        return np.roll(x, -1) + np.roll(x, 1)
    return matvec

def create_symmetric_matrix(n, seed=42):
    rng = np.random.default_rng(seed)
    A   = rng.standard_normal((n, n))
    return 0.5 * (A + A.T)

def create_nonsymmetric_matrix(n, seed=7):
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n, n))

# ----------------------------------
#! Fixtures
# ----------------------------------

@pytest.fixture
def reference_kernel():
    return DenseReferenceKernel()

@pytest.fixture
def reference_kernel_cls():
    return DenseReferenceKernel

@pytest.fixture
def token_kernel_cls():
    return TokenKernel

@pytest.fixture
def native_kernel():
    try:
        return get_default_kernel()
    except ArpackLibraryError as e:
        pytest.skip(f"ARPACK-NG library not available: {e.message}")
