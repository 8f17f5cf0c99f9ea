"""
Driver Loop

Runs one solve against an `ArpackKernel`:

    1. allocate a fresh workspace,
    2. take the process-wide guard,
    3. call the forward step until the token says the loop is over, serving
       every matrix-vector request through the callback adapter,
    4. classify the status code,
    5. call the backward step once to extract eigenvalues (and vectors),
    6. release the guard, on every exit path.

The same loop serves both scalar domains; only the entry-point pair differs.
"""

from typing import Optional

import numpy as np

from ...common.flog import get_global_logger
from .callback import MatVecAdapter, MatVecFunc
from .errors import ArpackStatus, NotConvergedError, ProtocolError, Stage, classify_info
from .guard import _ARPACK_GUARD
from .kernel import ArpackKernel, get_default_kernel
from .problem import ArpackProblem
from .protocol import Idle, RequestMatVec, Terminated, decode_token
from .result import EigenResult
from .workspace import Workspace

log = get_global_logger()

# ----------------------------------------------------------------------------------------

@log.timing
def run_arpack(problem             : ArpackProblem,
               matvec              : MatVecFunc,
               vectors             : bool                      = True,
               kernel              : Optional[ArpackKernel]    = None,
               inplace             : Optional[bool]            = None,
               require_convergence : bool                      = False) -> EigenResult:
    '''
    Drive the reverse-communication protocol to completion.

    Args:
        problem:
            Validated problem descriptor.
        matvec:
            Operator application (see `MatVecAdapter`).
        vectors:
            Compute eigenvectors in the extraction step.
        kernel:
            External solver, the native library by default.
        inplace:
            Calling convention of `matvec`, detected when None.
        require_convergence:
            Raise `NotConvergedError` instead of returning when the solver
            stopped with status 1 or 2.
    Returns:
        EigenResult with exactly `nev` eigenvalues and, if requested, an
        n x nev eigenvector matrix.
    '''
    problem.validate()
    kernel              = kernel if kernel is not None else get_default_kernel()
    forward, backward   = kernel.entry_points(problem.domain)
    adapter             = MatVecAdapter(matvec, problem.n, problem.dtype, inplace=inplace)
    ws                  = Workspace.allocate(problem, kernel.int_dtype)

    log.debug(f"ARPACK {problem.domain.name.lower()}: n={problem.n}, nev={problem.nev}, ncv={problem.ncv}, "
              f"which={problem.which_code}, maxiter={problem.maxiter}, tol={problem.tol:.3e}")

    with _ARPACK_GUARD:
        status = _iterate(ws, forward, adapter)
        values, vecs = _extract(ws, backward, vectors)

    log.debug(f"ARPACK finished: status={status.name}, iterations={ws.iterations}, "
              f"nconv={ws.nconv}, matvecs={adapter.calls}")
    if not status.converged:
        if require_convergence:
            raise NotConvergedError(status, ws.nconv, problem.nev)
        if ws.nconv < problem.nev:
            log.warning(f"ARPACK stopped with {status.name}: only {ws.nconv} of {problem.nev} Ritz values converged.")

    return EigenResult(
        eigenvalues     = values,
        eigenvectors    = vecs,
        iterations      = ws.iterations,
        converged       = status.converged,
        status          = status,
        nconv           = ws.nconv,
        matvecs         = adapter.calls,
    )

# ----------------------------------------------------------------------------------------

def _iterate(ws: Workspace, forward, adapter: MatVecAdapter) -> ArpackStatus:
    '''
    Forward steps until termination. Returns the classified status.
    '''
    capacity = ws.workd.shape[0]
    while True:
        forward(ws)
        ws.calls += 1
        state = decode_token(ws.ido, ws.ipntr, ws.n, capacity)
        if isinstance(state, RequestMatVec):
            adapter(ws.workd, state)
        elif isinstance(state, Terminated):
            break
        elif isinstance(state, Idle):
            raise ProtocolError("Solver returned without advancing the protocol.", ws.info)
    return classify_info(ws.info, Stage.ITERATE)

def _extract(ws: Workspace, backward, vectors: bool):
    '''
    One backward step. Returns the nev eigenvalues and the eigenvectors (or None).
    '''
    out     = ws.extraction_buffers()
    ws.info = 0
    backward(ws, vectors, out)
    if ws.info < 0:
        classify_info(ws.info, Stage.EXTRACT)
    elif ws.info > 0:
        log.warning(f"ARPACK extraction returned info={ws.info}, results may be inaccurate.")

    nev     = ws.problem.nev
    values  = np.array(out.d[:nev])
    vecs    = np.array(out.z) if vectors else None
    return values, vecs

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
