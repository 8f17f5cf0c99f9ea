'''
file:       arpack_driver/algebra/eigen/errors.py

Errors raised by the ARPACK driver and the classification of the status
codes (`info`) reported by the solver.

There are three kinds of failures:
    1. precondition violations found before the protocol starts
       (non-square operator, illegal sizes),
    2. illegal-parameter codes reported by the solver, mapped to a reason,
    3. any other solver code, passed through unchanged.
'''

from enum import Enum, IntEnum, unique
from typing import Optional

# -----------------------------------------------------------------------------
#! Status of a finished iteration
# -----------------------------------------------------------------------------

@unique
class ArpackStatus(IntEnum):
    '''
    Non-fatal termination codes of the forward step.

    All three are accepted as a successful solve. Only `CONVERGED` guarantees
    that every requested Ritz value met the tolerance.
    '''
    CONVERGED       = 0 # normal exit
    ITERATION_LIMIT = 1 # maxiter reached, check nconv
    INFORMATIONAL   = 2 # legacy informational code

    @property
    def converged(self) -> bool:
        return self is ArpackStatus.CONVERGED

@unique
class Stage(Enum):
    '''
    Which solver call produced an `info` value.
    '''
    ITERATE = 'aupd'
    EXTRACT = 'eupd'

# -----------------------------------------------------------------------------
#! Errors
# -----------------------------------------------------------------------------

class ArpackErrorMsg(Enum):
    '''
    Enumeration class for driver error messages.
    '''
    NON_SQUARE_INPUT    = 201
    ILLEGAL_PARAMETER   = 202
    SOLVER_STATUS       = 203
    REENTRANT_SOLVE     = 204
    PROTOCOL_VIOLATION  = 205
    LIBRARY_NOT_FOUND   = 206
    DIM_MISMATCH        = 207
    DTYPE_MISMATCH      = 208
    NOT_CONVERGED       = 209

    def __str__(self):
        return self.name.replace('_', ' ').title()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}: '{str(self)}'>"

class ArpackError(Exception):
    '''
    Base class for exceptions of the driver.

    Attributes:
        code    : kind of the error
        message : human readable description
        info    : solver status code when the error comes from the solver
    '''
    def __init__(self, code: ArpackErrorMsg, message: Optional[str] = None, info: Optional[int] = None):
        self.code       = code
        self.message    = message if message else str(code)
        self.info       = info
        super().__init__(self.message)

    def __str__(self):
        suffix = f", info={self.info}" if self.info is not None else ""
        return f"[ArpackError {self.code.name} ({self.code.value}{suffix})]: {self.message}"

    def __repr__(self):
        return self.__str__()

class NonSquareInputError(ArpackError):
    '''The operator handed to a dense entry point is not square.'''
    def __init__(self, shape):
        self.shape = tuple(shape)
        super().__init__(ArpackErrorMsg.NON_SQUARE_INPUT, f"Non square matrix: shape {self.shape}.")

class IllegalParameterError(ArpackError):
    '''The problem parameters were rejected.'''
    def __init__(self, reason: str, info: Optional[int] = None):
        self.reason = reason
        super().__init__(ArpackErrorMsg.ILLEGAL_PARAMETER, f"Invalid parameters: {reason}", info)

class ArpackStatusError(ArpackError):
    '''Any other status code of the solver, surfaced verbatim.'''
    def __init__(self, info: int, stage: Stage = Stage.ITERATE, description: Optional[str] = None):
        self.stage  = stage
        message     = f"Arpack error (code {info})"
        if description:
            message = f"{message}: {description}"
        super().__init__(ArpackErrorMsg.SOLVER_STATUS, message, info)

class NotConvergedError(ArpackStatusError):
    '''Raised for status 1/2 only when strict convergence was requested.'''
    def __init__(self, status: ArpackStatus, nconv: int, nev: int):
        self.status = status
        self.nconv  = nconv
        super().__init__(int(status), Stage.ITERATE, f"{status.name.lower()}: {nconv} of {nev} Ritz values converged")
        self.code   = ArpackErrorMsg.NOT_CONVERGED

class ReentrantSolveError(ArpackError):
    '''A solve was started while another one is active on the same thread.'''
    def __init__(self, message: Optional[str] = None):
        super().__init__(ArpackErrorMsg.REENTRANT_SOLVE, message)

class ProtocolError(ArpackError):
    '''The solver asked for something the driver cannot serve.'''
    def __init__(self, message: str, info: Optional[int] = None):
        super().__init__(ArpackErrorMsg.PROTOCOL_VIOLATION, message, info)

class ArpackLibraryError(ArpackError):
    '''The native library or one of its entry points is not available.'''
    def __init__(self, message: str):
        super().__init__(ArpackErrorMsg.LIBRARY_NOT_FOUND, message)

# -----------------------------------------------------------------------------
#! Classification
# -----------------------------------------------------------------------------

MSG_N_POSITIVE      = "N must be positive."
MSG_NEV_POSITIVE    = "NEV must be positive."
MSG_NCV_RANGE       = "NCV-NEV >= 2 and less than or equal to N."
MSG_MAXITER         = "Maximum iterations must be greater than 0."

# -5 shares the maximum-iterations reason
ILLEGAL_PARAMETER_REASONS = {
    -1 : MSG_N_POSITIVE,
    -2 : MSG_NEV_POSITIVE,
    -3 : MSG_NCV_RANGE,
    -4 : MSG_MAXITER,
    -5 : MSG_MAXITER,
}

# Descriptions from the ARPACK documentation, used only to enrich messages.
_ITERATE_DESCRIPTIONS = {
    -6      : "BMAT must be one of 'I' or 'G'.",
    -7      : "Length of private work array WORKL is not sufficient.",
    -8      : "Error return from LAPACK eigenvalue calculation.",
    -9      : "Starting vector is zero.",
    -10     : "IPARAM(7) must be 1,2,3,4,5.",
    -11     : "IPARAM(7) = 1 and BMAT = 'G' are incompatible.",
    -12     : "IPARAM(1) must be equal to 0 or 1.",
    -13     : "NEV and WHICH = 'BE' are incompatible.",
    -9999   : "Could not build an Arnoldi factorization.",
    3       : "No shifts could be applied during a cycle of the implicitly restarted iteration.",
}

_EXTRACT_DESCRIPTIONS = {
    -6      : "BMAT must be one of 'I' or 'G'.",
    -7      : "Length of private work WORKL array is not sufficient.",
    -8      : "Error return from LAPACK eigenvalue calculation.",
    -9      : "Error return from calculation of eigenvectors.",
    -10     : "IPARAM(7) must be 1,2,3,4,5.",
    -11     : "IPARAM(7) = 1 and BMAT = 'G' are incompatible.",
    -12     : "HOWMNY = 'S' not yet implemented.",
    -13     : "HOWMNY must be one of 'A' or 'P' if RVEC = .true.",
    -14     : "No Ritz values to sufficient accuracy were found.",
    -15     : "Number of converged Ritz values differs between the iteration and the extraction.",
}

def describe_info(info: int, stage: Stage = Stage.ITERATE) -> Optional[str]:
    '''
    Documented meaning of a status code, if known.
    '''
    table = _ITERATE_DESCRIPTIONS if stage is Stage.ITERATE else _EXTRACT_DESCRIPTIONS
    return table.get(info)

def classify_info(info: int, stage: Stage = Stage.ITERATE) -> ArpackStatus:
    '''
    Map the solver status code to a termination status or raise.

    Args:
        info:
            Value of the status code after the call.
        stage:
            Call that produced it; only changes the description attached to
            unknown codes.
    Returns:
        ArpackStatus for the codes 0, 1 and 2.
    Raises:
        IllegalParameterError:
            for -1 .. -5
        ArpackStatusError:
            for every other code
    '''
    info = int(info)
    if info in (0, 1, 2):
        return ArpackStatus(info)
    if info in ILLEGAL_PARAMETER_REASONS:
        raise IllegalParameterError(ILLEGAL_PARAMETER_REASONS[info], info)
    raise ArpackStatusError(info, stage, describe_info(info, stage))

# -----------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------
