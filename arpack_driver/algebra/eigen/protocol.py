"""
Reverse-Communication Protocol

After every forward step the solver leaves a token (`ido`) and, for
matrix-vector requests, two 1-based offsets into the scratch buffer in the
pointer array. `decode_token` turns that into one of three states:

    Idle            - the token before the first call
    RequestMatVec   - compute y = OP x, x at `source`, y at `target`
    Terminated      - the loop is over, look at `info`

Offsets are translated to 0-based slices and bounds-checked here, so nothing
downstream ever sees a raw solver offset.
"""

from typing import NamedTuple, Sequence, Union

from .errors import ProtocolError
from .workspace import IDO_FIRST, IDO_DONE

# ----------------------------------------------------------------------------------------

IDO_MATVEC_INIT     = -1
IDO_MATVEC          = 1
MATVEC_TOKENS       = (IDO_MATVEC_INIT, IDO_MATVEC)

# tokens meaningful only for generalized/shift-invert modes or user shifts
_UNSERVED_TOKENS    = {
    2   : "a product with the mass matrix B",
    3   : "user supplied shifts",
    4   : "a product with OP only (mode 3/4)",
}

# ----------------------------------------------------------------------------------------

class Idle(NamedTuple):
    '''No call has been made yet.'''
    token   : int = IDO_FIRST

class RequestMatVec(NamedTuple):
    '''
    The solver waits for y = OP x.

    Attributes:
        source  : 0-based slice of the scratch buffer holding x
        target  : 0-based slice of the scratch buffer receiving y
        token   : raw token (-1 on the initial request, 1 otherwise)
    '''
    source  : slice
    target  : slice
    token   : int = IDO_MATVEC

class Terminated(NamedTuple):
    '''Converged, hit the iteration limit or failed - see `info`.'''
    token   : int = IDO_DONE

ProtocolState = Union[Idle, RequestMatVec, Terminated]

# ----------------------------------------------------------------------------------------

def offset_to_slice(offset: int, n: int, capacity: int) -> slice:
    '''
    Translate a 1-based solver offset to a 0-based slice of length n.

    Raises:
        ProtocolError: when the range does not fit in the buffer.
    '''
    start = int(offset) - 1
    if start < 0 or start + n > capacity:
        raise ProtocolError(f"Offset {int(offset)} (length {n}) is outside of the scratch buffer of size {capacity}.")
    return slice(start, start + n)

def decode_token(ido: int, ipntr: Sequence[int], n: int, capacity: int) -> ProtocolState:
    '''
    Decode the token left by a forward step.

    Args:
        ido:
            The reverse-communication token.
        ipntr:
            Pointer array; slots 0 and 1 hold the input and output offsets.
        n:
            Length of the vectors exchanged with the operator.
        capacity:
            Size of the scratch buffer the offsets point into.
    Returns:
        The decoded state.
    Raises:
        ProtocolError:
            for tokens the driver does not serve and for bad offsets.
    '''
    ido = int(ido)
    if ido == IDO_DONE:
        return Terminated()
    if ido == IDO_FIRST:
        return Idle()
    if ido in MATVEC_TOKENS:
        source = offset_to_slice(ipntr[0], n, capacity)
        target = offset_to_slice(ipntr[1], n, capacity)
        if source.start < target.stop and target.start < source.stop:
            raise ProtocolError(f"Input {source} and output {target} ranges overlap.")
        return RequestMatVec(source, target, ido)
    if ido in _UNSERVED_TOKENS:
        raise ProtocolError(f"Solver requested {_UNSERVED_TOKENS[ido]} (ido={ido}), which mode 1 never does.")
    raise ProtocolError(f"Unknown reverse-communication token ido={ido}.")

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
