"""
SB10FD Binding

Marshaling layer between Python and the SLICOT routine SB10FD, which
computes an H-infinity (sub)optimal n-state controller

        | AK | BK |
    K = |----|----|
        | CK | DK |

for the continuous-time generalized plant

        | A  | B1  B2  |   | A | B |
    P = |----|---------| = |---|---|
        | C1 | D11 D12 |   | C | D |
        | C2 | D21 D22 |

so that the closed loop from w to z has H-infinity norm below GAMMA. The
Riccati solver itself lives in the compiled SLICOT library shipped with
slycot; this module only derives dimensions, sizes the workspace, makes one
blocking call, and reports what came back.

Kernel outcome
--------------
`call_sb10fd` never raises on kernel failure. It returns a `KernelResult`
tagged SUCCESS, KERNEL_EXCEPTION or STATUS_FAILURE and `slsb10fd` turns
that tag into a return value or an exception.

Arguments SB10FD would reject (INFO < 0) are reported as STATUS_FAILURE
with minus the position of the offending argument in the routine's
calling sequence:

    N=1  M=2  NP=3  NCON=4  NMEAS=5  GAMMA=6
    A=7  LDA=8  B=9  LDB=10  C=11  LDC=12  D=13  LDD=14
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
import slycot
from slycot import _wrapper
from slycot.exceptions import SlycotError

from .exceptions import SlicotKernelException, SlicotStatusError, SlicotUsageError
from .workspace import WorkspaceSizes, compute_workspace


ROUTINE = "SB10FD"
USAGE = "[AK, BK, CK, DK] = slsb10fd (A, B, C, D, NCON, NMEAS, GAMMA)"
N_ARGS = 7

# TOL <= 0 lets SB10FD pick its own default, sqrt(machine epsilon)
DEFAULT_TOL = 0.0

# SB10FD calling-sequence position of each slycot.sb10fd keyword
ARGUMENT_POSITIONS = {
    'n': 1, 'm': 2, 'np': 3, 'ncon': 4, 'nmeas': 5, 'gamma': 6,
    'a': 7, 'b': 9, 'c': 11, 'd': 13, 'tol': 24, 'ldwork': 27,
}

_WRAPPER_ARGUMENT = re.compile(r"argument\s+`?(\w+)")


class KernelOutcome(Enum):
    """Tag for the three ways a kernel call can end."""
    SUCCESS = "success"
    KERNEL_EXCEPTION = "kernel_exception"
    STATUS_FAILURE = "status_failure"


@dataclass
class ControllerRealization:
    """
    State-space realization of the synthesized controller.

    Attributes
    ----------
    AK : np.ndarray
        Controller state matrix (n x n)
    BK : np.ndarray
        Controller input matrix (n x nmeas)
    CK : np.ndarray
        Controller output matrix (ncon x n)
    DK : np.ndarray
        Controller feedthrough matrix (ncon x nmeas)
    rcond : np.ndarray
        Reciprocal condition numbers of the four internal stages:
        [0] control transformation, [1] measurement transformation,
        [2] X-Riccati equation, [3] Y-Riccati equation
    """
    AK: np.ndarray
    BK: np.ndarray
    CK: np.ndarray
    DK: np.ndarray
    rcond: np.ndarray

    def as_tuple(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        return self.AK, self.BK, self.CK, self.DK

    @property
    def order(self) -> int:
        return self.AK.shape[0]


@dataclass
class KernelResult:
    """Tagged result of one SB10FD invocation."""
    outcome: KernelOutcome
    workspace: WorkspaceSizes
    gamma: float
    info: int = 0
    realization: Optional[ControllerRealization] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.outcome is KernelOutcome.SUCCESS

    def unwrap(self) -> ControllerRealization:
        """
        Return the controller or raise the matching binding error.

        Raises
        ------
        SlicotKernelException
            The kernel trapped a numerical fault
        SlicotStatusError
            The kernel returned a nonzero INFO
        """
        if self.outcome is KernelOutcome.KERNEL_EXCEPTION:
            raise SlicotKernelException(ROUTINE) from self.error
        if self.outcome is KernelOutcome.STATUS_FAILURE:
            raise SlicotStatusError(self.info, ROUTINE) from self.error
        return self.realization


def _fortran_matrix(value) -> np.ndarray:
    """Private column-major float64 copy of a matrix argument."""
    return np.array(np.atleast_2d(value), dtype=float, order='F', copy=True)


def check_arguments(ws: WorkspaceSizes, a, b, c, d, gamma: float) -> int:
    """
    Run SB10FD's own argument checks before the call.

    Returns
    -------
    int
        0 when the arguments are consistent, otherwise minus the position
        of the first argument the routine would reject
    """
    n = ws.n
    if ws.ncon < 0 or ws.m1 < 0 or ws.m2 > ws.np1:
        return -4
    if ws.nmeas < 0 or ws.np1 < 0 or ws.np2 > ws.m1:
        return -5
    if gamma < 0:
        return -6
    if a.shape[1] != n:
        return -7
    if b.shape[0] > n:
        return -9
    if b.shape[0] < n:
        return -10
    if c.shape[1] != n:
        return -11
    if d.shape[1] != ws.m or d.shape[0] > ws.np:
        return -13
    if d.shape[0] < ws.np:
        return -14
    return 0


def _wrapper_status(error: Exception) -> int:
    """Negative SB10FD position of the argument the compiled wrapper rejected."""
    match = _WRAPPER_ARGUMENT.search(str(error))
    if match is None:
        return 0
    return -ARGUMENT_POSITIONS.get(match.group(1).lower(), 0)


def call_sb10fd(A, B, C, D, ncon, nmeas, gamma, tol: float = DEFAULT_TOL) -> KernelResult:
    """
    Invoke SB10FD once and tag the outcome.

    Parameters
    ----------
    A, B, C, D : array_like
        Generalized plant realization (n x n, n x m, np x n, np x m)
    ncon : int
        Number of control inputs (columns of B2)
    nmeas : int
        Number of measurements (rows of C2)
    gamma : float
        Closed-loop H-infinity norm bound the controller must achieve
    tol : float
        Rank tolerance for the transformations; 0 selects the kernel default

    Returns
    -------
    KernelResult
        SUCCESS with a trimmed `ControllerRealization`, or a failure tag
        with no controller attached
    """
    a = _fortran_matrix(A)
    b = _fortran_matrix(B)
    c = _fortran_matrix(C)
    d = _fortran_matrix(D)
    ncon = int(ncon)
    nmeas = int(nmeas)
    gamma = float(gamma)

    n = a.shape[0]
    m = b.shape[1]
    np_ = c.shape[0]

    ws = compute_workspace(n, m, np_, ncon, nmeas, rows_b=b.shape[0], rows_d=d.shape[0])

    info = check_arguments(ws, a, b, c, d, gamma)
    if info:
        return KernelResult(KernelOutcome.STATUS_FAILURE, ws, gamma, info=info)

    try:
        ak, bk, ck, dk, rcond = slycot.sb10fd(
            n, m, np_, ncon, nmeas, gamma,
            a, b, c, d,
            float(tol),
            ldwork=ws.ldwork,
        )
    except SlycotError as e:
        return KernelResult(KernelOutcome.STATUS_FAILURE, ws, gamma, info=e.info, error=e)
    except (getattr(_wrapper, "__wrapper_error"), ValueError) as e:
        info = _wrapper_status(e)
        if info:
            return KernelResult(KernelOutcome.STATUS_FAILURE, ws, gamma, info=info, error=e)
        return KernelResult(KernelOutcome.KERNEL_EXCEPTION, ws, gamma, info=0, error=e)
    except ArithmeticError as e:
        return KernelResult(KernelOutcome.KERNEL_EXCEPTION, ws, gamma, info=0, error=e)

    realization = ControllerRealization(
        AK=np.array(ak[:n, :n]),
        BK=np.array(bk[:n, :nmeas]),
        CK=np.array(ck[:ncon, :n]),
        DK=np.array(dk[:ncon, :nmeas]),
        rcond=np.array(rcond, dtype=float).ravel(),
    )
    return KernelResult(KernelOutcome.SUCCESS, ws, gamma, realization=realization)


def slsb10fd(*args) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    H-infinity (sub)optimal controller for a continuous-time system.

    Usage: AK, BK, CK, DK = slsb10fd(A, B, C, D, ncon, nmeas, gamma)

    The rank tolerance is fixed to 0 (kernel default).

    Raises
    ------
    SlicotUsageError
        Not exactly seven positional arguments; the kernel is not called
    SlicotKernelException
        Numerical fault inside SB10FD
    SlicotStatusError
        SB10FD returned, or would return, a nonzero INFO
    """
    if len(args) != N_ARGS:
        raise SlicotUsageError(f"Invalid call to slsb10fd.  Correct usage is:\n\n -- {USAGE}")

    return call_sb10fd(*args).unwrap().as_tuple()
