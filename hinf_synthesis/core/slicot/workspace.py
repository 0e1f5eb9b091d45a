"""
SB10FD Workspace Sizing

Leading dimensions and scratch-array lengths for the SLICOT routine SB10FD.
The formulas below are the minimum sizes documented by SLICOT for the
routine's argument list; they must be reproduced exactly, an undersized
DWORK makes the kernel fail or corrupt memory.

Channel partition of the generalized plant
------------------------------------------
    m1  = m - ncon     exogenous inputs  (disturbances w)
    m2  = ncon         control inputs    (u)
    np1 = np - nmeas   performance outputs (z)
    np2 = nmeas        measured outputs  (y)
"""

from dataclasses import dataclass, asdict
from typing import Dict


@dataclass(frozen=True)
class WorkspaceSizes:
    """Integer parameters handed to SB10FD alongside the matrices."""
    n: int
    m: int
    np: int
    ncon: int
    nmeas: int

    # Leading dimensions (Fortran forbids zero)
    lda: int
    ldb: int
    ldc: int
    ldd: int
    ldak: int
    ldbk: int
    ldck: int
    lddk: int

    # Channel partition
    m1: int
    m2: int
    np1: int
    np2: int
    q: int

    # Scratch lengths
    liwork: int
    ldwork: int
    lbwork: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def leading_dimension(rows: int) -> int:
    """Fortran leading dimension for a matrix with `rows` rows."""
    return max(1, rows)


def integer_workspace_size(n: int, m: int, np: int, ncon: int, nmeas: int) -> int:
    """LIWORK = max(2*max(N, M-NCON, NP-NMEAS, NCON), N*N)."""
    return max(2 * max(n, m - ncon, np - nmeas, ncon), n * n)


def real_workspace_size(n: int, q: int) -> int:
    """
    LDWORK for SB10FD.

    Parameters
    ----------
    n : int
        Plant order
    q : int
        max(m1, m2, np1, np2)

    Returns
    -------
    int
        Minimum length of the double precision work array
    """
    return 2 * q * (3 * q + 2 * n) + max(
        1,
        (n + q) * (n + q + 6),
        q * (q + max(n, q, 5) + 1),
        2 * n * (n + 2 * q) + max(
            1,
            4 * q * q + max(2 * q, 3 * n * n + max(2 * n * q, 10 * n * n + 12 * n + 5)),
            q * (3 * n + 3 * q + max(2 * n, 4 * q + max(n, q))),
        ),
    )


def boolean_workspace_size(n: int) -> int:
    return 2 * n


def compute_workspace(
    n: int,
    m: int,
    np: int,
    ncon: int,
    nmeas: int,
    rows_b: int = None,
    rows_d: int = None,
) -> WorkspaceSizes:
    """
    Derive every integer argument SB10FD needs from the plant dimensions.

    Parameters
    ----------
    n, m, np : int
        Plant order, total inputs and total outputs
    ncon, nmeas : int
        Control inputs and measured outputs used by the controller
    rows_b, rows_d : int, optional
        Actual row counts of B and D when they differ from n and np
        (malformed input is left for the kernel's own argument checks)

    Returns
    -------
    WorkspaceSizes
        Leading dimensions, channel partition and scratch lengths
    """
    rows_b = n if rows_b is None else rows_b
    rows_d = np if rows_d is None else rows_d

    m2 = ncon
    m1 = m - m2
    np1 = np - nmeas
    np2 = nmeas
    q = max(m1, m2, np1, np2)

    return WorkspaceSizes(
        n=n, m=m, np=np, ncon=ncon, nmeas=nmeas,
        lda=leading_dimension(n),
        ldb=leading_dimension(rows_b),
        ldc=leading_dimension(np),
        ldd=leading_dimension(rows_d),
        ldak=leading_dimension(n),
        ldbk=leading_dimension(n),
        ldck=leading_dimension(ncon),
        lddk=leading_dimension(ncon),
        m1=m1, m2=m2, np1=np1, np2=np2, q=q,
        liwork=integer_workspace_size(n, m, np, ncon, nmeas),
        ldwork=real_workspace_size(n, q),
        lbwork=boolean_workspace_size(n),
    )
