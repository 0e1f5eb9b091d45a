"""
Generalized Plant Models for H-infinity Synthesis

This module provides the plant container used by the synthesis tools, the
standard assumption checks of the H-infinity output-feedback problem, and a
small catalogue of benchmark plants with known feasibility.

Channel partition
-----------------
                 w (m1)   u (m2 = ncon)
              +---------+---------+
    z (np1)   |   D11   |   D12   |
              +---------+---------+
    y (np2)   |   D21   |   D22   |
              +---------+---------+
    np2 = nmeas
"""

import warnings
import numpy as np
from typing import Dict, List
import control as ctrl
from dataclasses import dataclass
from scipy import linalg


class PlantAssumptionWarning(UserWarning):
    """A standard H-infinity plant assumption does not hold."""


@dataclass
class PlantModel:
    """Container for a partitioned generalized plant."""
    A: np.ndarray
    B: np.ndarray
    C: np.ndarray
    D: np.ndarray
    ncon: int
    nmeas: int
    name: str = "plant"
    input_names: List[str] = None
    output_names: List[str] = None

    def __post_init__(self):
        self.A = np.atleast_2d(np.asarray(self.A, dtype=float))
        self.B = np.atleast_2d(np.asarray(self.B, dtype=float))
        self.C = np.atleast_2d(np.asarray(self.C, dtype=float))
        self.D = np.atleast_2d(np.asarray(self.D, dtype=float))
        self.ncon = int(self.ncon)
        self.nmeas = int(self.nmeas)

        n = self.A.shape[0]
        if self.A.shape != (n, n):
            raise ValueError(f"A must be square, got {self.A.shape}")
        if self.B.shape[0] != n:
            raise ValueError(f"B must have {n} rows, got {self.B.shape[0]}")
        if self.C.shape[1] != n:
            raise ValueError(f"C must have {n} columns, got {self.C.shape[1]}")
        if self.D.shape != (self.C.shape[0], self.B.shape[1]):
            raise ValueError(
                f"D must be {self.C.shape[0]}x{self.B.shape[1]}, got {self.D.shape}"
            )
        if not 1 <= self.ncon <= self.m:
            raise ValueError(f"ncon must be in [1, {self.m}], got {self.ncon}")
        if not 1 <= self.nmeas <= self.p:
            raise ValueError(f"nmeas must be in [1, {self.p}], got {self.nmeas}")
        if self.input_names is not None and len(self.input_names) != self.m:
            raise ValueError(f"expected {self.m} input names, got {len(self.input_names)}")
        if self.output_names is not None and len(self.output_names) != self.p:
            raise ValueError(f"expected {self.p} output names, got {len(self.output_names)}")

    @property
    def n(self) -> int:
        return self.A.shape[0]

    @property
    def m(self) -> int:
        return self.B.shape[1]

    @property
    def p(self) -> int:
        """Total outputs (NP in SLICOT notation)."""
        return self.C.shape[0]

    @property
    def m1(self) -> int:
        return self.m - self.ncon

    @property
    def m2(self) -> int:
        return self.ncon

    @property
    def np1(self) -> int:
        return self.p - self.nmeas

    @property
    def np2(self) -> int:
        return self.nmeas

    def partition(self) -> Dict[str, np.ndarray]:
        """Split B, C and D along the exogenous/control channel boundary."""
        m1, np1 = self.m1, self.np1
        return {
            'B1': self.B[:, :m1],
            'B2': self.B[:, m1:],
            'C1': self.C[:np1, :],
            'C2': self.C[np1:, :],
            'D11': self.D[:np1, :m1],
            'D12': self.D[:np1, m1:],
            'D21': self.D[np1:, :m1],
            'D22': self.D[np1:, m1:],
        }

    def matrices(self):
        return self.A, self.B, self.C, self.D

    def to_control(self) -> ctrl.StateSpace:
        """Convert to python-control StateSpace object, carrying signal names."""
        names = {}
        if self.input_names is not None:
            names['inputs'] = list(self.input_names)
        if self.output_names is not None:
            names['outputs'] = list(self.output_names)
        return ctrl.ss(self.A, self.B, self.C, self.D, **names)

    @classmethod
    def from_control(cls, sys: ctrl.StateSpace, ncon: int, nmeas: int,
                     name: str = "plant") -> "PlantModel":
        """Wrap a continuous-time python-control StateSpace."""
        if not ctrl.isctime(sys):
            raise ValueError("H-infinity synthesis with SB10FD requires a continuous-time plant")
        return cls(np.array(sys.A), np.array(sys.B), np.array(sys.C), np.array(sys.D),
                   ncon, nmeas, name=name)


def _rank(M: np.ndarray, tol: float = None) -> int:
    """Numerical rank from singular values."""
    if M.size == 0:
        return 0
    s = linalg.svdvals(M)
    if tol is None:
        tol = max(M.shape) * np.finfo(float).eps * (s[0] if s.size else 0.0)
    return int(np.sum(s > tol))


class PlantModeler:
    """Assumption checks and benchmark plants."""

    def __init__(self):
        self.models = {}

    def check_assumptions(self, plant: PlantModel, warn: bool = True) -> Dict[str, bool]:
        """
        Check the standard output-feedback H-infinity assumptions.

        Parameters
        ----------
        plant : PlantModel
            Partitioned generalized plant
        warn : bool
            Emit a PlantAssumptionWarning for every failed check

        Returns
        -------
        Dict[str, bool]
            {assumption_name: holds}
        """
        blocks = plant.partition()
        n = plant.n

        results = {
            'd12_full_column_rank': _rank(blocks['D12']) == plant.m2,
            'd21_full_row_rank': _rank(blocks['D21']) == plant.np2,
            'stabilizable': self._pbh_rank_test(plant.A, blocks['B2'], n),
            'detectable': self._pbh_rank_test(plant.A.T, blocks['C2'].T, n),
        }

        if warn:
            for name, holds in results.items():
                if not holds:
                    warnings.warn(f"{plant.name}: assumption '{name}' does not hold",
                                  PlantAssumptionWarning)

        return results

    @staticmethod
    def _pbh_rank_test(A: np.ndarray, B: np.ndarray, n: int) -> bool:
        """PBH test restricted to eigenvalues in the closed right half-plane."""
        for lam in linalg.eigvals(A):
            if lam.real < 0:
                continue
            M = np.hstack([A - lam * np.eye(n), B])
            if _rank(M) < n:
                return False
        return True

    def get_benchmark(self, name: str) -> PlantModel:
        """Return a catalogued plant by name."""
        builders = {
            'sb10fd_example': self.create_sb10fd_example,
            'first_order': self.create_first_order_plant,
            'feedthrough_floor': self.create_feedthrough_floor_plant,
        }
        if name not in builders:
            raise ValueError(f"Unknown benchmark plant: {name}. "
                             f"Available: {sorted(builders)}")
        plant = builders[name]()
        self.models[name] = plant
        return plant

    def create_sb10fd_example(self) -> PlantModel:
        """
        Six-state example plant from the SLICOT SB10FD documentation.

        n = 6, m = 5, np = 5, ncon = 2, nmeas = 2; feasible at gamma = 15.
        """
        A = np.array([
            [-1.0,  0.0,  4.0,  5.0, -3.0, -2.0],
            [-2.0,  4.0, -7.0, -2.0,  0.0,  3.0],
            [-6.0,  9.0, -5.0,  0.0,  2.0, -1.0],
            [-8.0,  4.0,  7.0, -1.0, -3.0,  0.0],
            [ 2.0,  5.0,  8.0, -9.0,  1.0, -4.0],
            [ 3.0, -5.0,  8.0,  0.0,  2.0, -6.0],
        ])
        B = np.array([
            [-3.0, -4.0, -2.0,  1.0,  0.0],
            [ 2.0,  0.0,  1.0, -5.0,  2.0],
            [-5.0, -7.0,  0.0,  7.0, -2.0],
            [ 4.0, -6.0,  1.0,  1.0, -2.0],
            [-3.0,  9.0, -8.0,  0.0,  5.0],
            [ 1.0, -2.0,  3.0, -6.0, -2.0],
        ])
        C = np.array([
            [ 1.0, -1.0,  2.0, -4.0,  0.0, -3.0],
            [-3.0,  0.0,  5.0, -1.0,  1.0,  1.0],
            [-7.0,  5.0,  0.0, -8.0,  2.0, -2.0],
            [ 9.0, -3.0,  4.0,  0.0,  3.0,  7.0],
            [ 0.0,  1.0, -2.0,  1.0, -6.0, -2.0],
        ])
        D = np.array([
            [ 1.0, -2.0, -3.0,  0.0,  0.0],
            [ 0.0,  4.0,  0.0,  1.0,  0.0],
            [ 5.0, -3.0, -4.0,  0.0,  1.0],
            [ 0.0,  1.0,  0.0,  1.0, -3.0],
            [ 0.0,  0.0,  1.0,  7.0,  1.0],
        ])
        return PlantModel(A, B, C, D, ncon=2, nmeas=2, name='sb10fd_example')

    def create_first_order_plant(self, pole: float = -1.0) -> PlantModel:
        """
        First-order SISO loop with unit weights.

        x' = pole*x + w + u,  z = x + u,  y = x + w
        """
        A = np.array([[pole]])
        B = np.array([[1.0, 1.0]])
        C = np.array([[1.0], [1.0]])
        D = np.array([[0.0, 1.0], [1.0, 0.0]])
        return PlantModel(A, B, C, D, ncon=1, nmeas=1, name='first_order',
                          input_names=['w', 'u'], output_names=['z', 'y'])

    def create_feedthrough_floor_plant(self) -> PlantModel:
        """
        Plant whose performance output sees the disturbance directly.

        x' = -x + w + u,  z1 = x + w,  z2 = u,  y = x + w

        z1 contains w itself at high frequency, so no controller reaches a
        closed-loop norm below 1: infeasible for every gamma < 1.
        """
        A = np.array([[-1.0]])
        B = np.array([[1.0, 1.0]])
        C = np.array([[1.0], [0.0], [1.0]])
        D = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 0.0]])
        return PlantModel(A, B, C, D, ncon=1, nmeas=1, name='feedthrough_floor',
                          input_names=['w', 'u'], output_names=['z1', 'z2', 'y'])


BENCHMARK_GAMMAS = {
    'sb10fd_example': 15.0,
    'first_order': 10.0,
    'feedthrough_floor': 10.0,
}
