"""
H-infinity Synthesis Configuration

This module collects the tunable parameters of a synthesis run in one place:
the fixed-gamma synthesis settings and the bounds of the gamma bisection.
Both are plain dataclasses so they can be stored next to the results and
reloaded from a JSON run file.
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict


def _filter_known(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys that are not fields of dataclass `cls`."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class SynthesisConfig:
    """
    Settings for one fixed-gamma H-infinity synthesis.

    Attributes
    ----------
    gamma : float
        Closed-loop H-infinity norm bound passed to SB10FD
    tol : float
        Rank tolerance for the kernel transformations (0 = kernel default)
    rcond_warning_threshold : float
        Warn when any reciprocal condition number falls below this value
    check_closed_loop : bool
        Form the closed loop and compute its poles and H-infinity norm
    stability_margin : float
        Closed-loop poles must satisfy Re(p) < -stability_margin
    """
    gamma: float = 10.0
    tol: float = 0.0
    rcond_warning_threshold: float = 1e-10
    check_closed_loop: bool = True
    stability_margin: float = 0.0

    def __post_init__(self):
        if not self.gamma > 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.tol < 0:
            raise ValueError(f"tol must be non-negative, got {self.tol}")
        if self.rcond_warning_threshold < 0:
            raise ValueError("rcond_warning_threshold must be non-negative")
        if self.stability_margin < 0:
            raise ValueError("stability_margin must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SynthesisConfig":
        return cls(**_filter_known(cls, data))


@dataclass
class GammaSearchConfig:
    """
    Bisection bounds for the smallest feasible gamma.

    Attributes
    ----------
    gamma_min : float
        Lower bracket (assumed infeasible or at the optimum)
    gamma_max : float
        Upper bracket (must be feasible)
    rtol : float
        Stop when (gamma_max - gamma_min) < rtol * gamma_min
    max_iter : int
        Hard cap on kernel calls made by the bisection
    """
    gamma_min: float = 1e-3
    gamma_max: float = 1e4
    rtol: float = 1e-3
    max_iter: int = 100

    def __post_init__(self):
        if not 0 < self.gamma_min < self.gamma_max:
            raise ValueError(
                f"Need 0 < gamma_min < gamma_max, got [{self.gamma_min}, {self.gamma_max}]"
            )
        if self.rtol <= 0:
            raise ValueError(f"rtol must be positive, got {self.rtol}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {self.max_iter}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GammaSearchConfig":
        return cls(**_filter_known(cls, data))
