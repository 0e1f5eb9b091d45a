"""
Gamma Bisection

SB10FD solves the suboptimal problem at one fixed gamma. This module runs
the outer search for the smallest feasible gamma by bisection, calling the
kernel once per step. A nonzero kernel status marks the trial gamma as
infeasible; a trapped kernel exception aborts the search.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..core.slicot import KernelOutcome, call_sb10fd
from .controller_design import HinfController, SynthesisResult
from .synthesis_config import GammaSearchConfig, SynthesisConfig
from .system_models import PlantModel


@dataclass
class GammaSearchResult:
    """Smallest feasible gamma found and the controller designed at it."""
    gamma: float
    result: SynthesisResult
    iterations: int
    # (gamma, feasible, info) for every kernel call made
    history: List[Tuple[float, bool, int]] = field(default_factory=list)


def _feasible(plant: PlantModel, gamma: float, tol: float) -> Tuple[bool, int]:
    kernel = call_sb10fd(plant.A, plant.B, plant.C, plant.D,
                         plant.ncon, plant.nmeas, gamma, tol=tol)
    if kernel.outcome is KernelOutcome.KERNEL_EXCEPTION:
        kernel.unwrap()  # raises SlicotKernelException
    return kernel.ok, kernel.info


def bisect_gamma(plant: PlantModel,
                 search: Optional[GammaSearchConfig] = None,
                 config: Optional[SynthesisConfig] = None) -> GammaSearchResult:
    """
    Bisection search for the smallest feasible gamma.

    Parameters
    ----------
    plant : PlantModel
        Partitioned generalized plant
    search : GammaSearchConfig, optional
        Initial bracket, relative tolerance and iteration cap
    config : SynthesisConfig, optional
        Settings for the final design; its gamma is replaced by the result

    Returns
    -------
    GammaSearchResult
        Best gamma, the controller designed at it and the search history

    Raises
    ------
    ValueError
        gamma_max is itself infeasible
    SlicotKernelException
        Numerical fault inside SB10FD at some trial gamma
    """
    search = search or GammaSearchConfig()
    config = config or SynthesisConfig()

    history = []
    gamma_min, gamma_max = search.gamma_min, search.gamma_max

    ok, info = _feasible(plant, gamma_max, config.tol)
    history.append((gamma_max, ok, info))
    if not ok:
        raise ValueError(
            f"{plant.name}: gamma_max = {gamma_max} is infeasible (info = {info})"
        )

    iterations = 1
    while iterations < search.max_iter:
        if gamma_max - gamma_min < search.rtol * gamma_min:
            break
        gamma_try = (gamma_min + gamma_max) / 2.0
        ok, info = _feasible(plant, gamma_try, config.tol)
        history.append((gamma_try, ok, info))
        iterations += 1
        if ok:
            gamma_max = gamma_try
        else:
            gamma_min = gamma_try

    final_config = SynthesisConfig.from_dict({**config.to_dict(), 'gamma': gamma_max})
    result = HinfController(final_config).design(plant)

    return GammaSearchResult(gamma=gamma_max, result=result,
                             iterations=iterations, history=history)
