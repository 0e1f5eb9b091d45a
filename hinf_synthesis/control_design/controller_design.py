"""
H-infinity Controller Design

This module turns a partitioned generalized plant into an H-infinity
(sub)optimal output-feedback controller by way of the SLICOT SB10FD kernel,
and closes the loop so the result can be checked against the requested
gamma.

The design process:
1. Plant model (PlantModel or python-control StateSpace + partition)
2. Assumption checks (rank of D12/D21, stabilizability, detectability)
3. One fixed-gamma kernel call
4. Controller packaging as a python-control StateSpace
5. Closed-loop stability and H-infinity norm

Sign convention: SLICOT returns K for positive feedback, u = K y, which is
the convention of the lower LFT used to form the closed loop.
"""

import warnings
import numpy as np
from typing import Dict, Optional, Union
from dataclasses import dataclass
import control as ctrl

from ..core.slicot import ControllerRealization, WorkspaceSizes, call_sb10fd
from .analysis_tools import ClosedLoopAnalyzer
from .synthesis_config import SynthesisConfig
from .system_models import PlantModel, PlantModeler


class IllConditionedSynthesisWarning(UserWarning):
    """A reciprocal condition number reported by the kernel is very small."""


RCOND_LABELS = (
    'control_transformation',
    'measurement_transformation',
    'x_riccati',
    'y_riccati',
)


@dataclass
class SynthesisResult:
    """Outcome of one successful fixed-gamma synthesis."""
    controller: ctrl.StateSpace
    realization: ControllerRealization
    gamma: float
    rcond: np.ndarray
    workspace: WorkspaceSizes
    closed_loop: Optional[ctrl.StateSpace] = None
    closed_loop_norm: float = float('nan')
    stable: Optional[bool] = None

    def rcond_report(self) -> Dict[str, float]:
        return {label: float(v) for label, v in zip(RCOND_LABELS, self.rcond)}


def build_closed_loop(plant: ctrl.StateSpace, controller: ctrl.StateSpace,
                      ncon: int, nmeas: int) -> ctrl.StateSpace:
    """Lower LFT F_l(P, K): the closed loop from w to z."""
    return plant.lft(controller, nu=ncon, ny=nmeas)


class HinfController:
    """H-infinity (sub)optimal output-feedback controller."""

    def __init__(self, config: Optional[SynthesisConfig] = None):
        self.config = config or SynthesisConfig()
        self.result: Optional[SynthesisResult] = None
        self.is_tuned = False

    def design(self, plant: PlantModel) -> SynthesisResult:
        """
        Synthesize the controller for `plant` at the configured gamma.

        Raises
        ------
        SlicotKernelException
            Numerical fault inside SB10FD
        SlicotStatusError
            SB10FD reported that no admissible controller was found
        """
        cfg = self.config
        kernel = call_sb10fd(plant.A, plant.B, plant.C, plant.D,
                             plant.ncon, plant.nmeas, cfg.gamma, tol=cfg.tol)
        realization = kernel.unwrap()

        self._check_conditioning(realization.rcond)

        K = ctrl.ss(realization.AK, realization.BK, realization.CK, realization.DK)
        result = SynthesisResult(
            controller=K,
            realization=realization,
            gamma=cfg.gamma,
            rcond=realization.rcond,
            workspace=kernel.workspace,
        )

        if cfg.check_closed_loop:
            result.closed_loop = build_closed_loop(plant.to_control(), K, plant.ncon, plant.nmeas)
            analysis = ClosedLoopAnalyzer(cfg.stability_margin).analyze_system(result.closed_loop)
            result.stable = analysis.stable
            result.closed_loop_norm = analysis.hinf_norm
            if not analysis.stable:
                warnings.warn(f"{plant.name}: closed loop is not stable at gamma = {cfg.gamma}")
            elif analysis.hinf_norm >= cfg.gamma:
                warnings.warn(
                    f"{plant.name}: closed-loop norm {analysis.hinf_norm:.6g} "
                    f"does not satisfy gamma = {cfg.gamma}"
                )

        self.result = result
        self.is_tuned = True
        return result

    def _check_conditioning(self, rcond: np.ndarray) -> None:
        threshold = self.config.rcond_warning_threshold
        for label, value in zip(RCOND_LABELS, rcond):
            if value < threshold:
                warnings.warn(
                    f"SB10FD {label} rcond = {value:.3e} below {threshold:.1e}",
                    IllConditionedSynthesisWarning
                )

    def get_state_space(self) -> ctrl.StateSpace:
        """Return the controller realization."""
        if not self.is_tuned:
            raise RuntimeError("Controller has not been designed")
        return self.result.controller

    def get_transfer_function(self) -> ctrl.TransferFunction:
        """Return controller transfer function."""
        return ctrl.ss2tf(self.get_state_space())


class ControllerDesigner:
    """Main controller design interface."""

    def __init__(self):
        self.controllers = {}
        self.modeler = PlantModeler()

    def hinfsyn(self, plant: Union[PlantModel, ctrl.StateSpace],
                ncon: Optional[int] = None, nmeas: Optional[int] = None,
                config: Optional[SynthesisConfig] = None,
                name: str = 'hinf') -> SynthesisResult:
        """
        Design an H-infinity controller at a fixed gamma.

        Parameters
        ----------
        plant : PlantModel or ctrl.StateSpace
            Generalized plant; a StateSpace also needs `ncon` and `nmeas`
        ncon : int, optional
            Number of control inputs (last columns of B)
        nmeas : int, optional
            Number of measurements (last rows of C)
        config : SynthesisConfig, optional
            Gamma, tolerance and closed-loop checks
        name : str
            Key under which the controller is stored

        Returns
        -------
        SynthesisResult
            Controller, closed loop, conditioning report
        """
        if isinstance(plant, ctrl.StateSpace):
            if ncon is None or nmeas is None:
                raise ValueError("ncon and nmeas are required for a StateSpace plant")
            plant = PlantModel.from_control(plant, ncon, nmeas)
        elif ncon is not None or nmeas is not None:
            if (ncon, nmeas) != (plant.ncon, plant.nmeas):
                raise ValueError(
                    f"Partition ({ncon}, {nmeas}) conflicts with plant "
                    f"partition ({plant.ncon}, {plant.nmeas})"
                )

        self.modeler.check_assumptions(plant)

        controller = HinfController(config)
        result = controller.design(plant)
        self.controllers[name] = controller
        return result

    def get_controller(self, name: str) -> Optional[HinfController]:
        """Retrieve a designed controller."""
        return self.controllers.get(name)
