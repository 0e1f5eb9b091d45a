"""
Control Design Module for H-infinity Synthesis

This module provides the tools around the SB10FD kernel call: generalized
plant modeling, fixed-gamma controller synthesis, gamma bisection and
closed-loop analysis.

Key Features:
- Partitioned plant container with python-control conversion
- Standard H-infinity assumption checks (rank, stabilizability, detectability)
- Fixed-gamma synthesis with conditioning diagnostics
- Bisection over gamma for the smallest feasible bound
- Closed-loop stability, H-infinity norm and sigma plots

Design Philosophy:
- The kernel is a black box: nothing here re-derives the Riccati solution
- Every kernel call is independent; no state is carried between calls
- Failures surface as exceptions, diagnostics as warnings
"""

from .controller_design import (
    ControllerDesigner,
    HinfController,
    SynthesisResult,
    IllConditionedSynthesisWarning,
    build_closed_loop
)
from .analysis_tools import ClosedLoopAnalyzer, AnalysisResults
from .system_models import PlantModeler, PlantModel, PlantAssumptionWarning, BENCHMARK_GAMMAS
from .synthesis_config import SynthesisConfig, GammaSearchConfig
from .gamma_search import bisect_gamma, GammaSearchResult

__all__ = [
    "ControllerDesigner",
    "HinfController",
    "SynthesisResult",
    "IllConditionedSynthesisWarning",
    "build_closed_loop",
    "ClosedLoopAnalyzer",
    "AnalysisResults",
    "PlantModeler",
    "PlantModel",
    "PlantAssumptionWarning",
    "BENCHMARK_GAMMAS",
    "SynthesisConfig",
    "GammaSearchConfig",
    "bisect_gamma",
    "GammaSearchResult",
]
