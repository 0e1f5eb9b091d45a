"""
hinf_synthesis - H-infinity Controller Synthesis via SLICOT SB10FD
=================================================================
Python binding and design tooling around the SLICOT routine SB10FD, which
computes an H-infinity (sub)optimal output-feedback controller for a
continuous-time generalized plant at a fixed gamma.

Modules:
--------
- core.slicot: Kernel binding (workspace sizing, tagged call, slsb10fd)
- core.synthesis_logger: JSON persistence of synthesis runs
- control_design: Plant models, synthesis, gamma bisection, analysis
- runner: Command-line entry point
"""

from .core.slicot import (
    slsb10fd,
    call_sb10fd,
    compute_workspace,
    SlicotBindingError,
    SlicotUsageError,
    SlicotKernelException,
    SlicotStatusError
)

__version__ = '1.0.0'
__all__ = [
    'slsb10fd',
    'call_sb10fd',
    'compute_workspace',
    'SlicotBindingError',
    'SlicotUsageError',
    'SlicotKernelException',
    'SlicotStatusError',
]
