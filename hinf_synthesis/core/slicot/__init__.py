"""
SLICOT Binding
==============
Marshaling layer for the SLICOT H-infinity synthesis routine SB10FD.

Modules:
--------
- workspace: Leading dimensions and scratch-array lengths
- sb10fd_binding: Kernel call, tagged outcome and the seven-argument entry point
- exceptions: Usage, kernel-exception and status-code errors
"""

from .exceptions import (
    SlicotBindingError,
    SlicotUsageError,
    SlicotKernelException,
    SlicotStatusError
)
from .workspace import WorkspaceSizes, compute_workspace
from .sb10fd_binding import (
    ControllerRealization,
    KernelOutcome,
    KernelResult,
    call_sb10fd,
    slsb10fd
)

__all__ = [
    'SlicotBindingError',
    'SlicotUsageError',
    'SlicotKernelException',
    'SlicotStatusError',
    'WorkspaceSizes',
    'compute_workspace',
    'ControllerRealization',
    'KernelOutcome',
    'KernelResult',
    'call_sb10fd',
    'slsb10fd',
]
