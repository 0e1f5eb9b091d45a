"""
Exceptions raised by the SLICOT binding layer.

Every error is terminal for the call that raised it: no partial controller
is ever returned alongside one of these.
"""


class SlicotBindingError(RuntimeError):
    """Base class for all SB10FD binding failures."""


class SlicotUsageError(SlicotBindingError, TypeError):
    """Malformed call (wrong number of positional arguments)."""


class SlicotKernelException(SlicotBindingError):
    """Numerical fault trapped while the Fortran kernel was running."""

    def __init__(self, routine: str = "SB10FD"):
        self.routine = routine
        super().__init__(
            f"hinfsyn: slsb10fd: exception in SLICOT subroutine {routine}"
        )


class SlicotStatusError(SlicotBindingError):
    """
    Kernel completed but reported a nonzero status code.

    The code is not decoded here; see the SLICOT SB10FD documentation for
    the meaning of each value.
    """

    def __init__(self, info: int, routine: str = "SB10FD"):
        self.info = int(info)
        self.routine = routine
        super().__init__(
            f"hinfsyn: slsb10fd: {routine} returned info = {self.info}"
        )
