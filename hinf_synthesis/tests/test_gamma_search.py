"""
Unit tests for the gamma bisection.

A threshold stub stands in for the kernel where exact bracketing behaviour
is checked; the real kernel is used for the feedthrough plant whose optimal
gamma is known to lie in [1, 2].
"""

import numpy as np
import pytest
from slycot.exceptions import SlycotArithmeticError

from hinf_synthesis.control_design import (
    GammaSearchConfig,
    PlantModeler,
    SynthesisConfig,
    bisect_gamma
)
from hinf_synthesis.core.slicot import SlicotKernelException, sb10fd_binding


class ThresholdKernel:
    """Feasible exactly when gamma >= threshold."""

    def __init__(self, threshold, trap_below=None):
        self.threshold = threshold
        self.trap_below = trap_below
        self.gammas = []

    def __call__(self, n, m, np_, ncon, nmeas, gamma, A, B, C, D, tol, ldwork=None):
        self.gammas.append(gamma)
        if self.trap_below is not None and gamma < self.trap_below:
            raise FloatingPointError("trapped")
        if gamma < self.threshold:
            raise SlycotArithmeticError("not admissible", 2)
        return (np.zeros((n, n)), np.zeros((n, nmeas)), np.zeros((ncon, n)),
                np.zeros((ncon, nmeas)), np.ones(4))


@pytest.fixture
def plant():
    return PlantModeler().get_benchmark('first_order')


@pytest.fixture
def no_closed_loop():
    return SynthesisConfig(check_closed_loop=False)


class TestBisectionWithStub:
    """Bracketing logic against a known threshold."""

    def test_converges_to_threshold(self, monkeypatch, plant, no_closed_loop):
        kernel = ThresholdKernel(3.0)
        monkeypatch.setattr(sb10fd_binding.slycot, 'sb10fd', kernel)
        search = GammaSearchConfig(gamma_min=0.5, gamma_max=20.0, rtol=1e-4)

        found = bisect_gamma(plant, search, no_closed_loop)

        assert found.gamma >= 3.0
        assert found.gamma == pytest.approx(3.0, rel=1e-3)
        assert found.result.gamma == found.gamma
        # gamma_max check plus one call per bisection step plus the final design
        assert len(kernel.gammas) == found.iterations + 1
        assert found.history[0] == (20.0, True, 0)

    def test_history_records_infeasible_steps(self, monkeypatch, plant, no_closed_loop):
        monkeypatch.setattr(sb10fd_binding.slycot, 'sb10fd', ThresholdKernel(3.0))
        found = bisect_gamma(plant, GammaSearchConfig(gamma_min=0.5, gamma_max=20.0),
                             no_closed_loop)

        infeasible = [(g, info) for g, ok, info in found.history if not ok]
        assert infeasible
        assert all(g < 3.0 and info == 2 for g, info in infeasible)

    def test_max_iter_caps_kernel_calls(self, monkeypatch, plant, no_closed_loop):
        kernel = ThresholdKernel(3.0)
        monkeypatch.setattr(sb10fd_binding.slycot, 'sb10fd', kernel)
        search = GammaSearchConfig(gamma_min=0.5, gamma_max=20.0, rtol=1e-12, max_iter=5)

        found = bisect_gamma(plant, search, no_closed_loop)

        assert found.iterations == 5
        assert len(found.history) == 5

    def test_infeasible_upper_bracket(self, monkeypatch, plant, no_closed_loop):
        monkeypatch.setattr(sb10fd_binding.slycot, 'sb10fd', ThresholdKernel(100.0))

        with pytest.raises(ValueError, match="infeasible"):
            bisect_gamma(plant, GammaSearchConfig(gamma_min=1.0, gamma_max=10.0),
                         no_closed_loop)

    def test_kernel_exception_aborts(self, monkeypatch, plant, no_closed_loop):
        monkeypatch.setattr(sb10fd_binding.slycot, 'sb10fd',
                            ThresholdKernel(3.0, trap_below=5.0))

        with pytest.raises(SlicotKernelException):
            bisect_gamma(plant, GammaSearchConfig(gamma_min=0.5, gamma_max=20.0),
                         no_closed_loop)


class TestBisectionWithKernel:
    """Real SB10FD calls."""

    def test_feedthrough_floor_optimum(self):
        plant = PlantModeler().get_benchmark('feedthrough_floor')
        search = GammaSearchConfig(gamma_min=0.1, gamma_max=10.0, rtol=1e-3)

        found = bisect_gamma(plant, search)

        assert 1.0 <= found.gamma <= 2.0
        assert found.result.stable
