"""
Closed-Loop Analysis Tools

This module provides the checks applied to a synthesized H-infinity loop:
pole-based stability, the closed-loop H-infinity norm, and the singular
value (sigma) response used to see where the norm bound is active.
"""

import numpy as np
from typing import Optional, Tuple
import control as ctrl
import matplotlib.pyplot as plt
from dataclasses import dataclass


@dataclass
class AnalysisResults:
    """Container for closed-loop analysis results."""
    stable: bool = False
    poles: np.ndarray = None
    hinf_norm: float = float('inf')
    peak_frequency: float = float('nan')
    spectral_abscissa: float = float('inf')


class ClosedLoopAnalyzer:
    """Stability and norm analysis of a closed H-infinity loop."""

    def __init__(self, stability_margin: float = 0.0):
        self.stability_margin = stability_margin

    def analyze_system(self, closed_loop: ctrl.StateSpace,
                       omega: Optional[np.ndarray] = None) -> AnalysisResults:
        """
        Perform the complete closed-loop analysis.

        Parameters
        ----------
        closed_loop : ctrl.StateSpace
            Lower LFT of plant and controller, w -> z
        omega : np.ndarray, optional
            Frequency grid [rad/s] for locating the peak gain

        Returns
        -------
        AnalysisResults
            Stability, H-infinity norm and peak frequency
        """
        results = AnalysisResults()
        results.stable, results.poles = self.check_stability(closed_loop)
        if results.poles.size:
            results.spectral_abscissa = float(np.max(results.poles.real))
        else:
            results.spectral_abscissa = float('-inf')

        results.hinf_norm = self.hinf_norm(closed_loop, stable=results.stable)

        if results.stable:
            omega, sv = self.singular_values(closed_loop, omega)
            if sv.size:
                results.peak_frequency = float(omega[np.argmax(sv[:, 0])])

        return results

    def check_stability(self, system: ctrl.StateSpace) -> Tuple[bool, np.ndarray]:
        """
        Check system stability and return poles.

        Returns
        -------
        Tuple[bool, np.ndarray]
            (is_stable, poles)
        """
        poles = np.atleast_1d(ctrl.poles(system))
        stable = bool(np.all(poles.real < -self.stability_margin))
        return stable, poles

    def hinf_norm(self, system: ctrl.StateSpace, stable: Optional[bool] = None) -> float:
        """H-infinity norm; infinite for an unstable system."""
        if stable is None:
            stable, _ = self.check_stability(system)
        if not stable:
            return float('inf')
        if system.nstates == 0:
            return float(np.linalg.norm(np.asarray(system.D), 2))
        return float(ctrl.norm(system, p='inf'))

    def singular_values(self, system: ctrl.StateSpace,
                        omega: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Singular values of the frequency response.

        Parameters
        ----------
        system : ctrl.StateSpace
            System to evaluate
        omega : np.ndarray, optional
            Frequency grid [rad/s], default 1e-3..1e3 with 500 points

        Returns
        -------
        Tuple[np.ndarray, np.ndarray]
            (omega, sv) with sv of shape (len(omega), min(p, m)), descending
        """
        if omega is None:
            omega = np.logspace(-3, 3, 500)
        omega = np.asarray(omega, dtype=float)

        response = ctrl.frequency_response(system, omega)
        H = np.reshape(np.asarray(response.fresp),
                       (system.noutputs, system.ninputs, omega.size))
        sv = np.linalg.svd(np.moveaxis(H, -1, 0), compute_uv=False)
        return omega, sv

    def plot_singular_values(self, system: ctrl.StateSpace,
                             gamma: Optional[float] = None,
                             omega: Optional[np.ndarray] = None,
                             title: str = "Closed-Loop Singular Values",
                             save_path: Optional[str] = None):
        """
        Generate sigma plot of the closed loop with the gamma bound overlaid.

        Parameters
        ----------
        system : ctrl.StateSpace
            System to plot
        gamma : float, optional
            Norm bound drawn as a horizontal line
        omega : np.ndarray, optional
            Frequency grid [rad/s]
        title : str
            Plot title
        save_path : str, optional
            Path to save plot

        Returns
        -------
        matplotlib.figure.Figure
        """
        omega, sv = self.singular_values(system, omega)

        fig, ax = plt.subplots(figsize=(10, 6))
        sv_db = 20 * np.log10(np.maximum(sv, 1e-300))
        for i in range(sv.shape[1]):
            ax.semilogx(omega, sv_db[:, i], linewidth=1.5, label=f'$\\sigma_{i + 1}$')

        if gamma is not None:
            ax.axhline(y=20 * np.log10(gamma), color='r', linestyle='--', alpha=0.7,
                       label=f'$\\gamma$ = {gamma:.4g}')

        ax.grid(True, which='both', alpha=0.3)
        ax.set_xlabel('Frequency [rad/s]')
        ax.set_ylabel('Singular value [dB]')
        ax.set_title(title)
        ax.legend()
        fig.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches='tight')
            plt.close(fig)
        else:
            plt.show()

        return fig
