"""
Pendulum Analysis Pipeline

Runs the complete numeric analysis of one observed swing:

1. Simulate the nominal (theoretical) parameters from the observed
   initial state
2. Fit radius, mass and damping to the observed angle
3. Simulate the fitted parameters
4. Observability ellipses for nominal and fitted parameters, in state
   coordinates and in balanced coordinates

Nothing here draws or writes files; the result carries everything a
plotting or reporting layer needs.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Dict, Any, Optional

from pendulum_estimation.config import AnalysisConfig
from pendulum_estimation.core.estimators.parameter_estimator import (
    EstimationResult,
    ParameterEstimator,
)
from pendulum_estimation.core.measurements.angle_extraction import (
    ObservedPendulum,
    angular_velocity,
)
from pendulum_estimation.core.observability.observability_analyzer import (
    ObservabilityResult,
    analyze_observability,
)
from pendulum_estimation.core.simulation.simulator import Trajectory, simulate


@dataclass(frozen=True)
class PendulumAnalysis:
    """Results of ``run_analysis``."""
    observed: ObservedPendulum
    nominal_trajectory: Trajectory
    fit: EstimationResult
    optimal_trajectory: Trajectory
    nominal_observability: ObservabilityResult
    nominal_observability_transformed: ObservabilityResult
    optimal_observability: ObservabilityResult
    optimal_observability_transformed: ObservabilityResult

    def summary(self) -> Dict[str, Any]:
        """Scalar summary of the fit and the ellipses."""
        summary = {
            'samples': self.observed.step_count,
            'sample_time': self.nominal_trajectory.sample_time,
            'initial_guess': self.fit.initial_guess.tolist(),
            'initial_error': self.fit.initial_error,
            'optimal_parameters': self.fit.as_vector().tolist(),
            'optimal_error': self.fit.sum_squared_error,
            'decay_rate': self.fit.decay_rate,
            'converged': self.fit.converged,
        }
        ellipses = {
            'nominal': self.nominal_observability,
            'nominal_transformed': self.nominal_observability_transformed,
            'optimal': self.optimal_observability,
            'optimal_transformed': self.optimal_observability_transformed,
        }
        for name, result in ellipses.items():
            summary[f'{name}_semi_major'] = result.ellipse.semi_major
            summary[f'{name}_semi_minor'] = result.ellipse.semi_minor
        return summary

    def to_dataframe(self) -> pd.DataFrame:
        """Observed, nominal and optimal angle histories side by side."""
        df = self.observed.to_dataframe()
        df['theta_nominal'] = self.nominal_trajectory.angle
        df['theta_dot_nominal'] = self.nominal_trajectory.angular_velocity
        df['theta_optimal'] = self.optimal_trajectory.angle
        df['theta_dot_optimal'] = self.optimal_trajectory.angular_velocity
        return df


def run_analysis(observed: ObservedPendulum,
                 config: Optional[AnalysisConfig] = None) -> PendulumAnalysis:
    """
    Run simulation, fit and observability analysis on an observed swing.

    Parameters
    ----------
    observed : ObservedPendulum
        Observed angle series (see ``observe_pendulum``)
    config : AnalysisConfig, optional
        Nominal parameters and solver settings

    Returns
    -------
    PendulumAnalysis
    """
    config = config if config is not None else AnalysisConfig()
    nominal = config.parameters
    if config.sample_time is not None:
        ts = config.sample_time
        # theta_dot_0 must use the same step the simulation runs at
        x0 = np.array([observed.angle[0], angular_velocity(observed.angle[:2], ts)[0]])
    else:
        ts = observed.sample_time
        x0 = observed.initial_state
    n_steps = observed.step_count

    nominal_trajectory = simulate(nominal.gravity, nominal.radius, nominal.mass,
                                  nominal.damping, ts, n_steps, x0)

    estimator = ParameterEstimator(nominal.gravity, ts, x0, observed.angle, config.estimator)
    fit = estimator.estimate(nominal.as_vector())
    optimal = fit.parameters

    optimal_trajectory = simulate(optimal.gravity, optimal.radius, optimal.mass,
                                  optimal.damping, ts, n_steps, x0)

    def observability(params, transform):
        return analyze_observability(params.gravity, params.radius, params.mass,
                                     params.damping, ts, apply_transform=transform,
                                     config=config.observability)

    return PendulumAnalysis(
        observed=observed,
        nominal_trajectory=nominal_trajectory,
        fit=fit,
        optimal_trajectory=optimal_trajectory,
        nominal_observability=observability(nominal, False),
        nominal_observability_transformed=observability(nominal, True),
        optimal_observability=observability(optimal, False),
        optimal_observability_transformed=observability(optimal, True),
    )
