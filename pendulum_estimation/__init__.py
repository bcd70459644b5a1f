"""
Pendulum State-Space Estimation

Linear state-space modeling of a damped pendulum observed on video:
discrete-time simulation, Nelder-Mead parameter fitting and observability
analysis.

Architecture
------------
- `core.dynamics`: continuous pendulum model and exact discretization
- `core.simulation`: forward simulation of the discrete model
- `core.estimators`: least-squares fit of radius, mass and damping
- `core.observability`: observability Gramian and ellipse geometry
- `core.measurements`: angle series from tracked bob positions
- `analysis`: the full simulate / fit / analyze pipeline

Usage Example
-------------
```python
from pendulum_estimation import observe_pendulum, run_analysis, load_analysis_config

observed = observe_pendulum(time, pos_x, pos_y, pivot_x, pivot_y)
analysis = run_analysis(observed, load_analysis_config())
print(analysis.summary())
```
"""

from pendulum_estimation.core.dynamics.pendulum_model import (
    PendulumParameters,
    LinearModel,
    continuous_pendulum_model,
    discretize,
    discrete_pendulum_model,
)
from pendulum_estimation.core.simulation.simulator import Trajectory, simulate
from pendulum_estimation.core.estimators.parameter_estimator import (
    EstimatorConfig,
    EstimationResult,
    ParameterEstimator,
    estimate,
)
from pendulum_estimation.core.observability.observability_analyzer import (
    ObservabilityConfig,
    EllipseDescriptor,
    ObservabilityResult,
    analyze_observability,
)
from pendulum_estimation.core.measurements.angle_extraction import (
    ObservedPendulum,
    observe_pendulum,
)
from pendulum_estimation.config import AnalysisConfig, load_analysis_config
from pendulum_estimation.analysis import PendulumAnalysis, run_analysis
from pendulum_estimation.errors import (
    PendulumEstimationError,
    InvalidParameterError,
    NonFiniteObjectiveError,
    ObservabilityError,
    ConvergenceWarning,
    UnobservableModeWarning,
)

__all__ = [
    # Model
    'PendulumParameters',
    'LinearModel',
    'continuous_pendulum_model',
    'discretize',
    'discrete_pendulum_model',

    # Pipeline stages
    'Trajectory',
    'simulate',
    'EstimatorConfig',
    'EstimationResult',
    'ParameterEstimator',
    'estimate',
    'ObservabilityConfig',
    'EllipseDescriptor',
    'ObservabilityResult',
    'analyze_observability',

    # Measurements and orchestration
    'ObservedPendulum',
    'observe_pendulum',
    'AnalysisConfig',
    'load_analysis_config',
    'PendulumAnalysis',
    'run_analysis',

    # Errors
    'PendulumEstimationError',
    'InvalidParameterError',
    'NonFiniteObjectiveError',
    'ObservabilityError',
    'ConvergenceWarning',
    'UnobservableModeWarning',
]

__version__ = '1.0.0'
