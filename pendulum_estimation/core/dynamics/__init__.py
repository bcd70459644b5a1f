"""Linear pendulum model and discretization."""

from .pendulum_model import (
    PendulumParameters,
    LinearModel,
    check_physical_parameters,
    continuous_system_matrix,
    continuous_pendulum_model,
    discretize,
    discrete_pendulum_model,
)

__all__ = [
    'PendulumParameters',
    'LinearModel',
    'check_physical_parameters',
    'continuous_system_matrix',
    'continuous_pendulum_model',
    'discretize',
    'discrete_pendulum_model',
]
