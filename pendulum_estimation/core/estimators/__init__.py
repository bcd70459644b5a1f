"""
Parameter estimation for the pendulum model.

Fits radius, mass and damping by Nelder-Mead minimization of the summed
squared angle residual.
"""

from .parameter_estimator import (
    EstimatorConfig,
    EstimationResult,
    ParameterEstimator,
    estimate,
)

__all__ = [
    'EstimatorConfig',
    'EstimationResult',
    'ParameterEstimator',
    'estimate',
]
