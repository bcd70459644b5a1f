"""
Exception and warning types for pendulum estimation.

Hard failures derive from ``PendulumEstimationError`` and also from the
builtin category callers would naturally catch (``ValueError`` for bad
inputs, ``RuntimeError`` for a failed search, ``LinAlgError`` for matrix
problems). Physically legitimate but degenerate outcomes are reported with
warnings instead.
"""

import numpy as np


class PendulumEstimationError(Exception):
    """Base class for all pendulum estimation errors."""


class InvalidParameterError(PendulumEstimationError, ValueError):
    """Raised when a physical parameter or input array is unusable."""


class NonFiniteObjectiveError(PendulumEstimationError, RuntimeError):
    """Raised when no candidate in a parameter search produced a finite error."""


class ObservabilityError(PendulumEstimationError, np.linalg.LinAlgError):
    """Raised when the observability Gramian cannot be diagonalized."""


class ConvergenceWarning(RuntimeWarning):
    """The minimizer stopped on its iteration budget, not its tolerances."""


class UnobservableModeWarning(RuntimeWarning):
    """A Gramian eigenvalue is not positive; the matching axis is unbounded."""
