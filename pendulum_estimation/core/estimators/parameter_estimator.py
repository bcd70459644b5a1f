"""
Pendulum Parameter Estimator

Fits radius, mass and damping of the pendulum model to an observed angle
series by minimizing the sum of squared angle residuals with the
derivative-free Nelder-Mead simplex method.

Objective
---------
$$J(r, m, b) = \\sum_{k=0}^{N-1} \\left(\\hat{\\theta}_k(r, m, b) - \\theta_k\\right)^2$$

where $\\hat{\\theta}_k$ is the angle row of the simulated trajectory started
at the observed initial state. The angular velocity row is not used.

Implementation Notes
--------------------
- Defaults reproduce MATLAB ``fminsearch``: TolX = TolFun = 1e-4 and
  200 iterations / evaluations per free parameter. SciPy builds the initial
  simplex the same way (5 % step per non-zero coordinate, 0.00025 for zeros).
- Candidates the model cannot represent (radius or mass <= 0) or that give a
  non-finite error are scored ``inf`` and the search continues.
- Because J depends on mass and damping only through b/m, the fitted pair is
  one point of a flat valley; ``decay_rate`` is the identifiable quantity.
"""

import warnings
import numpy as np
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Any
from scipy.optimize import minimize

from pendulum_estimation.core.dynamics.pendulum_model import PendulumParameters
from pendulum_estimation.core.simulation.simulator import _as_initial_state, simulate
from pendulum_estimation.errors import (
    InvalidParameterError,
    NonFiniteObjectiveError,
    ConvergenceWarning,
)


N_FREE_PARAMETERS = 3


@dataclass
class EstimatorConfig:
    """
    Configuration for the Nelder-Mead search.

    Attributes
    ----------
    xatol : float
        Absolute simplex size at which the search stops (TolX).
    fatol : float
        Absolute objective spread at which the search stops (TolFun).
    max_iterations : int, optional
        Iteration budget. None means 200 per free parameter.
    max_function_evaluations : int, optional
        Objective evaluation budget. None means 200 per free parameter.
    adaptive : bool
        Use dimension-adapted Nelder-Mead coefficients.
    initial_simplex : np.ndarray, optional
        Explicit (4, 3) starting simplex; overrides the default construction.
    verbose : bool
        Print a progress banner and periodic iteration reports.
    report_every : int
        Iterations between progress lines when verbose.
    """
    xatol: float = 1e-4
    fatol: float = 1e-4
    max_iterations: Optional[int] = None
    max_function_evaluations: Optional[int] = None
    adaptive: bool = False
    initial_simplex: Optional[np.ndarray] = None
    verbose: bool = False
    report_every: int = 50

    def to_options(self) -> Dict[str, Any]:
        """Translate to ``scipy.optimize.minimize`` options."""
        options = {
            'xatol': self.xatol,
            'fatol': self.fatol,
            'maxiter': self.max_iterations or 200 * N_FREE_PARAMETERS,
            'maxfev': self.max_function_evaluations or 200 * N_FREE_PARAMETERS,
            'adaptive': self.adaptive,
            'disp': False,
        }
        if self.initial_simplex is not None:
            options['initial_simplex'] = np.asarray(self.initial_simplex, dtype=float)
        return options


@dataclass(frozen=True)
class EstimationResult:
    """
    Outcome of a parameter fit.

    Attributes
    ----------
    radius, mass, damping : float
        Parameters at the best point found
    sum_squared_error : float
        Objective value at that point [rad²]
    gravity : float
        Gravity the fit was run with (not fitted)
    initial_guess : np.ndarray
        Starting [radius, mass, damping]
    initial_error : float
        Objective at the starting point (``inf`` if not representable)
    iterations : int
        Nelder-Mead iterations performed
    function_evaluations : int
        Objective evaluations performed
    converged : bool
        True if the tolerances were met within the budget
    message : str
        Termination message from the minimizer
    """
    radius: float
    mass: float
    damping: float
    sum_squared_error: float
    gravity: float
    initial_guess: np.ndarray
    initial_error: float
    iterations: int
    function_evaluations: int
    converged: bool
    message: str = ""

    @property
    def parameters(self) -> PendulumParameters:
        return PendulumParameters(gravity=self.gravity, radius=self.radius,
                                  mass=self.mass, damping=self.damping)

    @property
    def decay_rate(self) -> float:
        """Identifiable damping combination b/m [1/s]."""
        return self.damping / self.mass

    def as_vector(self) -> np.ndarray:
        return np.array([self.radius, self.mass, self.damping])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result = asdict(self)
        result['initial_guess'] = self.initial_guess.tolist()
        result['decay_rate'] = self.decay_rate
        return result


class ParameterEstimator:
    """
    Least-squares fit of pendulum parameters to an observed angle series.

    Usage:
    ------
    >>> estimator = ParameterEstimator(
    ...     gravity=9.80665,
    ...     sample_time=1/30,
    ...     initial_state=[theta[0], theta_dot[0]],
    ...     observed_angles=theta,
    ... )
    >>> print(estimator.objective([0.4064, 0.073, 0.02]))  # unoptimized error
    >>> result = estimator.estimate([0.4064, 0.073, 0.02])
    >>> print(f"r = {result.radius:.4f} m, SSE = {result.sum_squared_error:.3e}")
    """

    def __init__(self, gravity: float, sample_time: float, initial_state,
                 observed_angles, config: Optional[EstimatorConfig] = None):
        """
        Parameters
        ----------
        gravity : float
            Gravitational acceleration [m/s²], held fixed
        sample_time : float
            Interval between observations [s]
        initial_state : array_like
            [theta, theta_dot] at the first observation
        observed_angles : array_like
            Observed angle series [rad]; its length sets the simulation length
        config : EstimatorConfig, optional
            Search configuration (defaults to fminsearch-like settings)
        """
        observed = np.asarray(observed_angles, dtype=float)
        if observed.ndim != 1 or observed.size == 0:
            raise InvalidParameterError(
                f"observed_angles must be a non-empty 1-D series, got shape {observed.shape}"
            )

        if not np.isfinite(gravity):
            raise InvalidParameterError(f"gravity must be finite, got {gravity}")
        if not np.isfinite(sample_time) or sample_time <= 0.0:
            raise InvalidParameterError(f"sample_time must be positive, got {sample_time}")

        self.gravity = float(gravity)
        self.sample_time = float(sample_time)
        self.initial_state = _as_initial_state(initial_state)
        self.observed_angles = observed
        self.config = config if config is not None else EstimatorConfig()

        self.n_evaluations = 0
        self.n_finite_evaluations = 0
        self._iteration = 0

    @property
    def step_count(self) -> int:
        return self.observed_angles.size

    def objective(self, params) -> float:
        """
        Sum of squared angle residuals for [radius, mass, damping].

        Raises ``InvalidParameterError`` for parameters the model cannot
        represent; may return a non-finite value.
        """
        radius, mass, damping = params
        trajectory = simulate(self.gravity, radius, mass, damping,
                              self.sample_time, self.step_count, self.initial_state)
        with np.errstate(over='ignore', invalid='ignore'):
            return float(np.sum((trajectory.angle - self.observed_angles) ** 2))

    def _search_objective(self, params) -> float:
        """Objective as seen by the minimizer: invalid candidates score inf."""
        self.n_evaluations += 1
        try:
            error = self.objective(params)
        except InvalidParameterError:
            return np.inf

        if not np.isfinite(error):
            return np.inf

        self.n_finite_evaluations += 1
        return error

    def _report_progress(self, xk: np.ndarray) -> None:
        self._iteration += 1
        if self._iteration % self.config.report_every == 0:
            print(f"Iteration {self._iteration:5d}: "
                  f"r={xk[0]:.6f} m, m={xk[1]:.6f} kg, b={xk[2]:.6f}, "
                  f"evaluations={self.n_evaluations}")

    def estimate(self, initial_guess) -> EstimationResult:
        """
        Run the Nelder-Mead search from ``initial_guess``.

        Parameters
        ----------
        initial_guess : array_like
            Starting [radius, mass, damping]

        Returns
        -------
        EstimationResult
            Best point found. If the budget ran out first, ``converged`` is
            False and a ``ConvergenceWarning`` is issued.

        Raises
        ------
        InvalidParameterError
            If the guess is not three finite numbers.
        NonFiniteObjectiveError
            If no candidate evaluated to a finite error.
        """
        x0 = np.asarray(initial_guess, dtype=float).reshape(-1)
        if x0.shape != (N_FREE_PARAMETERS,) or not np.all(np.isfinite(x0)):
            raise InvalidParameterError(
                f"initial_guess must be 3 finite values [radius, mass, damping], got {initial_guess}"
            )

        self.n_evaluations = 0
        self.n_finite_evaluations = 0
        self._iteration = 0

        initial_error = self._search_objective(x0)

        if self.config.verbose:
            print("=" * 70)
            print("PENDULUM PARAMETER ESTIMATION (Nelder-Mead)")
            print("=" * 70)
            print(f"Samples:              {self.step_count}")
            print(f"Sample time:          {self.sample_time:.6f} s")
            print(f"Initial guess:        r={x0[0]:.6f}, m={x0[1]:.6f}, b={x0[2]:.6f}")
            print(f"Initial error:        {initial_error:.6e}")
            print("=" * 70)

        callback = self._report_progress if self.config.verbose else None
        # inf vertices make the fatol spread inf - inf
        with np.errstate(invalid='ignore'):
            result = minimize(self._search_objective, x0, method='Nelder-Mead',
                              options=self.config.to_options(), callback=callback)

        if self.n_finite_evaluations == 0 or not np.isfinite(result.fun):
            raise NonFiniteObjectiveError(
                f"Objective was non-finite for all {self.n_evaluations} candidates "
                f"starting from {x0.tolist()}"
            )

        if not result.success:
            warnings.warn(f"Parameter search stopped before convergence: {result.message}",
                          ConvergenceWarning)

        if self.config.verbose:
            print("=" * 70)
            print(f"Optimal parameters:   r={result.x[0]:.6f}, m={result.x[1]:.6f}, b={result.x[2]:.6f}")
            print(f"Optimal error:        {result.fun:.6e}")
            print(f"Iterations:           {result.nit} ({result.nfev} evaluations)")
            print("=" * 70)

        return EstimationResult(
            radius=float(result.x[0]),
            mass=float(result.x[1]),
            damping=float(result.x[2]),
            sum_squared_error=float(result.fun),
            gravity=self.gravity,
            initial_guess=x0,
            initial_error=float(initial_error),
            iterations=int(result.nit),
            function_evaluations=int(result.nfev),
            converged=bool(result.success),
            message=str(result.message),
        )


def estimate(initial_guess, gravity: float, sample_time: float, step_count: int,
             initial_state, observed_angles,
             config: Optional[EstimatorConfig] = None) -> EstimationResult:
    """
    Fit [radius, mass, damping] to ``observed_angles``.

    ``step_count`` must match the number of observed angles.

    See ``ParameterEstimator.estimate`` for the result and error semantics.
    """
    observed = np.asarray(observed_angles, dtype=float)
    if observed.ndim != 1 or step_count != observed.size:
        raise InvalidParameterError(
            f"step_count ({step_count}) must equal the number of observed angles "
            f"(shape {observed.shape})"
        )

    estimator = ParameterEstimator(gravity, sample_time, initial_state, observed, config)
    return estimator.estimate(initial_guess)
