"""
Linear State-Space Model of a Damped Pendulum

This module provides the small-angle linear model of a pendulum swinging
about a fixed pivot, and its exact discretization for sampled (video)
measurements.

Mathematical Formulation
------------------------
With state $x = [\\theta, \\dot{\\theta}]^T$ the continuous-time model is

$$\\dot{x} = A_c x + B_c u, \\qquad y = C_c x + D_c u$$

$$A_c = \\begin{bmatrix} 0 & 1 \\\\ -g/r & -b/m \\end{bmatrix}, \\quad
B_c = \\begin{bmatrix} 0 \\\\ 0 \\end{bmatrix}, \\quad C_c = I_2$$

where $g$ is gravity, $r$ the pendulum radius, $m$ the bob mass and $b$ the
viscous damping coefficient. The pendulum is unforced, so $B_c = 0$ and the
discretized input matrix vanishes as well.

**Zero-order-hold discretization** (exact for LTI systems):

$$\\exp\\left(\\begin{bmatrix} A_c & B_c \\\\ 0 & 0 \\end{bmatrix} T_s\\right)
= \\begin{bmatrix} A_d & B_d \\\\ 0 & I \\end{bmatrix}$$

Note that the parameters only enter through $g/r$ and $b/m$; mass and
damping are not separately identifiable from angle data.
"""

import numpy as np
import control as ctrl
from dataclasses import dataclass, field
from typing import List, Optional
from scipy.linalg import expm

from pendulum_estimation.errors import InvalidParameterError


STATE_NAMES = ['theta', 'theta_dot']
INPUT_NAMES = ['u']


@dataclass(frozen=True)
class PendulumParameters:
    """
    Physical parameters of the pendulum.

    Defaults are the nominal values of the bench pendulum: a 16 inch rod
    with a 73 g bob.

    Attributes
    ----------
    gravity : float
        Gravitational acceleration [m/s²]. Fixed, never fitted.
    radius : float
        Pivot-to-bob distance [m]. Must be positive.
    mass : float
        Bob mass [kg]. Must be positive.
    damping : float
        Viscous damping coefficient [kg/s]. Expected non-negative.
    """
    gravity: float = 9.80665
    radius: float = 0.4064
    mass: float = 0.073
    damping: float = 0.02

    @property
    def natural_frequency(self) -> float:
        """Undamped natural frequency sqrt(g/r) [rad/s]."""
        return float(np.sqrt(self.gravity / self.radius))

    @property
    def decay_rate(self) -> float:
        """Velocity decay coefficient b/m [1/s]."""
        return self.damping / self.mass

    def as_vector(self) -> np.ndarray:
        """Free parameters as [radius, mass, damping]."""
        return np.array([self.radius, self.mass, self.damping], dtype=float)

    @classmethod
    def from_vector(cls, vector, gravity: float = 9.80665) -> 'PendulumParameters':
        """Build from a [radius, mass, damping] vector."""
        radius, mass, damping = (float(v) for v in vector)
        return cls(gravity=float(gravity), radius=radius, mass=mass, damping=damping)


@dataclass
class LinearModel:
    """Container for a continuous (dt=None) or discrete linear model."""
    A: np.ndarray
    B: np.ndarray
    C: np.ndarray
    D: np.ndarray
    dt: Optional[float] = None
    state_names: List[str] = field(default_factory=lambda: list(STATE_NAMES))
    input_names: List[str] = field(default_factory=lambda: list(INPUT_NAMES))
    output_names: List[str] = field(default_factory=lambda: list(STATE_NAMES))

    @property
    def is_discrete(self) -> bool:
        return self.dt is not None

    @property
    def n_states(self) -> int:
        return self.A.shape[0]

    def to_control(self) -> ctrl.StateSpace:
        """Convert to python-control StateSpace object."""
        if self.is_discrete:
            return ctrl.ss(self.A, self.B, self.C, self.D, self.dt)
        return ctrl.ss(self.A, self.B, self.C, self.D)


def check_physical_parameters(gravity: float, radius: float,
                              mass: float, damping: float) -> None:
    """
    Validate pendulum parameters before they reach a division.

    Raises
    ------
    InvalidParameterError
        If any value is non-finite, or radius/mass is not positive.
    """
    values = {'gravity': gravity, 'radius': radius, 'mass': mass, 'damping': damping}
    for name, value in values.items():
        if not np.isfinite(value):
            raise InvalidParameterError(f"{name} must be finite, got {value}")
    if radius <= 0.0:
        raise InvalidParameterError(f"radius must be positive, got {radius}")
    if mass <= 0.0:
        raise InvalidParameterError(f"mass must be positive, got {mass}")


def continuous_system_matrix(gravity: float, radius: float,
                             mass: float, damping: float) -> np.ndarray:
    """Continuous-time system matrix A_c = [[0, 1], [-g/r, -b/m]]."""
    check_physical_parameters(gravity, radius, mass, damping)
    return np.array([
        [0.0, 1.0],
        [-gravity / radius, -damping / mass],
    ])


def continuous_pendulum_model(params: PendulumParameters) -> LinearModel:
    """
    Create the continuous-time pendulum model.

    Parameters
    ----------
    params : PendulumParameters
        Physical parameters

    Returns
    -------
    LinearModel
        Model with A_c from the parameters, zero input matrix and full
        state output (C = I, D = 0)
    """
    A = continuous_system_matrix(params.gravity, params.radius,
                                 params.mass, params.damping)
    B = np.zeros((2, 1))
    C = np.eye(2)
    D = np.zeros((2, 1))

    return LinearModel(A, B, C, D)


def discretize(model: LinearModel, sample_time: float) -> LinearModel:
    """
    Exact zero-order-hold discretization of a continuous model.

    Parameters
    ----------
    model : LinearModel
        Continuous-time model
    sample_time : float
        Sampling interval [s]

    Returns
    -------
    LinearModel
        Discrete model with ``dt = sample_time``; C and D are unchanged
    """
    if model.is_discrete:
        raise InvalidParameterError("Model is already discrete")
    if not np.isfinite(sample_time) or sample_time <= 0.0:
        raise InvalidParameterError(f"sample_time must be positive, got {sample_time}")

    n_states = model.n_states
    n_inputs = model.B.shape[1]

    # Augmented matrix exponential gives A_d and B_d together
    M = np.zeros((n_states + n_inputs, n_states + n_inputs))
    M[:n_states, :n_states] = model.A
    M[:n_states, n_states:] = model.B

    with np.errstate(over='ignore', invalid='ignore'):
        Phi = expm(M * sample_time)

    A_d = Phi[:n_states, :n_states]
    B_d = Phi[:n_states, n_states:]

    if not np.all(np.isfinite(A_d)):
        raise InvalidParameterError(
            f"Matrix exponential is not finite for sample_time={sample_time}; "
            "radius or mass is pathologically small"
        )

    return LinearModel(A_d, B_d, model.C.copy(), model.D.copy(), dt=float(sample_time),
                       state_names=list(model.state_names),
                       input_names=list(model.input_names),
                       output_names=list(model.output_names))


def discrete_pendulum_model(gravity: float, radius: float, mass: float,
                            damping: float, sample_time: float) -> LinearModel:
    """Shortcut: continuous pendulum model discretized at ``sample_time``."""
    params = PendulumParameters(gravity=gravity, radius=radius, mass=mass, damping=damping)
    return discretize(continuous_pendulum_model(params), sample_time)
