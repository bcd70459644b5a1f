"""
Discrete-Time Pendulum Simulator

Forward simulation of the discretized pendulum model. The matrix exponential
is evaluated once per call; every step afterwards is a single matrix-vector
product:

$$x_{k+1} = A_d x_k, \\qquad x_0 = x_{init}$$
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass

from pendulum_estimation.core.dynamics.pendulum_model import discrete_pendulum_model
from pendulum_estimation.errors import InvalidParameterError


@dataclass(frozen=True)
class Trajectory:
    """
    Simulated state history.

    Attributes
    ----------
    states : np.ndarray
        State history, shape (2, step_count). Row 0 is the angle [rad],
        row 1 the angular velocity [rad/s]. Read-only.
    sample_time : float
        Interval between columns [s]
    """
    states: np.ndarray
    sample_time: float

    @property
    def step_count(self) -> int:
        return self.states.shape[1]

    @property
    def angle(self) -> np.ndarray:
        return self.states[0]

    @property
    def angular_velocity(self) -> np.ndarray:
        return self.states[1]

    @property
    def time(self) -> np.ndarray:
        """Sample instants starting at zero [s]."""
        return np.arange(self.step_count) * self.sample_time

    def to_dataframe(self) -> pd.DataFrame:
        """Export as a table with time, theta and theta_dot columns."""
        return pd.DataFrame({
            'time': self.time,
            'theta': self.angle,
            'theta_dot': self.angular_velocity,
        })


def _as_initial_state(initial_state) -> np.ndarray:
    x0 = np.asarray(initial_state, dtype=float).reshape(-1)
    if x0.shape != (2,):
        raise InvalidParameterError(
            f"initial_state must have 2 elements [theta, theta_dot], got shape {x0.shape}"
        )
    if not np.all(np.isfinite(x0)):
        raise InvalidParameterError(f"initial_state must be finite, got {x0}")
    return x0


def propagate(A_d: np.ndarray, initial_state: np.ndarray, step_count: int) -> np.ndarray:
    """Iterate x_{k+1} = A_d x_k, returning a (n, step_count) history."""
    x = np.zeros((A_d.shape[0], step_count))
    x[:, 0] = initial_state

    for k in range(step_count - 1):
        x[:, k + 1] = A_d @ x[:, k]  # No input since B_d * u = 0

    return x


def simulate(gravity: float, radius: float, mass: float, damping: float,
             sample_time: float, step_count: int, initial_state) -> Trajectory:
    """
    Simulate the unforced pendulum.

    Parameters
    ----------
    gravity : float
        Gravitational acceleration [m/s²]
    radius : float
        Pendulum radius [m], must be positive
    mass : float
        Bob mass [kg], must be positive
    damping : float
        Damping coefficient [kg/s]
    sample_time : float
        Sampling interval [s]
    step_count : int
        Number of states to produce, including the initial one (>= 1)
    initial_state : array_like
        [theta, theta_dot] at the first sample

    Returns
    -------
    Trajectory
        ``step_count`` states; the first column equals ``initial_state``

    Raises
    ------
    InvalidParameterError
        On non-positive/non-finite radius or mass, bad sample time or step
        count, a malformed initial state, or a non-finite matrix exponential.
    """
    if int(step_count) != step_count or step_count < 1:
        raise InvalidParameterError(f"step_count must be an integer >= 1, got {step_count}")
    step_count = int(step_count)

    x0 = _as_initial_state(initial_state)
    model = discrete_pendulum_model(gravity, radius, mass, damping, sample_time)

    states = propagate(model.A, x0, step_count)
    states.setflags(write=False)

    return Trajectory(states=states, sample_time=float(sample_time))
