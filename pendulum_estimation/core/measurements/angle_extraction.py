"""
Pendulum Angle Measurements from Tracked Bob Positions

Converts the bob positions reported by video tracking into the angle series
consumed by the estimator. Positions are image coordinates relative to a
clicked fulcrum estimate; any consistent unit works since only the
direction of the pivot-to-bob vector matters.

    theta = atan2(x - x_pivot, y - y_pivot)

The tracked marker is not exactly centred on the rod, which shows up as a
constant angle offset; subtracting the mean angle removes it.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass

from pendulum_estimation.errors import InvalidParameterError


@dataclass(frozen=True)
class ObservedPendulum:
    """
    Observed pendulum motion.

    Attributes
    ----------
    time : np.ndarray
        Sample timestamps [s], length N
    angle : np.ndarray
        Observed angle [rad], length N
    angular_velocity : np.ndarray
        Forward-difference angular velocity [rad/s], length N - 1
    sample_time : float
        Sampling interval [s]
    """
    time: np.ndarray
    angle: np.ndarray
    angular_velocity: np.ndarray
    sample_time: float

    @property
    def step_count(self) -> int:
        return self.angle.size

    @property
    def initial_state(self) -> np.ndarray:
        """[theta_0, theta_dot_0] used to start simulations."""
        return np.array([self.angle[0], self.angular_velocity[0]])

    def to_dataframe(self) -> pd.DataFrame:
        """Table of time, theta and theta_dot (NaN in the last row)."""
        theta_dot = np.append(self.angular_velocity, np.nan)
        return pd.DataFrame({'time': self.time, 'theta': self.angle, 'theta_dot': theta_dot})


def _as_series(name: str, values) -> np.ndarray:
    array = np.asarray(values, dtype=float)
    if array.ndim != 1:
        raise InvalidParameterError(f"{name} must be 1-D, got shape {array.shape}")
    return array


def angles_from_positions(pos_x, pos_y, pivot_x: float, pivot_y: float,
                          remove_offset: bool = True) -> np.ndarray:
    """
    Pendulum angle from bob positions.

    Parameters
    ----------
    pos_x, pos_y : array_like
        Bob position samples
    pivot_x, pivot_y : float
        Fulcrum position in the same coordinates
    remove_offset : bool
        Subtract the mean angle (marker centring offset)

    Returns
    -------
    np.ndarray
        Angle series [rad]
    """
    x = _as_series('pos_x', pos_x)
    y = _as_series('pos_y', pos_y)
    if x.shape != y.shape:
        raise InvalidParameterError(f"pos_x and pos_y differ in length: {x.size} vs {y.size}")

    theta = np.arctan2(x - pivot_x, y - pivot_y)
    if remove_offset:
        theta = theta - np.mean(theta)
    return theta


def estimate_sample_time(time) -> float:
    """Median sampling interval of a strictly increasing time vector."""
    t = _as_series('time', time)
    if t.size < 2:
        raise InvalidParameterError("At least two timestamps are needed to estimate the sample time")

    steps = np.diff(t)
    if np.any(steps <= 0.0):
        raise InvalidParameterError("Timestamps must be strictly increasing")
    return float(np.median(steps))


def angular_velocity(theta, sample_time: float) -> np.ndarray:
    """Forward-difference angular velocity, one sample shorter than theta."""
    if sample_time <= 0.0:
        raise InvalidParameterError(f"sample_time must be positive, got {sample_time}")
    return np.diff(_as_series('theta', theta)) / sample_time


def observe_pendulum(time, pos_x, pos_y, pivot_x: float, pivot_y: float,
                     remove_offset: bool = True) -> ObservedPendulum:
    """
    Build the observed angle and angular velocity series from tracking data.

    Parameters
    ----------
    time : array_like
        Timestamps [s]
    pos_x, pos_y : array_like
        Bob positions
    pivot_x, pivot_y : float
        Fulcrum estimate
    remove_offset : bool
        Subtract the mean angle

    Returns
    -------
    ObservedPendulum
    """
    t = _as_series('time', time)
    theta = angles_from_positions(pos_x, pos_y, pivot_x, pivot_y, remove_offset)
    if t.size != theta.size:
        raise InvalidParameterError(
            f"time has {t.size} samples but positions have {theta.size}"
        )

    ts = estimate_sample_time(t)
    return ObservedPendulum(
        time=t,
        angle=theta,
        angular_velocity=angular_velocity(theta, ts),
        sample_time=ts,
    )
