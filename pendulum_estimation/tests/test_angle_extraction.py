"""
Unit tests for angle extraction from tracked bob positions.

Test coverage:
- Angle recovery from synthetic positions
- Marker offset removal
- Sample time estimation
- Finite-difference angular velocity
- Input validation
"""

import pytest
import numpy as np

from pendulum_estimation.core.measurements.angle_extraction import (
    ObservedPendulum,
    angles_from_positions,
    estimate_sample_time,
    angular_velocity,
    observe_pendulum,
)
from pendulum_estimation.errors import InvalidParameterError


PIVOT = (320.0, 40.0)
LENGTH_PX = 250.0
FPS = 30.0


@pytest.fixture
def swing():
    """Synthetic tracking of a swing in image coordinates (y pointing down)."""
    t = np.arange(60) / FPS
    theta = 0.2 * np.cos(2 * np.pi * 0.8 * t)
    pos_x = PIVOT[0] + LENGTH_PX * np.sin(theta)
    pos_y = PIVOT[1] + LENGTH_PX * np.cos(theta)
    return t, theta, pos_x, pos_y


class TestAnglesFromPositions:
    """Test the position to angle conversion."""

    def test_recovers_angle_without_offset_removal(self, swing):
        _, theta, pos_x, pos_y = swing
        recovered = angles_from_positions(pos_x, pos_y, *PIVOT, remove_offset=False)
        np.testing.assert_allclose(recovered, theta, atol=1e-12)

    def test_offset_removal_zero_mean(self, swing):
        _, theta, pos_x, pos_y = swing
        recovered = angles_from_positions(pos_x, pos_y, *PIVOT)

        assert abs(np.mean(recovered)) < 1e-12
        np.testing.assert_allclose(recovered, theta - np.mean(theta), atol=1e-12)

    def test_constant_marker_offset_removed(self, swing):
        _, theta, _, _ = swing
        offset = 0.05
        pos_x = PIVOT[0] + LENGTH_PX * np.sin(theta + offset)
        pos_y = PIVOT[1] + LENGTH_PX * np.cos(theta + offset)

        recovered = angles_from_positions(pos_x, pos_y, *PIVOT)
        np.testing.assert_allclose(recovered, theta - np.mean(theta), atol=1e-12)

    def test_scale_invariant(self, swing):
        _, _, pos_x, pos_y = swing
        a = angles_from_positions(pos_x, pos_y, *PIVOT)
        b = angles_from_positions(2 * pos_x, 2 * pos_y, 2 * PIVOT[0], 2 * PIVOT[1])
        np.testing.assert_allclose(a, b, atol=1e-12)

    def test_length_mismatch(self):
        with pytest.raises(InvalidParameterError):
            angles_from_positions([1.0, 2.0], [1.0], 0.0, 0.0)

    def test_rejects_2d_input(self):
        with pytest.raises(InvalidParameterError):
            angles_from_positions(np.ones((2, 2)), np.ones((2, 2)), 0.0, 0.0)


class TestSampleTime:
    """Test sample time estimation and differentiation."""

    def test_uniform_sampling(self):
        t = np.arange(100) / FPS
        assert np.isclose(estimate_sample_time(t), 1.0 / FPS)

    def test_robust_to_single_jitter(self):
        t = np.arange(100) / FPS
        t[50:] += 0.004
        assert np.isclose(estimate_sample_time(t), 1.0 / FPS)

    def test_too_few_samples(self):
        with pytest.raises(InvalidParameterError):
            estimate_sample_time([0.0])

    def test_non_increasing(self):
        with pytest.raises(InvalidParameterError):
            estimate_sample_time([0.0, 0.1, 0.1, 0.2])

    def test_angular_velocity_of_ramp(self):
        theta = 0.5 * np.arange(10) / FPS
        omega = angular_velocity(theta, 1.0 / FPS)

        assert omega.shape == (9,)
        np.testing.assert_allclose(omega, 0.5)

    def test_angular_velocity_invalid_sample_time(self):
        with pytest.raises(InvalidParameterError):
            angular_velocity([0.0, 1.0], 0.0)


class TestObservePendulum:
    """Test the combined observation builder."""

    def test_structure(self, swing):
        t, _, pos_x, pos_y = swing
        observed = observe_pendulum(t, pos_x, pos_y, *PIVOT)

        assert isinstance(observed, ObservedPendulum)
        assert observed.step_count == 60
        assert observed.angular_velocity.shape == (59,)
        assert np.isclose(observed.sample_time, 1.0 / FPS)

    def test_initial_state(self, swing):
        t, _, pos_x, pos_y = swing
        observed = observe_pendulum(t, pos_x, pos_y, *PIVOT)

        expected_rate = (observed.angle[1] - observed.angle[0]) / observed.sample_time
        np.testing.assert_allclose(observed.initial_state, [observed.angle[0], expected_rate])

    def test_time_length_mismatch(self, swing):
        t, _, pos_x, pos_y = swing
        with pytest.raises(InvalidParameterError):
            observe_pendulum(t[:-1], pos_x, pos_y, *PIVOT)

    def test_dataframe_export(self, swing):
        t, _, pos_x, pos_y = swing
        df = observe_pendulum(t, pos_x, pos_y, *PIVOT).to_dataframe()

        assert list(df.columns) == ['time', 'theta', 'theta_dot']
        assert len(df) == 60
        assert np.isnan(df['theta_dot'].iloc[-1])
