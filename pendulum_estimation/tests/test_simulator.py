"""
Unit tests for the discrete-time pendulum simulator.

Test coverage:
- Initial state handling and single-step output
- Agreement with the closed-form damped oscillation
- Energy conservation without damping
- Decaying peak amplitude with damping
- Determinism and read-only output
- Input validation
"""

import pytest
import numpy as np

from pendulum_estimation.core.simulation.simulator import simulate, Trajectory
from pendulum_estimation.errors import InvalidParameterError


G = 9.80665
R = 0.4064
M = 0.073
B = 0.02
TS = 1.0 / 30.0


def local_peaks(signal: np.ndarray) -> np.ndarray:
    """Values of the interior local maxima of a sampled signal."""
    interior = (signal[1:-1] > signal[:-2]) & (signal[1:-1] > signal[2:])
    return signal[1:-1][interior]


class TestSimulatorBasics:
    """Test output structure and initial conditions."""

    @pytest.mark.parametrize("radius, mass, damping, sample_time", [
        (R, M, B, TS),
        (1.0, 1.0, 0.0, 0.01),
        (0.05, 2.0, 5.0, 0.2),
    ])
    def test_single_step_returns_initial_state(self, radius, mass, damping, sample_time):
        x0 = np.array([0.1, -0.3])
        traj = simulate(G, radius, mass, damping, sample_time, 1, x0)

        assert traj.states.shape == (2, 1)
        np.testing.assert_array_equal(traj.states[:, 0], x0)

    def test_shape_and_views(self):
        traj = simulate(G, R, M, B, TS, 30, [0.1, 0.0])

        assert isinstance(traj, Trajectory)
        assert traj.step_count == 30
        assert traj.angle.shape == (30,)
        assert traj.angular_velocity.shape == (30,)
        np.testing.assert_allclose(traj.time, np.arange(30) * TS)

    def test_first_column_is_initial_state(self):
        traj = simulate(G, R, M, B, TS, 30, [0.1, 0.2])
        np.testing.assert_array_equal(traj.states[:, 0], [0.1, 0.2])

    def test_zero_state_stays_at_rest(self):
        traj = simulate(G, R, M, B, TS, 50, [0.0, 0.0])
        np.testing.assert_array_equal(traj.states, np.zeros((2, 50)))

    def test_dataframe_export(self):
        df = simulate(G, R, M, B, TS, 10, [0.1, 0.0]).to_dataframe()
        assert list(df.columns) == ['time', 'theta', 'theta_dot']
        assert len(df) == 10


class TestSimulatorPhysics:
    """Test the simulated motion against pendulum physics."""

    def test_matches_closed_form_solution(self):
        """Underdamped response from rest at theta0."""
        theta0 = 0.1
        traj = simulate(G, R, M, B, TS, 90, [theta0, 0.0])

        sigma = B / (2.0 * M)
        omega_d = np.sqrt(G / R - sigma ** 2)
        t = traj.time
        expected = theta0 * np.exp(-sigma * t) * (
            np.cos(omega_d * t) + sigma / omega_d * np.sin(omega_d * t)
        )

        np.testing.assert_allclose(traj.angle, expected, atol=1e-10)

    def test_undamped_energy_conservation(self):
        """theta^2 * g/r + theta_dot^2 is invariant when damping is zero."""
        traj = simulate(G, R, M, 0.0, TS, 300, [0.1, 0.05])
        energy = traj.angle ** 2 * (G / R) + traj.angular_velocity ** 2

        np.testing.assert_allclose(energy, energy[0], rtol=1e-9)

    def test_damped_energy_decreases(self):
        traj = simulate(G, R, M, B, TS, 300, [0.1, 0.0])
        energy = traj.angle ** 2 * (G / R) + traj.angular_velocity ** 2

        assert energy[-1] < energy[0]

    def test_first_swing_amplitude_decreases(self):
        """30 frames of the bench pendulum: the swing back is smaller."""
        traj = simulate(G, R, M, B, TS, 30, [0.1, 0.0])

        assert np.max(traj.angle) == traj.angle[0]
        assert np.min(traj.angle) < 0.0, "Pendulum must swing through zero"
        assert abs(np.min(traj.angle)) < traj.angle[0]

    def test_successive_peaks_strictly_decrease(self):
        traj = simulate(G, R, M, B, TS, 150, [0.1, 0.0])
        peaks = np.concatenate([[traj.angle[0]], local_peaks(traj.angle)])

        assert len(peaks) >= 3
        assert np.all(np.diff(peaks) < 0.0), f"Peaks not decaying: {peaks}"

        abs_peaks = local_peaks(np.abs(traj.angle))
        assert np.all(np.diff(abs_peaks) < 0.0)


class TestSimulatorDeterminism:
    """Test purity of the simulator."""

    def test_repeated_calls_identical(self):
        a = simulate(G, R, M, B, TS, 100, [0.1, 0.0])
        b = simulate(G, R, M, B, TS, 100, [0.1, 0.0])
        np.testing.assert_array_equal(a.states, b.states)

    def test_output_is_read_only(self):
        traj = simulate(G, R, M, B, TS, 10, [0.1, 0.0])
        with pytest.raises(ValueError):
            traj.states[0, 0] = 1.0

    def test_initial_state_not_modified(self):
        x0 = np.array([0.1, 0.0])
        simulate(G, R, M, B, TS, 10, x0)
        np.testing.assert_array_equal(x0, [0.1, 0.0])


class TestSimulatorValidation:
    """Test rejection of invalid inputs."""

    @pytest.mark.parametrize("radius, mass", [(0.0, M), (R, 0.0), (np.nan, M), (R, -1.0)])
    def test_invalid_radius_or_mass(self, radius, mass):
        with pytest.raises(InvalidParameterError):
            simulate(G, radius, mass, B, TS, 10, [0.1, 0.0])

    @pytest.mark.parametrize("step_count", [0, -5, 2.5])
    def test_invalid_step_count(self, step_count):
        with pytest.raises(InvalidParameterError):
            simulate(G, R, M, B, TS, step_count, [0.1, 0.0])

    def test_invalid_sample_time(self):
        with pytest.raises(InvalidParameterError):
            simulate(G, R, M, B, 0.0, 10, [0.1, 0.0])

    @pytest.mark.parametrize("x0", [[0.1], [0.1, 0.0, 0.0], [np.nan, 0.0]])
    def test_invalid_initial_state(self, x0):
        with pytest.raises(InvalidParameterError):
            simulate(G, R, M, B, TS, 10, x0)
