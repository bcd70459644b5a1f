"""
Observability Analysis for the Discrete Pendulum Model

Quantifies how well the pendulum state can be reconstructed from its
outputs through the eigenstructure of the discrete observability Gramian.

Mathematical Formulation
------------------------
**Observability matrix** ($n = 2$ states):

$$\\mathcal{O}_d = \\begin{bmatrix} C_d \\\\ C_d A_d \\end{bmatrix}, \\qquad
G = \\mathcal{O}_d^T \\mathcal{O}_d$$

**Observability ellipse:** the level set $x^T G x = 1$. With eigenpairs
$(\\lambda_i, v_i)$ of $G$ sorted descending, the ellipse has half-length
$1/\\sqrt{\\lambda_i}$ along $v_i$. The direction of the largest eigenvalue
is the most observable one and carries the *shortest* axis.

**Balancing transform (optional):** with $G = V E V^T$ and
$T = E^{1/2} V^T$, the realization $(T A_d T^{-1}, C_d T^{-1})$ in
coordinates $z = T x$ has observability matrix
$[C_d T^{-1};\\ C_d A_d T^{-1}]$ and Gramian $T^{-T} G T^{-1} = I$.

Degenerate Modes
----------------
A non-positive eigenvalue means a direction the outputs cannot see. Its axis
length is reported as ``inf`` with ``observable=False`` and an
``UnobservableModeWarning``; this is a physical outcome, not an error.
"""

import warnings
import numpy as np
import control as ctrl
from dataclasses import dataclass
from typing import Optional, Tuple

from pendulum_estimation.core.dynamics.pendulum_model import (
    LinearModel,
    discrete_pendulum_model,
)
from pendulum_estimation.errors import ObservabilityError, UnobservableModeWarning


@dataclass
class ObservabilityConfig:
    """
    Configuration for observability analysis.

    Attributes
    ----------
    symmetry_tol : float
        Relative tolerance for the Gramian symmetry check.
    """
    symmetry_tol: float = 1e-9


@dataclass(frozen=True)
class EllipseDescriptor:
    """
    Geometry of the observability ellipse.

    Attributes
    ----------
    eigenvalues : np.ndarray
        Gramian eigenvalues, descending
    eigenvectors : np.ndarray
        Matching unit eigenvectors as columns
    most_observable_length : float
        Half-axis along the most observable direction, 1/sqrt(lambda_1)
    least_observable_length : float
        Half-axis along the least observable direction, 1/sqrt(lambda_2)
    observable : bool
        False if any eigenvalue is not positive (some length is inf)
    """
    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    most_observable_length: float
    least_observable_length: float
    observable: bool

    @property
    def most_observable(self) -> np.ndarray:
        return self.eigenvectors[:, 0]

    @property
    def least_observable(self) -> np.ndarray:
        return self.eigenvectors[:, 1]

    @property
    def semi_major(self) -> float:
        return max(self.most_observable_length, self.least_observable_length)

    @property
    def semi_minor(self) -> float:
        return min(self.most_observable_length, self.least_observable_length)

    def boundary(self, n_points: int = 100) -> np.ndarray:
        """
        Ellipse outline in state coordinates.

        Returns
        -------
        np.ndarray
            Shape (2, n_points), closed curve starting on the most
            observable axis
        """
        if not self.observable:
            raise ObservabilityError("Ellipse is unbounded along an unobservable direction")

        phi = np.linspace(0.0, 2.0 * np.pi, n_points)
        coords = np.vstack([
            self.most_observable_length * np.cos(phi),
            self.least_observable_length * np.sin(phi),
        ])
        return self.eigenvectors @ coords


@dataclass(frozen=True)
class ObservabilityResult:
    """Observability matrix, Gramian and ellipse for one parameter set."""
    observability_matrix: np.ndarray
    gramian: np.ndarray
    ellipse: EllipseDescriptor
    model: LinearModel
    transform: Optional[np.ndarray] = None

    @property
    def rank(self) -> int:
        return int(np.linalg.matrix_rank(self.observability_matrix))

    @property
    def fully_observable(self) -> bool:
        return self.rank == self.model.n_states


def observability_gramian(A: np.ndarray, C: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Observability matrix [C; CA; ...; CA^(n-1)] and its Gramian O^T O.
    """
    O = np.asarray(ctrl.obsv(A, C), dtype=float)
    return O, O.T @ O


def _check_symmetric(G: np.ndarray, tol: float) -> None:
    if not np.all(np.isfinite(G)):
        raise ObservabilityError("Observability Gramian contains non-finite entries")
    scale = max(1.0, float(np.max(np.abs(G))))
    if not np.allclose(G, G.T, rtol=0.0, atol=tol * scale):
        raise ObservabilityError(
            "Observability Gramian is not symmetric; it cannot be diagonalized "
            "in real arithmetic"
        )


def ellipse_from_gramian(G: np.ndarray,
                         config: Optional[ObservabilityConfig] = None) -> EllipseDescriptor:
    """
    Eigendecompose a Gramian into an observability ellipse.

    Raises
    ------
    ObservabilityError
        If G is non-finite or not symmetric.
    """
    config = config if config is not None else ObservabilityConfig()
    _check_symmetric(G, config.symmetry_tol)

    try:
        eigenvalues, eigenvectors = np.linalg.eigh(0.5 * (G + G.T))
    except np.linalg.LinAlgError as e:
        raise ObservabilityError(f"Gramian eigendecomposition failed: {e}") from e

    # eigh sorts ascending
    idx = np.argsort(eigenvalues)[::-1]
    eigenvalues = eigenvalues[idx]
    eigenvectors = eigenvectors[:, idx]

    lengths = []
    for value in eigenvalues[:2]:
        lengths.append(1.0 / np.sqrt(value) if value > 0.0 else np.inf)

    observable = bool(np.all(eigenvalues > 0.0))
    if not observable:
        warnings.warn(
            f"Gramian has non-positive eigenvalue(s) {eigenvalues.tolist()}; "
            "the matching direction is unobservable",
            UnobservableModeWarning,
        )

    return EllipseDescriptor(
        eigenvalues=eigenvalues,
        eigenvectors=eigenvectors,
        most_observable_length=float(lengths[0]),
        least_observable_length=float(lengths[1]),
        observable=observable,
    )


def observability_transform(G: np.ndarray) -> np.ndarray:
    """
    Balancing transform T = sqrt(E) V^T of a Gramian G = V E V^T.

    Raises
    ------
    ObservabilityError
        If G is singular, so T has no inverse.
    """
    eigenvalues, V = np.linalg.eigh(0.5 * (G + G.T))
    if np.any(eigenvalues <= 0.0):
        raise ObservabilityError(
            f"Cannot form observability transform: Gramian eigenvalues {eigenvalues.tolist()} "
            "are not all positive"
        )
    return np.diag(np.sqrt(eigenvalues)) @ V.T


def analyze_observability(gravity: float, radius: float, mass: float, damping: float,
                          sample_time: float, apply_transform: bool = False,
                          config: Optional[ObservabilityConfig] = None) -> ObservabilityResult:
    """
    Observability ellipse of the discretized pendulum.

    Parameters
    ----------
    gravity, radius, mass, damping : float
        Physical parameters (radius and mass positive)
    sample_time : float
        Sampling interval [s]
    apply_transform : bool
        Express the result in balanced coordinates z = T x and return T
    config : ObservabilityConfig, optional
        Analysis tolerances

    Returns
    -------
    ObservabilityResult
        Matrix, Gramian and ellipse; ``transform`` is set only when
        ``apply_transform`` is True
    """
    config = config if config is not None else ObservabilityConfig()
    model = discrete_pendulum_model(gravity, radius, mass, damping, sample_time)

    O_d, G = observability_gramian(model.A, model.C)
    _check_symmetric(G, config.symmetry_tol)

    T = None
    if apply_transform:
        T = observability_transform(G)
        T_inv = np.linalg.inv(T)
        # Realization in z = T x
        O_d, G = observability_gramian(T @ model.A @ T_inv, model.C @ T_inv)

    ellipse = ellipse_from_gramian(G, config)

    return ObservabilityResult(
        observability_matrix=O_d,
        gramian=G,
        ellipse=ellipse,
        model=model,
        transform=T,
    )
