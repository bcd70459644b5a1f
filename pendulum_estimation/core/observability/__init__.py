"""
Observability analysis of the discrete pendulum model.

Builds the observability matrix and Gramian, and describes the
observability ellipse (axis lengths and principal directions), optionally
in balanced coordinates.
"""

from .observability_analyzer import (
    ObservabilityConfig,
    EllipseDescriptor,
    ObservabilityResult,
    observability_gramian,
    ellipse_from_gramian,
    observability_transform,
    analyze_observability,
)

__all__ = [
    'ObservabilityConfig',
    'EllipseDescriptor',
    'ObservabilityResult',
    'observability_gramian',
    'ellipse_from_gramian',
    'observability_transform',
    'analyze_observability',
]
