from .angle_extraction import (
    ObservedPendulum,
    angles_from_positions,
    estimate_sample_time,
    angular_velocity,
    observe_pendulum,
)

__all__ = [
    'ObservedPendulum',
    'angles_from_positions',
    'estimate_sample_time',
    'angular_velocity',
    'observe_pendulum',
]
