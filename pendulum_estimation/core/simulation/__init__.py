from .simulator import Trajectory, propagate, simulate

__all__ = ['Trajectory', 'propagate', 'simulate']
