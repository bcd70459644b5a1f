"""
Configuration loading for pendulum analysis.

The analysis is configured by one JSON document with three optional
sections plus an optional sample time override:

```json
{
    "parameters":    {"gravity": 9.80665, "radius": 0.4064, "mass": 0.073, "damping": 0.02},
    "estimator":     {"xatol": 1e-4, "fatol": 1e-4, "max_function_evaluations": 600},
    "observability": {"symmetry_tol": 1e-9},
    "sample_time":   null
}
```

Missing keys keep their dataclass defaults; unknown keys are rejected so a
typo cannot silently fall back to a default.
"""

import json
import warnings
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from pendulum_estimation.core.dynamics.pendulum_model import PendulumParameters
from pendulum_estimation.core.estimators.parameter_estimator import EstimatorConfig
from pendulum_estimation.core.observability.observability_analyzer import ObservabilityConfig
from pendulum_estimation.errors import InvalidParameterError


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "pendulum_analysis.json"


@dataclass
class AnalysisConfig:
    """
    Complete configuration of one pendulum analysis.

    Attributes
    ----------
    parameters : PendulumParameters
        Nominal (theoretical) parameters; also the initial guess of the fit
    estimator : EstimatorConfig
        Nelder-Mead settings
    observability : ObservabilityConfig
        Observability analysis settings
    sample_time : float, optional
        Fixed sampling interval [s]; None estimates it from the timestamps
    """
    parameters: PendulumParameters = field(default_factory=PendulumParameters)
    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    sample_time: Optional[float] = None

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'AnalysisConfig':
        """Build from a nested dictionary (e.g. parsed JSON)."""
        sections = {
            'parameters': PendulumParameters,
            'estimator': EstimatorConfig,
            'observability': ObservabilityConfig,
        }
        unknown = set(config) - set(sections) - {'sample_time'}
        if unknown:
            raise InvalidParameterError(f"Unknown configuration sections: {sorted(unknown)}")

        kwargs = {}
        for key, section_cls in sections.items():
            kwargs[key] = _build_section(key, section_cls, config.get(key) or {})

        sample_time = config.get('sample_time')
        if sample_time is not None:
            sample_time = float(sample_time)
            if not np.isfinite(sample_time) or sample_time <= 0.0:
                raise InvalidParameterError(f"sample_time must be positive, got {sample_time}")
        kwargs['sample_time'] = sample_time

        return cls(**kwargs)


def _build_section(name: str, section_cls, values: Dict[str, Any]):
    allowed = {f.name for f in fields(section_cls)}
    unknown = set(values) - allowed
    if unknown:
        raise InvalidParameterError(
            f"Unknown keys in '{name}' configuration: {sorted(unknown)}. "
            f"Allowed: {sorted(allowed)}"
        )
    return section_cls(**values)


def load_analysis_config(path: Optional[Union[str, Path]] = None) -> AnalysisConfig:
    """
    Load an analysis configuration from JSON.

    Parameters
    ----------
    path : str or Path, optional
        Configuration file. Defaults to ``config/pendulum_analysis.json``
        at the project root.

    Returns
    -------
    AnalysisConfig
        Parsed configuration, or the defaults if the file does not exist

    Raises
    ------
    InvalidParameterError
        If the file is not valid JSON or contains unknown keys.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        warnings.warn(f"Config file not found at {config_path}; using default parameters")
        return AnalysisConfig()

    try:
        with open(config_path, 'r') as f:
            raw_config = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidParameterError(f"Failed to parse JSON config at {config_path}: {e}") from e

    if not isinstance(raw_config, dict):
        raise InvalidParameterError(f"Config at {config_path} must be a JSON object")

    return AnalysisConfig.from_dict(raw_config)
