"""
Unit tests for analysis configuration loading.
"""

import json
import pytest

from pendulum_estimation.config import (
    AnalysisConfig,
    DEFAULT_CONFIG_PATH,
    load_analysis_config,
)
from pendulum_estimation.core.dynamics.pendulum_model import PendulumParameters
from pendulum_estimation.errors import InvalidParameterError


class TestAnalysisConfig:
    """Test dictionary parsing."""

    def test_defaults(self):
        config = AnalysisConfig()

        assert config.parameters == PendulumParameters()
        assert config.estimator.xatol == 1e-4
        assert config.observability.symmetry_tol == 1e-9
        assert config.sample_time is None

    def test_partial_sections(self):
        config = AnalysisConfig.from_dict({
            'parameters': {'damping': 0.05},
            'estimator': {'max_function_evaluations': 1000},
        })

        assert config.parameters.damping == 0.05
        assert config.parameters.radius == 0.4064
        assert config.estimator.max_function_evaluations == 1000
        assert config.estimator.fatol == 1e-4

    def test_sample_time_override(self):
        config = AnalysisConfig.from_dict({'sample_time': 0.02})
        assert config.sample_time == 0.02

    @pytest.mark.parametrize("sample_time", [0.0, -1.0])
    def test_invalid_sample_time(self, sample_time):
        with pytest.raises(InvalidParameterError):
            AnalysisConfig.from_dict({'sample_time': sample_time})

    def test_unknown_section(self):
        with pytest.raises(InvalidParameterError, match="Unknown configuration sections"):
            AnalysisConfig.from_dict({'plotting': {}})

    def test_unknown_key(self):
        with pytest.raises(InvalidParameterError, match="radus"):
            AnalysisConfig.from_dict({'parameters': {'radus': 0.4}})

    def test_null_section_uses_defaults(self):
        config = AnalysisConfig.from_dict({'estimator': None})
        assert config.estimator.xatol == 1e-4


class TestLoadAnalysisConfig:
    """Test JSON file loading."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "analysis.json"
        path.write_text(json.dumps({
            'parameters': {'radius': 0.5, 'mass': 0.1},
            'estimator': {'verbose': True},
            'sample_time': 0.04,
        }))

        config = load_analysis_config(path)

        assert config.parameters.radius == 0.5
        assert config.parameters.mass == 0.1
        assert config.estimator.verbose is True
        assert config.sample_time == 0.04

    def test_missing_file_warns_and_defaults(self, tmp_path):
        with pytest.warns(UserWarning, match="not found"):
            config = load_analysis_config(tmp_path / "missing.json")
        assert config == AnalysisConfig()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")
        with pytest.raises(InvalidParameterError, match="Failed to parse"):
            load_analysis_config(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(InvalidParameterError):
            load_analysis_config(path)

    def test_shipped_default_config(self):
        assert DEFAULT_CONFIG_PATH.exists()
        config = load_analysis_config()

        assert config.parameters == PendulumParameters()
        assert config.estimator.max_function_evaluations == 600
        assert config.sample_time is None
