import logging

import pydantic
import pytest

from tidychrom.core import config


class TestBaselineConfiguration:
    def test_defaults(self):
        params = config.BaselineConfiguration()
        assert params.smoothness == 1e6
        assert params.asymmetry == 1e-4
        assert params.max_iter == 10
        assert params.tol == 1e-4

    @pytest.mark.parametrize(
        "asymmetry,expected", [(2.0, config.MAX_ASYMMETRY), (-1.0, config.MIN_ASYMMETRY), (0.0, config.MIN_ASYMMETRY)]
    )
    def test_asymmetry_is_clamped(self, asymmetry, expected):
        assert config.BaselineConfiguration(asymmetry=asymmetry).asymmetry == expected

    def test_non_positive_iterations_use_one_iteration(self):
        assert config.BaselineConfiguration(max_iter=0).max_iter == 1

    def test_negative_tolerance_is_set_to_zero(self):
        assert config.BaselineConfiguration(tol=-1.0).tol == 0.0

    def test_non_positive_smoothness_use_default(self):
        assert config.BaselineConfiguration(smoothness=-5.0).smoothness == config.DEFAULT_BASELINE_SMOOTHNESS

    def test_recovered_parameter_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            config.BaselineConfiguration(asymmetry=5.0)
        assert "asymmetry" in caplog.text

    def test_invalid_type_raise_ValidationError(self):
        with pytest.raises(pydantic.ValidationError):
            config.BaselineConfiguration(smoothness="high")  # type: ignore

    def test_assignment_is_validated(self):
        params = config.BaselineConfiguration()
        params.asymmetry = 1.5
        assert params.asymmetry == config.MAX_ASYMMETRY


class TestSmoothingConfiguration:
    def test_non_positive_smoothness_use_default(self):
        params = config.SmoothingConfiguration(smoothness=0.0)
        assert params.smoothness == config.DEFAULT_SMOOTHING_SMOOTHNESS


class TestPeakLocatorConfiguration:
    def test_default_bounds(self):
        bounds = config.PeakLocatorConfiguration().resolve_bounds(0.0, 10.0, -1.0, 50.0)
        assert bounds == (0.0, 10.0, -1.0, 100.0)

    def test_time_bounds_are_clipped_to_trace(self):
        params = config.PeakLocatorConfiguration(xmin=-5.0, xmax=20.0)
        assert params.resolve_bounds(0.0, 10.0, 0.0, 1.0)[:2] == (0.0, 10.0)

    def test_custom_bounds(self):
        params = config.PeakLocatorConfiguration(xmin=2.0, xmax=8.0, ymin=5.0, ymax=20.0)
        assert params.resolve_bounds(0.0, 10.0, 0.0, 50.0) == (2.0, 8.0, 5.0, 20.0)

    def test_non_positive_amount_raise_ValidationError(self):
        with pytest.raises(pydantic.ValidationError):
            config.PeakLocatorConfiguration(amount=0)
