import inspect
import math

import numpy as np
import pytest
from scipy.integrate import trapezoid

from tidychrom.core.config import FitterConfiguration
from tidychrom.core.enums import Side
from tidychrom.core.exceptions import InvalidTraceError
from tidychrom.core.models import PeakCandidate, SideCandidate
from tidychrom.processing import fitting
from tidychrom.processing.peaks import locate_peaks


def create_side(center: float = 5.0, height: float = 100.0, a: float = 0.5, b: float = 0.5, alpha: float = 0.5):
    return SideCandidate(center=center, height=height, width=a + b, a=a, b=b, alpha=alpha)


class TestEGHFunction:
    def test_maximum_at_center(self, time):
        y = fitting.egh(time, 5.0, 10.0, 0.5, 0.2)
        assert time[np.argmax(y)] == pytest.approx(5.0)
        assert y.max() == pytest.approx(10.0)

    def test_zero_decay_is_gaussian(self, time):
        expected = 10.0 * np.exp(-((time - 4.0) ** 2) / (2 * 0.3**2))
        assert np.allclose(fitting.egh(time, 4.0, 10.0, 0.3, 0.0), expected)

    def test_undefined_region_is_zero(self, time):
        y = fitting.egh(time, 5.0, 10.0, 0.1, 1.0)
        assert not np.any(y[time - 5.0 <= -0.02])
        assert np.all(np.isfinite(y))

    def test_zero_width_and_decay_is_zero(self, time):
        assert not np.any(fitting.egh(time, 5.0, 10.0, 0.0, 0.0))


class TestEGHParameters:
    def test_symmetric_boundaries_recover_gaussian_width(self):
        w, alpha = 0.5, 0.5
        a = w * math.sqrt(-2 * math.log(alpha))
        assert fitting.egh_width(a, a, alpha) == pytest.approx(w)
        assert fitting.egh_decay(a, a, alpha) == 0.0

    def test_asymmetric_boundaries_recover_egh_parameters(self):
        w, e, alpha = 0.3, 0.1, 0.2
        L = -math.log(alpha)
        root = math.sqrt((e * L) ** 2 + 8 * w**2 * L)
        a = (root - e * L) / 2
        b = (root + e * L) / 2
        assert fitting.egh_width(a, b, alpha) == pytest.approx(w)
        assert fitting.egh_decay(a, b, alpha) == pytest.approx(e)

    def test_fronting_peak_has_negative_decay(self):
        assert fitting.egh_decay(0.8, 0.4, 0.5) < 0.0


class TestEGHArea:
    @pytest.mark.parametrize("height,width", [(1.0, 1.0), (100.0, 0.5), (3.0, 0.01)])
    def test_gaussian_limit(self, height, width):
        expected = height * width * math.sqrt(2 * math.pi)
        assert fitting.egh_area(height, width, 0.0) == pytest.approx(expected)

    @pytest.mark.parametrize("decay", [0.05, 0.1, 0.3, -0.1])
    def test_area_matches_numerical_integral(self, decay):
        x = np.linspace(-20.0, 30.0, 50001)
        y = fitting.egh(x, 5.0, 80.0, 0.3, decay)
        expected = trapezoid(y, x)
        assert fitting.egh_area(80.0, 0.3, decay) == pytest.approx(expected, rel=0.05)


class TestFitSide:
    def test_exact_model_has_zero_error(self, time):
        side = create_side(center=5.0, height=100.0, a=0.6, b=0.6, alpha=0.4)
        w = fitting.egh_width(side.a, side.b, side.alpha)
        y = fitting.egh(time, 5.0, 100.0, w, 0.0)
        result = fitting.fit_side(time, y, side, FitterConfiguration())
        assert result.error == pytest.approx(0.0, abs=1e-6)
        assert result.width == pytest.approx(w)

    def test_small_values_are_suppressed(self, time):
        side = create_side(center=5.0, height=100.0, a=0.6, b=0.6, alpha=0.4)
        config = FitterConfiguration(min_relative_height=0.1)
        result = fitting.fit_side(time, np.zeros_like(time), side, config)
        assert not np.any((result.fit > 0.0) & (result.fit < 10.0))

    def test_empty_error_window_has_infinite_error(self, time):
        side = create_side(center=20.0)
        result = fitting.fit_side(time, np.ones_like(time), side, FitterConfiguration())
        assert math.isinf(result.error)


class TestFitPeaks:
    def test_gaussian_fit(self, time, gaussian, gaussian_params):
        center, height, width = gaussian_params
        candidates = locate_peaks(time, gaussian)
        (peak,) = fitting.fit_peaks(time, gaussian, candidates)
        assert peak is not None
        assert peak.time == pytest.approx(center, abs=0.02)
        assert peak.height == pytest.approx(height, rel=0.02)
        assert peak.error < 2.0
        assert peak.area == pytest.approx(height * width * math.sqrt(2 * math.pi), rel=0.05)
        assert peak.fit.shape == time.shape

    def test_tailing_peak_fit(self, time, tailing_peak, tailing_params):
        center, height, _, _ = tailing_params
        candidates = locate_peaks(time, tailing_peak)
        (peak,) = fitting.fit_peaks(time, tailing_peak, candidates)
        assert peak is not None
        assert peak.time == pytest.approx(center, abs=0.02)
        assert peak.height == pytest.approx(height, rel=0.02)
        assert peak.error < 5.0
        assert peak.decay > 0.0
        expected_area = trapezoid(tailing_peak, time)
        assert peak.area == pytest.approx(expected_area, rel=0.05)

    def test_refit_of_fitted_curve_is_stable(self, time, gaussian):
        (peak,) = fitting.fit_peaks(time, gaussian, locate_peaks(time, gaussian))
        assert peak is not None
        (refit,) = fitting.fit_peaks(time, peak.fit, locate_peaks(time, peak.fit))
        assert refit is not None
        assert refit.time == pytest.approx(peak.time, abs=0.02)
        assert refit.height == pytest.approx(peak.height, rel=0.02)

    def test_absent_candidate_is_skipped(self, time, gaussian):
        Y = np.column_stack([gaussian, np.zeros_like(time)])
        candidates = locate_peaks(time, Y)
        peak, absent = fitting.fit_peaks(time, Y, candidates)
        assert peak is not None
        assert peak.channel == 0
        assert absent is None

    def test_zero_center_candidate_is_skipped(self, time, gaussian):
        candidate = PeakCandidate(channel=0, left=create_side(center=0.0), right=create_side())
        assert fitting.fit_peaks(time, gaussian, [candidate]) == [None]

    def test_ties_select_left_side(self, time, gaussian):
        side = create_side(center=5.0)
        candidate = PeakCandidate(channel=0, left=side, right=side)
        (peak,) = fitting.fit_peaks(time, gaussian, [candidate])
        assert peak is not None
        assert peak.side == Side.LEFT

    def test_candidate_channel_not_in_intensity_raises_error(self, time, gaussian):
        candidate = PeakCandidate(channel=1, left=create_side(), right=create_side())
        with pytest.raises(InvalidTraceError):
            fitting.fit_peaks(time, gaussian, [candidate])


class TestProcessingNamespace:
    def test_fitting_submodule_is_importable(self):
        assert inspect.ismodule(fitting)
        assert callable(fitting.fit_peaks)
        assert callable(fitting.fit_side)

    def test_egh_package_attribute_is_the_model_function(self, time):
        from tidychrom import processing

        assert not inspect.ismodule(processing.egh)
        assert processing.egh is fitting.egh
        assert processing.egh(time, 5.0, 10.0, 0.5, 0.0).max() == pytest.approx(10.0)
