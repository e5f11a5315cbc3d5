"""Chromatogram operators for baseline correction, smoothing and peak integration."""

from __future__ import annotations

import numpy
import pydantic
from numpy.typing import ArrayLike

from ..core.config import BaselineConfiguration, FitterConfiguration, PeakLocatorConfiguration, SmoothingConfiguration
from ..core.dataflow import ProcessStatus
from ..core.models import Chromatogram
from ..core.operators import PeakOperator, Pipeline, TraceOperator
from ..core.registry import operator_registry
from ..utils.numpy import FloatArray
from .baseline import estimate_baseline
from .fitting import fit_peaks
from .peaks import locate_peaks
from .smoothing import smooth


@operator_registry.register
class BaselineCorrector(TraceOperator, BaselineConfiguration):
    """Estimate the baseline of each channel using asymmetric least squares.

    The baseline is stored in the chromatogram `baseline` field. If `subtract` is set to
    ``True``, it is also subtracted from the intensity.

    """

    subtract: bool = True
    """Subtract the estimated baseline from the intensity."""

    def get_expected_status_in(self) -> ProcessStatus:
        """Get the expected status before estimating the baseline."""
        return ProcessStatus()

    def get_expected_status_out(self) -> ProcessStatus:
        """Get the expected status after estimating the baseline."""
        return ProcessStatus(baseline_estimated=True, baseline_subtracted=self.subtract)

    def transform_intensity(self, data: Chromatogram) -> FloatArray:
        """Compute the baseline and the transformed intensity."""
        baseline = estimate_baseline(data.intensity, self, self.create_executor())
        data.baseline = baseline
        if self.subtract:
            return data.intensity - baseline
        return data.intensity


@operator_registry.register
class TraceSmoother(TraceOperator, SmoothingConfiguration):
    """Smooth the intensity of each channel using a Whittaker smoother."""

    def get_expected_status_in(self) -> ProcessStatus:
        """Get the expected status before smoothing."""
        return ProcessStatus()

    def get_expected_status_out(self) -> ProcessStatus:
        """Get the expected status after smoothing."""
        return ProcessStatus(smoothed=True)

    def transform_intensity(self, data: Chromatogram) -> FloatArray:
        """Compute the smoothed intensity."""
        return smooth(data.intensity, self, self.create_executor())


@operator_registry.register
class PeakLocator(PeakOperator, PeakLocatorConfiguration):
    """Locate a peak candidate in each channel.

    If a baseline was estimated but not subtracted, candidates are located in the baseline
    corrected intensity.

    """

    center: float | list[float] | None = None
    """The expected peak center, for all channels or for each channel. If not set, the time of each
    channel maximum is used."""

    width: pydantic.PositiveFloat | list[float] | None = None
    """The search window width, for all channels or for each channel. If not set, 5 % of the maximum
    time is used."""

    def get_expected_status_in(self) -> ProcessStatus:
        """Get the expected status before locating peaks."""
        return ProcessStatus()

    def get_expected_status_out(self) -> ProcessStatus:
        """Get the expected status after locating peaks."""
        return ProcessStatus(peaks_located=True)

    def _apply_operator(self, data: Chromatogram) -> None:
        intensity = data.get_corrected_intensity()
        data.candidates = locate_peaks(data.time, intensity, self.center, self.width, self, self.create_executor())


@operator_registry.register
class PeakFitter(PeakOperator, FitterConfiguration):
    """Fit an exponential-Gaussian hybrid model to the located peak candidates."""

    def get_expected_status_in(self) -> ProcessStatus:
        """Get the expected status before fitting peaks."""
        return ProcessStatus(peaks_located=True)

    def get_expected_status_out(self) -> ProcessStatus:
        """Get the expected status after fitting peaks."""
        return ProcessStatus(peaks_located=True, peaks_fitted=True)

    def _apply_operator(self, data: Chromatogram) -> None:
        intensity = data.get_corrected_intensity()
        data.peaks = fit_peaks(data.time, intensity, data.candidates, self, self.create_executor())


def create_integration_pipeline(
    id: str,
    *,
    correct_baseline: bool = True,
    subtract_baseline: bool = True,
    baseline: BaselineConfiguration | None = None,
    smoothing: SmoothingConfiguration | None = None,
    locator: PeakLocatorConfiguration | None = None,
    fitter: FitterConfiguration | None = None,
    center: float | list[float] | None = None,
    width: float | list[float] | None = None,
    max_workers: int = 1,
) -> Pipeline:
    """Create a pipeline that detects and integrates a peak in each chromatogram channel.

    :param id: the pipeline id. Used as prefix for operator ids.
    :param correct_baseline: estimate the baseline of each channel.
    :param subtract_baseline: subtract the estimated baseline from the intensity. If ``False``, the
        baseline is only used to correct the intensity passed to the peak locator and fitter.
    :param baseline: the baseline configuration. If not provided, the default configuration is used.
    :param smoothing: the smoothing configuration. If not provided, the intensity is not smoothed.
    :param locator: the peak locator bounds.
    :param fitter: the EGH fitter configuration.
    :param center: the expected peak center, for all channels or for each channel.
    :param width: the search window width, for all channels or for each channel.
    :param max_workers: number of threads used to process channels.

    """
    pipe = Pipeline(id)
    ops = list()
    if correct_baseline:
        baseline_params = dict() if baseline is None else baseline.model_dump()
        ops.append(BaselineCorrector(subtract=subtract_baseline, **baseline_params))
    if smoothing is not None:
        ops.append(TraceSmoother(**smoothing.model_dump()))

    locator_params = dict() if locator is None else locator.model_dump()
    ops.append(PeakLocator(center=center, width=width, **locator_params))

    fitter_params = dict() if fitter is None else fitter.model_dump()
    ops.append(PeakFitter(**fitter_params))

    for op in ops:
        op.id = f"{pipe.id}-{op.__class__.__name__}"
        op.max_workers = max_workers
        pipe.add_operator(op)
    return pipe


def integrate(
    time: ArrayLike, intensity: ArrayLike, pipeline: Pipeline | None = None
) -> Chromatogram:
    """Apply an integration pipeline to a trace.

    :param time: the time axis
    :param intensity: 1D array with a single channel or 2D array where each column is a channel.
    :param pipeline: the pipeline to apply. If not provided, the pipeline created by
        :py:func:`create_integration_pipeline` with default parameters is used.
    :return: a new chromatogram with the processing results.

    """
    if pipeline is None:
        pipeline = create_integration_pipeline("integrate")
    data = Chromatogram(time=numpy.asarray(time, dtype=float), intensity=numpy.asarray(intensity, dtype=float))
    pipeline.apply(data)
    return data
