"""Utilities to simulate chromatographic traces.

Provides:

TimeGridSpec
    Define the sampling of the time axis.
EGHPeakSpec
    Define a peak shape using the exponential-Gaussian hybrid model.
SimulatedTraceFactory
    A pydantic model that creates simulated traces and chromatograms.

"""

from __future__ import annotations

import numpy
import pydantic
from typing_extensions import Self

from ..core.models import Chromatogram
from ..processing.fitting import egh
from ..utils.numpy import FloatArray, FloatArray1D


class TimeGridSpec(pydantic.BaseModel):
    """Define the sampling of the time axis."""

    start: pydantic.NonNegativeFloat = 0.0
    """The first time point."""

    end: pydantic.PositiveFloat = 10.0
    """The last time point."""

    size: int = pydantic.Field(ge=3, default=1001)
    """The number of time points."""

    @pydantic.model_validator(mode="after")
    def check_start_lower_than_end(self) -> Self:
        """Validate the grid range."""
        assert self.start < self.end, "`start` must be lower than `end`."
        return self

    def create(self) -> FloatArray1D:
        """Create an evenly spaced time axis."""
        return numpy.linspace(self.start, self.end, self.size)


class EGHPeakSpec(pydantic.BaseModel):
    """Define a chromatographic peak using the exponential-Gaussian hybrid model.

    A `decay` equal to zero creates a Gaussian peak. Positive values create tailing peaks and
    negative values create fronting peaks.

    """

    center: float
    """The peak apex location."""

    height: pydantic.PositiveFloat = 100.0
    """The peak apex height."""

    width: pydantic.PositiveFloat = 0.5
    """The standard deviation of the Gaussian component."""

    decay: float = 0.0
    """The time constant of the exponential component."""

    def compute(self, time: FloatArray1D) -> FloatArray1D:
        """Evaluate the peak at each time point."""
        return egh(time, self.center, self.height, self.width, self.decay)


class LinearBaselineSpec(pydantic.BaseModel):
    """Define a linear baseline added to every channel."""

    intercept: float = 0.0
    """The baseline value at time zero."""

    slope: float = 0.0
    """The baseline change per time unit."""

    def compute(self, time: FloatArray1D) -> FloatArray1D:
        """Evaluate the baseline at each time point."""
        return self.intercept + self.slope * time


class NoiseSpec(pydantic.BaseModel):
    """Define an additive Gaussian noise added to the measured signal."""

    std: pydantic.NonNegativeFloat = 0.0
    """The noise standard deviation. If set to zero, no noise is added."""

    def compute_noise(self, size: int) -> FloatArray1D:
        """Compute a realization of the noise."""
        if self.std == 0.0:
            return numpy.zeros(size)
        return numpy.random.normal(scale=self.std, size=size)


class SimulatedTraceFactory(pydantic.BaseModel):
    """Utility that creates simulated multichannel traces.

    Each channel is the sum of its peaks, the baseline and an independent noise realization.

    """

    grid: TimeGridSpec = TimeGridSpec()
    """The time axis sampling."""

    channels: list[list[EGHPeakSpec]] = list()
    """The peaks in each channel. An empty list creates a channel with baseline and noise only."""

    baseline: LinearBaselineSpec = LinearBaselineSpec()
    """The baseline added to all channels."""

    noise: NoiseSpec = NoiseSpec()
    """The noise added to all channels."""

    def create_trace(self) -> tuple[FloatArray1D, FloatArray]:
        """Create a time axis and an intensity array with a column for each channel."""
        time = self.grid.create()
        intensity = numpy.zeros(shape=(time.size, len(self.channels)))
        baseline = self.baseline.compute(time)
        for k, peaks in enumerate(self.channels):
            column = baseline + self.noise.compute_noise(time.size)
            for peak in peaks:
                column += peak.compute(time)
            intensity[:, k] = column
        return time, intensity

    def __call__(self, **kwargs) -> Chromatogram:
        """Create a new simulated chromatogram.

        :param kwargs: extra chromatogram information passed to the :py:class:`tidychrom.core.models.Chromatogram`
            constructor.

        """
        time, intensity = self.create_trace()
        return Chromatogram(time=time, intensity=intensity, **kwargs)
