"""tidychrom core data models."""

from __future__ import annotations

from typing import Iterator
from uuid import UUID, uuid4

import numpy
import pydantic
from typing_extensions import Self

from ..utils.numpy import FloatArray, FloatArray1D
from .dataflow import ProcessStatus
from .enums import Side


class TidyChromBaseModel(pydantic.BaseModel):
    """Base model that all other library models inherit from."""

    model_config = pydantic.ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)


class SideCandidate(TidyChromBaseModel):
    """Peak shape estimation derived from the boundary found on one side of the apex.

    Both boundaries of a side candidate are located at the same height, expressed as a
    fraction of the peak height by `alpha`.

    """

    model_config = pydantic.ConfigDict(frozen=True)

    center: float
    """The refined peak apex location."""

    height: float
    """The refined peak apex height."""

    width: float
    """The distance between the left and right boundaries."""

    a: float
    """The distance from the left boundary to the center."""

    b: float
    """The distance from the center to the right boundary."""

    alpha: float = pydantic.Field(gt=0.0, lt=1.0)
    """The boundary height as a fraction of the peak height."""


class PeakCandidate(TidyChromBaseModel):
    """The peak boundaries detected in a channel.

    Two mirrored estimations are kept, one for each side where the boundary was detected.
    The peak fitter evaluates both and keeps the one with the lowest error.

    """

    model_config = pydantic.ConfigDict(frozen=True)

    channel: pydantic.NonNegativeInt
    """The intensity column where the peak was detected."""

    left: SideCandidate
    """Estimation using the boundary found on the left side of the apex."""

    right: SideCandidate
    """Estimation using the boundary found on the right side of the apex."""

    def iter_sides(self) -> Iterator[tuple[Side, SideCandidate]]:
        """Iterate over pairs of sides and side candidates, starting from the left side."""
        yield Side.LEFT, self.left
        yield Side.RIGHT, self.right

    def has_zero_center(self) -> bool:
        """Check if any of the side candidates has its center set to zero."""
        return self.left.center == 0.0 or self.right.center == 0.0


class FittedPeak(TidyChromBaseModel):
    """A peak quantified using an exponential-Gaussian hybrid model."""

    model_config = pydantic.ConfigDict(frozen=True)

    channel: pydantic.NonNegativeInt
    """The intensity column where the peak was fitted."""

    side: Side
    """The side candidate used to build the model."""

    time: float
    """The peak center."""

    height: float
    """The peak height."""

    width: float
    """The standard deviation of the Gaussian component."""

    decay: float
    """The time constant of the exponential component. Positive values describe tailing peaks
    and negative values describe fronting peaks."""

    a: float
    """The distance from the left boundary to the center."""

    b: float
    """The distance from the center to the right boundary."""

    area: float
    """The model area."""

    fit: FloatArray1D = pydantic.Field(repr=False)
    """The model evaluated at each time point of the trace."""

    error: float
    """The root mean squared residual near the peak center, as a percentage of the peak height."""


class Chromatogram(TidyChromBaseModel):
    """A time axis shared by one or more intensity channels, and the results of processing them.

    Chromatogram is the unit of work of operators and pipelines.

    """

    id: UUID = pydantic.Field(default_factory=uuid4)
    """A unique id for the chromatogram."""

    time: FloatArray1D = pydantic.Field(repr=False)
    """The time axis. Must be strictly increasing."""

    intensity: FloatArray = pydantic.Field(repr=False)
    """The intensity of each channel. Each column is a channel."""

    baseline: FloatArray | None = pydantic.Field(default=None, repr=False)
    """If set, the baseline estimated for each channel."""

    candidates: list[PeakCandidate | None] = list()
    """The peak candidates located in each channel."""

    peaks: list[FittedPeak | None] = list()
    """The peaks fitted in each channel."""

    status: ProcessStatus = pydantic.Field(default_factory=ProcessStatus)
    """The chromatogram processing status."""

    @pydantic.field_validator("intensity", mode="after")
    @classmethod
    def reshape_1d_intensity(cls, value: FloatArray) -> FloatArray:
        """Store single channel intensity as a column."""
        if value.ndim == 1:
            value = value.reshape((value.size, 1))
        return value

    @pydantic.model_validator(mode="after")
    def check_time_strictly_increasing(self) -> Self:
        """Validate the time axis."""
        msg = "time must be a strictly increasing 1D array."
        assert self.time.ndim == 1 and numpy.all(numpy.diff(self.time) > 0.0), msg
        return self

    @pydantic.model_validator(mode="after")
    def check_intensity_shape(self) -> Self:
        """Validate that intensity and baseline rows match the time axis."""
        msg = "intensity must be a 2D array with one row per time point."
        assert self.intensity.ndim == 2 and self.intensity.shape[0] == self.time.size, msg
        if self.baseline is not None:
            msg = "baseline shape must match the intensity shape."
            assert self.baseline.shape == self.intensity.shape, msg
        return self

    @property
    def n_channels(self) -> int:
        """The number of intensity channels."""
        return self.intensity.shape[1]

    def get_corrected_intensity(self) -> FloatArray:
        """Compute the intensity with the baseline subtracted, if it was estimated but not subtracted yet."""
        if self.baseline is None or self.status.baseline_subtracted:
            return self.intensity
        return self.intensity - self.baseline
