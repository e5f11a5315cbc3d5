"""Configuration models for trace processing algorithms.

Out of range values are not rejected. They are replaced by the closest valid value
(or by the default) and a warning is logged.

"""

from __future__ import annotations

from logging import getLogger

import pydantic

logger = getLogger(__name__)

MIN_ASYMMETRY = 1e-9
MAX_ASYMMETRY = 1 - 1e-9

DEFAULT_BASELINE_SMOOTHNESS = 1e6
DEFAULT_SMOOTHING_SMOOTHNESS = 0.5


class BaseConfiguration(pydantic.BaseModel):
    """Base model for algorithm configuration."""

    model_config = pydantic.ConfigDict(validate_assignment=True)


class BaselineConfiguration(BaseConfiguration):
    """Store the parameters of the asymmetric least squares baseline estimation."""

    smoothness: float = DEFAULT_BASELINE_SMOOTHNESS
    """The penalty applied to the baseline second differences. Typical values are between ``1e3`` and ``1e9``."""

    asymmetry: float = 1e-4
    """The weight of samples above the baseline. Samples at or below the baseline are weighted
    with ``1 - asymmetry``. Typical values are between ``1e-6`` and ``1e-1``."""

    max_iter: int = 10
    """The maximum number of reweighting iterations."""

    tol: float = 1e-4
    """Stop iterating if the mean absolute change of the weights is lower or equal than this value."""

    @pydantic.field_validator("smoothness")
    @classmethod
    def reset_non_positive_smoothness(cls, value: float) -> float:
        """Replace non-positive smoothness values with the default."""
        if value <= 0.0:
            logger.warning(f"Non-positive baseline smoothness {value}. Using {DEFAULT_BASELINE_SMOOTHNESS}.")
            return DEFAULT_BASELINE_SMOOTHNESS
        return value

    @pydantic.field_validator("asymmetry")
    @classmethod
    def clamp_asymmetry(cls, value: float) -> float:
        """Clamp asymmetry to the open interval (0, 1)."""
        clamped = min(max(value, MIN_ASYMMETRY), MAX_ASYMMETRY)
        if clamped != value:
            logger.warning(f"Baseline asymmetry {value} outside (0, 1). Using {clamped}.")
        return clamped

    @pydantic.field_validator("max_iter")
    @classmethod
    def force_at_least_one_iteration(cls, value: int) -> int:
        """Replace non-positive iteration counts with a single iteration."""
        if value <= 0:
            logger.warning(f"Non-positive baseline iterations {value}. Using 1.")
            return 1
        return value

    @pydantic.field_validator("tol")
    @classmethod
    def clamp_tol(cls, value: float) -> float:
        """Replace negative tolerances with zero."""
        if value < 0.0:
            logger.warning(f"Negative baseline tolerance {value}. Using 0.0.")
            return 0.0
        return value


class SmoothingConfiguration(BaseConfiguration):
    """Store the parameters of the Whittaker smoother."""

    smoothness: float = DEFAULT_SMOOTHING_SMOOTHNESS
    """The penalty applied to the smoothed trace second differences."""

    @pydantic.field_validator("smoothness")
    @classmethod
    def reset_non_positive_smoothness(cls, value: float) -> float:
        """Replace non-positive smoothness values with the default."""
        if value <= 0.0:
            logger.warning(f"Non-positive smoothing strength {value}. Using {DEFAULT_SMOOTHING_SMOOTHNESS}.")
            return DEFAULT_SMOOTHING_SMOOTHNESS
        return value


class PeakLocatorConfiguration(BaseConfiguration):
    """Define the region of a trace where local maxima are considered as peak candidates.

    Bounds set to ``None`` are computed from each trace: the time range for `xmin` and `xmax`,
    the intensity minimum for `ymin` and twice the intensity maximum for `ymax`.

    """

    xmin: float | None = None
    """Minimum time of a local maximum. Values lower than the trace start are clipped."""

    xmax: float | None = None
    """Maximum time of a local maximum. Values greater than the trace end are clipped."""

    ymin: float | None = None
    """Minimum intensity of a local maximum."""

    ymax: float | None = None
    """Maximum intensity of a local maximum."""

    amount: pydantic.PositiveInt = 5
    """Maximum number of peaks requested per channel. Only the highest local maximum in the search
    window is located, so values greater than one have no effect on the result."""

    def resolve_bounds(self, xmin: float, xmax: float, ymin: float, ymax: float) -> tuple[float, float, float, float]:
        """Compute the bounds for a trace.

        :param xmin: the trace minimum time
        :param xmax: the trace maximum time
        :param ymin: the trace minimum intensity
        :param ymax: the trace maximum intensity
        :return: the tuple ``(xmin, xmax, ymin, ymax)`` used to filter local maxima.

        """
        lower_x = xmin if self.xmin is None else max(self.xmin, xmin)
        upper_x = xmax if self.xmax is None else min(self.xmax, xmax)
        lower_y = ymin if self.ymin is None else self.ymin
        upper_y = 2 * ymax if self.ymax is None else self.ymax
        return lower_x, upper_x, lower_y, upper_y


class FitterConfiguration(BaseConfiguration):
    """Store the parameters of the exponential-Gaussian hybrid peak fit."""

    min_relative_height: pydantic.NonNegativeFloat = 1e-6
    """Fitted values lower than this fraction of the peak height are set to zero."""

    max_relative_height: pydantic.PositiveFloat = 2.0
    """Fitted values greater than this multiple of the peak height are set to zero."""
