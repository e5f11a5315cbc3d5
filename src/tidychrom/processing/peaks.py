"""Peak location and boundary detection.

For each channel, the highest local maximum inside a search window is selected as the
peak apex. The left and right sides of the peak are compared after normalization: the
boundary on each side is placed where the cumulative difference between both sides
exceeds the side intensity. The boundary is then mirrored on the opposite side at the
same height, producing two independent peak shape estimations that are refined using
a cubic spline around the apex.

"""

from __future__ import annotations

from functools import partial
from logging import getLogger
from typing import Sequence

import numpy
from numpy.typing import ArrayLike
from scipy.interpolate import CubicSpline

from ..core.config import PeakLocatorConfiguration
from ..core.executors import ChannelExecutor, SequentialChannelExecutor
from ..core.models import PeakCandidate, SideCandidate
from ..utils.numpy import (
    FloatArray,
    FloatArray1D,
    IntArray1D,
    as_intensity_matrix,
    as_time_array,
    broadcast_channel_values,
)

logger = getLogger(__name__)

DEFAULT_WIDTH_FRACTION = 0.05
"""The default search window width, as a fraction of the trace maximum time."""

SPLINE_HALF_SIZE = 2
"""Number of samples at each side of the apex used to build the apex spline."""

SPLINE_RESOLUTION = 10
"""Number of spline evaluation points between consecutive samples."""

MAX_BOUNDARY_RATIO = 2.0
"""Interpolated boundaries further than this ratio times the detected boundary distance are mirrored."""

Bounds = tuple[float, float, float, float]


def locate_peaks(
    x: ArrayLike,
    y: ArrayLike,
    center: float | Sequence[float] | None = None,
    width: float | Sequence[float] | None = None,
    config: PeakLocatorConfiguration | None = None,
    executor: ChannelExecutor | None = None,
) -> list[PeakCandidate | None]:
    """Locate a peak and its boundaries in each channel.

    :param x: the time axis
    :param y: 1D array with a single channel or 2D array where each column is a channel.
    :param center: the expected peak center. A single value is used for all channels. If a sequence
        with one value per channel is provided, each channel uses its own value. If not provided or if
        the value is outside the time range, the time of the channel maximum is used.
    :param width: the search window width, centered at `center`. Provided in the same way as `center`.
        If not provided or if it is not positive, 5 % of the maximum time is used.
    :param config: define bounds for the local maxima. If not provided, the default configuration is used.
    :param executor: distribute the channels computation. By default, channels are processed sequentially.
    :return: a list with a candidate for each channel. Channels without local maxima or without local
        maxima inside the search window are set to ``None``.
    :raises InvalidTraceError: if `x` and `y` sizes do not match.

    """
    if config is None:
        config = PeakLocatorConfiguration()

    if executor is None:
        executor = SequentialChannelExecutor()

    x = as_time_array(x)
    Y = as_intensity_matrix(y, x.size)
    n_channels = Y.shape[1]
    if not n_channels:
        return list()

    centers = resolve_centers(x, Y, center)
    widths = resolve_widths(x, n_channels, width)
    bounds = config.resolve_bounds(x.min().item(), x.max().item(), Y.min().item(), Y.max().item())

    tasks = [(k, Y[:, k], centers[k], widths[k]) for k in range(n_channels)]
    return executor.map(partial(_locate_channel, x=x, bounds=bounds), tasks)


def resolve_centers(x: FloatArray1D, Y: FloatArray, center: float | Sequence[float] | None) -> list[float]:
    """Compute the search window center for each channel."""
    default = x[numpy.argmax(Y, axis=0)].tolist()
    if center is None or numpy.size(center) == 0:
        return default
    centers = broadcast_channel_values(center, len(default))
    xmin, xmax = x.min(), x.max()
    return [c if xmin <= c <= xmax else d for c, d in zip(centers, default)]


def resolve_widths(x: FloatArray1D, n_channels: int, width: float | Sequence[float] | None) -> list[float]:
    """Compute the search window width for each channel."""
    default = DEFAULT_WIDTH_FRACTION * x.max().item()
    if default <= 0.0:
        default = DEFAULT_WIDTH_FRACTION * (x.max() - x.min()).item()
    if width is None or numpy.size(width) == 0:
        return [default] * n_channels
    return [w if w > 0.0 else default for w in broadcast_channel_values(width, n_channels)]


def find_local_maxima(y: FloatArray1D) -> IntArray1D:
    """Find the indices of interior local maxima.

    A sample is a local maximum if it is strictly greater than the next sample and greater or
    equal than the previous one. On plateaus, the last sample is selected.

    """
    if y.size < 3:
        return numpy.array([], dtype=int)
    is_max = (y[1:-1] > y[2:]) & (y[1:-1] >= y[:-2])
    return numpy.flatnonzero(is_max) + 1


def _locate_channel(
    task: tuple[int, FloatArray1D, float, float], x: FloatArray1D, bounds: Bounds
) -> PeakCandidate | None:
    channel, y, center, width = task
    maxima = find_local_maxima(y)
    if not maxima.size:
        logger.debug(f"No local maximum found in channel {channel}.")
        return None

    xmin, xmax, ymin, ymax = bounds
    x_max, y_max = x[maxima], y[maxima]
    valid = (
        (x_max >= center - width / 2)
        & (x_max <= center + width / 2)
        & (x_max >= xmin)
        & (x_max <= xmax)
        & (y_max >= ymin)
        & (y_max <= ymax)
    )
    if not valid.any():
        logger.debug(f"No local maximum found in channel {channel} search window ({center} +/- {width / 2}).")
        return None

    apex = maxima[valid][numpy.argmax(y_max[valid])].item()
    return estimate_candidate(x, y, apex, channel)


def estimate_candidate(x: FloatArray1D, y: FloatArray1D, apex: int, channel: int = 0) -> PeakCandidate:
    """Estimate the peak boundaries and shape around an apex.

    :param x: the time axis
    :param y: the channel intensity
    :param apex: the index of an interior local maximum
    :param channel: the channel index stored in the candidate

    """
    # both sides are clipped to the shortest distance from the apex to the trace ends
    reach = min(apex + 1, x.size - apex)
    right_x = x[apex : apex + reach]
    right_y = y[apex : apex + reach]
    left_x = x[apex - reach + 1 : apex + 1][::-1]
    left_y = y[apex - reach + 1 : apex + 1][::-1]

    x0 = x[apex].item()
    y0 = y[apex].item()
    right_h = _normalize_side(right_y, y0)
    left_h = _normalize_side(left_y, y0)

    divergence = numpy.cumsum(numpy.abs(right_h - left_h))
    right_index = numpy.argmax(divergence >= right_h)
    left_index = numpy.argmax(divergence >= left_h)

    right_boundary = right_x[right_index].item()
    right_level = right_h[right_index].item()
    left_boundary = left_x[left_index].item()
    left_level = left_h[left_index].item()

    # boundaries on the opposite side at the same height
    mirrored_left = _find_crossing(left_x, left_h, right_level)
    if not _is_valid_crossing(x0, mirrored_left, right_boundary):
        mirrored_left = x0 - (right_boundary - x0)

    mirrored_right = _find_crossing(right_x, right_h, left_level)
    if not _is_valid_crossing(x0, mirrored_right, left_boundary):
        mirrored_right = x0 + (x0 - left_boundary)

    ymin = y.min().item()
    left = _create_side_candidate(x, y, apex, left_boundary, mirrored_right, left_level, ymin)
    right = _create_side_candidate(x, y, apex, mirrored_left, right_boundary, right_level, ymin)
    return PeakCandidate(channel=channel, left=left, right=right)


def _normalize_side(y: FloatArray1D, apex_height: float) -> FloatArray1D:
    """Scale a peak side to zero at its minimum and one at the apex."""
    floor = y.min()
    scale = apex_height - floor
    if scale <= 0.0:
        return numpy.zeros_like(y)
    return (y - floor) / scale


def _find_crossing(x: FloatArray1D, h: FloatArray1D, level: float) -> float | None:
    """Find where `h` falls below `level` by linear interpolation of the bracketing samples."""
    below = numpy.flatnonzero(h < level)
    if not below.size:
        return None
    i = max(below[0].item(), 1)
    slope = (h[i] - h[i - 1]) / (x[i] - x[i - 1])
    if slope == 0.0 or not numpy.isfinite(slope):
        return None
    intercept = h[i] - slope * x[i]
    return ((level - intercept) / slope).item()


def _is_valid_crossing(x0: float, crossing: float | None, boundary: float) -> bool:
    """Check that a crossing lies opposite to the boundary and not too far from the apex."""
    if crossing is None:
        return False
    opposite = (crossing - x0) * (boundary - x0) <= 0.0
    return opposite and abs(crossing - x0) <= MAX_BOUNDARY_RATIO * abs(boundary - x0)


def _create_side_candidate(
    x: FloatArray1D, y: FloatArray1D, apex: int, left: float, right: float, level: float, ymin: float
) -> SideCandidate:
    center, height = _refine_apex(x, y, apex, left, right, level)

    width = right - left
    a = center - left
    b = right - center
    if a < 0.0:
        a = width / 2
    if b < 0.0:
        b = width / 2

    y0 = y[apex].item()
    alpha = (level * y0 - ymin) / (height - ymin) if height > ymin else numpy.nan
    if not 0.0 < alpha < 1.0:
        alpha = 0.5
    return SideCandidate(center=center, height=height, width=width, a=a, b=b, alpha=alpha)


def _refine_apex(
    x: FloatArray1D, y: FloatArray1D, apex: int, left: float, right: float, level: float
) -> tuple[float, float]:
    """Estimate the peak center and height as the maximum of a cubic spline around the apex.

    If the left boundary is further from the apex than the right boundary, the spline passes
    through both boundaries and the apex. Otherwise, the spline interpolates the samples
    closest to the apex.

    """
    x0 = x[apex].item()
    y0 = y[apex].item()
    if x0 - left > right - x0 and left < x0 < right:
        spline = CubicSpline([left, x0, right], [level * y0, y0, level * y0])
        grid = x[(x >= left) & (x <= right)]
    else:
        start = max(apex - SPLINE_HALF_SIZE, 0)
        end = min(apex + SPLINE_HALF_SIZE + 1, x.size)
        spline = CubicSpline(x[start:end], y[start:end])
        grid = numpy.linspace(x[start], x[end - 1], SPLINE_RESOLUTION * (end - start - 1) + 1)

    values = spline(grid)
    k = numpy.argmax(values)
    return grid[k].item(), values[k].item()
