"""Peak quantification using the exponential-Gaussian hybrid (EGH) model.

The EGH model parameters are computed in closed form from the peak boundaries found by
:py:func:`tidychrom.processing.peaks.locate_peaks`. Each channel candidate provides two
boundary estimations, one for each side of the apex. Both are evaluated and the model
with the lowest residual error is kept.

References
----------
Y. Kalambet, Y. Kozmin, K. Mikhailova, I. Nagaev, P. Tikhonov, Reconstruction of
chromatographic peaks using the exponentially modified Gaussian function, Journal of
Chemometrics, 25 (2011) 352.

"""

from __future__ import annotations

import math
from functools import partial
from logging import getLogger
from typing import NamedTuple, Sequence

import numpy
from numpy.polynomial import polynomial
from numpy.typing import ArrayLike

from ..core.config import FitterConfiguration
from ..core.exceptions import InvalidTraceError
from ..core.executors import ChannelExecutor, SequentialChannelExecutor
from ..core.models import FittedPeak, PeakCandidate, SideCandidate
from ..utils.numpy import FloatArray1D, as_intensity_matrix, as_time_array

logger = getLogger(__name__)

AREA_COEFFICIENTS = (4.0, -6.293724, 9.232834, -11.34291, 9.123978, -4.173753, 0.827797)
"""Coefficients, in increasing degree, of the polynomial that corrects the EGH area approximation."""


class SideFit(NamedTuple):
    """The EGH model built from a side candidate."""

    candidate: SideCandidate
    width: float
    decay: float
    fit: FloatArray1D
    error: float


def egh(x: ArrayLike, center: float, height: float, width: float, decay: float) -> FloatArray1D:
    r"""Evaluate the exponential-Gaussian hybrid function.

    .. math::

        f(x) = h \exp \left ( - \frac{(x - c)^{2}}{2 w^{2} + e (x - c)} \right )

    The function is only defined where the denominator is positive. Elsewhere, it is set to zero.

    :param x: the evaluation points
    :param center: the peak center :math:`c`
    :param height: the peak height :math:`h`
    :param width: the Gaussian component width :math:`w`
    :param decay: the exponential component time constant :math:`e`

    """
    dx = numpy.asarray(x, dtype=float) - center
    denominator = 2 * width**2 + decay * dx
    y = numpy.zeros_like(dx)
    defined = denominator > 0.0
    y[defined] = height * numpy.exp(-(dx[defined] ** 2) / denominator[defined])
    return y


def egh_width(a: float, b: float, alpha: float) -> float:
    """Compute the EGH width from the boundary distances measured at a fraction `alpha` of the height."""
    return math.sqrt(max(-(a * b) / (2 * math.log(alpha)), 0.0))


def egh_decay(a: float, b: float, alpha: float) -> float:
    """Compute the EGH time constant from the boundary distances measured at a fraction `alpha` of the height."""
    return -(b - a) / math.log(alpha)


def egh_area(height: float, width: float, decay: float) -> float:
    r"""Compute the EGH area.

    The area is approximated as :math:`h (w \sqrt{\pi / 8} + |e|) \epsilon(\theta)`, where
    :math:`\theta = \arctan(|e| / w)` and :math:`\epsilon` is a polynomial fitted to the numerical
    integral of the EGH function. In the Gaussian limit (:math:`e = 0`) it is the Gaussian area.

    """
    theta = math.atan2(abs(decay), width)
    correction = polynomial.polyval(theta, AREA_COEFFICIENTS)
    return height * (width * math.sqrt(math.pi / 8) + abs(decay)) * correction


def fit_side(
    x: FloatArray1D, y: FloatArray1D, candidate: SideCandidate, config: FitterConfiguration
) -> SideFit:
    """Build an EGH model from a side candidate and compute its error.

    :param x: the time axis
    :param y: the channel intensity
    :param candidate: the side candidate
    :param config: the fitter configuration
    :return: the model evaluated at `x` and its percent RMS error in the region
        ``center +/- width``, normalized by the height over the channel minimum.

    """
    c, h = candidate.center, candidate.height
    w = egh_width(candidate.a, candidate.b, candidate.alpha)
    e = egh_decay(candidate.a, candidate.b, candidate.alpha)

    fit = egh(x, c, h, w, e)
    # suppress values close to the singularity
    out_of_range = (fit < h * config.min_relative_height) | (fit > h * config.max_relative_height)
    fit[out_of_range] = 0.0

    residuals = y - fit
    in_window = (x >= c - w) & (x <= c + w)
    scale = h - y.min()
    if in_window.any() and scale > 0.0:
        error = math.sqrt(numpy.mean(residuals[in_window] ** 2).item()) / scale * 100
    else:
        error = math.inf
    return SideFit(candidate=candidate, width=w, decay=e, fit=fit, error=error)


def fit_peaks(
    x: ArrayLike,
    y: ArrayLike,
    candidates: Sequence[PeakCandidate | None],
    config: FitterConfiguration | None = None,
    executor: ChannelExecutor | None = None,
) -> list[FittedPeak | None]:
    """Fit an EGH model to the candidates located in each channel.

    :param x: the time axis
    :param y: 1D array with a single channel or 2D array where each column is a channel.
    :param candidates: the candidates created with :py:func:`tidychrom.processing.peaks.locate_peaks`.
    :param config: the fitter configuration. If not provided, the default configuration is used.
    :param executor: distribute the channels computation. By default, channels are processed sequentially.
    :return: a list with the fitted peak of each candidate. ``None`` candidates and candidates with a zero
        center result in ``None``.
    :raises InvalidTraceError: if `x` and `y` sizes do not match or if a candidate channel is not in `y`.

    """
    if config is None:
        config = FitterConfiguration()

    if executor is None:
        executor = SequentialChannelExecutor()

    x = as_time_array(x)
    Y = as_intensity_matrix(y, x.size)

    tasks = list()
    for candidate in candidates:
        if candidate is not None and candidate.channel >= Y.shape[1]:
            msg = f"Candidate channel {candidate.channel} not found in intensity with {Y.shape[1]} channels."
            raise InvalidTraceError(msg)
        column = None if candidate is None else Y[:, candidate.channel]
        tasks.append((candidate, column))
    return executor.map(partial(_fit_channel, x=x, config=config), tasks)


def _fit_channel(
    task: tuple[PeakCandidate | None, FloatArray1D | None], x: FloatArray1D, config: FitterConfiguration
) -> FittedPeak | None:
    candidate, y = task
    if candidate is None or y is None:
        return None

    if candidate.has_zero_center():
        logger.debug(f"Skipping candidate with zero center in channel {candidate.channel}.")
        return None

    best_side, best = None, None
    for side, side_candidate in candidate.iter_sides():
        side_fit = fit_side(x, y, side_candidate, config)
        if best is None or side_fit.error < best.error:
            best_side, best = side, side_fit
    assert best_side is not None and best is not None

    return FittedPeak(
        channel=candidate.channel,
        side=best_side,
        time=best.candidate.center,
        height=best.candidate.height,
        width=best.width,
        decay=best.decay,
        a=best.candidate.a,
        b=best.candidate.b,
        area=egh_area(best.candidate.height, best.width, best.decay),
        fit=best.fit,
        error=best.error,
    )
