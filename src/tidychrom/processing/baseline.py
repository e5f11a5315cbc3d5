"""Baseline estimation using asymmetric least squares (AsLS) smoothing.

References
----------
P. H. C. Eilers, A perfect smoother, Analytical Chemistry, 75 (2003) 3631.

"""

from __future__ import annotations

from functools import partial
from logging import getLogger

import numpy
from numpy.typing import ArrayLike
from scipy import sparse
from scipy.linalg import LinAlgError, cho_solve_banded, cholesky_banded

from ..core.config import BaselineConfiguration
from ..core.executors import ChannelExecutor, SequentialChannelExecutor
from ..utils.numpy import FloatArray, FloatArray1D, as_intensity_matrix

logger = getLogger(__name__)

N_BANDS = 3
"""The number of upper diagonals (main diagonal included) of the penalty matrix."""


def create_penalty_band(size: int, smoothness: float) -> FloatArray:
    r"""Create the second order difference penalty :math:`s D^{T} D` in upper banded form.

    The penalty is a symmetric pentadiagonal matrix. Row ``2`` of the result stores the main
    diagonal, row ``1`` the first upper diagonal and row ``0`` the second upper diagonal, as
    expected by :py:func:`scipy.linalg.cholesky_banded`.

    :param size: the number of samples in the trace
    :param smoothness: the penalty factor :math:`s`
    :return: an array with shape ``(3, size)``.

    """
    band = numpy.zeros(shape=(N_BANDS, size))
    if size < N_BANDS:
        # no second differences can be computed
        return band

    diff = sparse.diags([1.0, -2.0, 1.0], offsets=[0, 1, 2], shape=(size - 2, size), format="csc")
    penalty = smoothness * (diff.T @ diff)
    band[2] = penalty.diagonal(0)
    band[1, 1:] = penalty.diagonal(1)
    band[0, 2:] = penalty.diagonal(2)
    return band


def solve_weighted(penalty: FloatArray, weights: FloatArray1D, y: FloatArray1D) -> FloatArray1D:
    r"""Solve :math:`(W + P) z = W y` using a banded Cholesky factorization.

    :param penalty: the penalty matrix :math:`P` in upper banded form.
    :param weights: the diagonal of :math:`W`.
    :param y: the trace intensity.
    :raises LinAlgError: if :math:`W + P` is not positive definite.

    """
    system = penalty.copy()
    system[-1] += weights
    factor = cholesky_banded(system, lower=False)
    return cho_solve_banded((factor, False), weights * y)


def asls(
    y: FloatArray1D, penalty: FloatArray, asymmetry: float, max_iter: int, tol: float
) -> tuple[FloatArray1D, int]:
    """Estimate the baseline of a single channel.

    :param y: the channel intensity
    :param penalty: the difference penalty created with :py:func:`create_penalty_band`
    :param asymmetry: the weight assigned to samples above the baseline
    :param max_iter: the maximum number of iterations
    :param tol: the minimum mean absolute weight change required to keep iterating
    :return: the baseline and the number of iterations performed. If the system cannot be
        factorized, the last valid baseline is returned.

    """
    weights = numpy.ones_like(y)
    baseline = numpy.zeros_like(y)
    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        try:
            baseline = solve_weighted(penalty, weights, y)
        except LinAlgError:
            logger.warning(f"Baseline system is not positive definite at iteration {n_iter}. Stopping.")
            n_iter -= 1
            break

        new_weights = numpy.where(y > baseline, asymmetry, 1.0 - asymmetry)
        change = numpy.mean(numpy.abs(new_weights - weights))
        weights = new_weights
        if change <= tol:
            break
    return baseline, n_iter


def estimate_baseline(
    y: ArrayLike,
    config: BaselineConfiguration | None = None,
    executor: ChannelExecutor | None = None,
) -> FloatArray:
    """Estimate the baseline of each channel using asymmetric least squares smoothing.

    :param y: 1D array with a single channel or 2D array where each column is a channel.
    :param config: the baseline parameters. If not provided, the default configuration is used.
    :param executor: distribute the channels computation. By default, channels are processed
        sequentially.
    :return: an array with the same shape as `y`. Channels where all values are zero have a
        zero baseline. The result is float64, unless `y` has a narrower floating dtype, in which
        case it is casted back to that dtype.

    """
    if config is None:
        config = BaselineConfiguration()

    if executor is None:
        executor = SequentialChannelExecutor()

    y_arr = numpy.asarray(y)
    Y = as_intensity_matrix(y_arr)
    n_samples, n_channels = Y.shape

    penalty = create_penalty_band(n_samples, config.smoothness)
    estimate = partial(
        _estimate_channel_baseline,
        penalty=penalty,
        asymmetry=config.asymmetry,
        max_iter=config.max_iter,
        tol=config.tol,
    )
    columns = [Y[:, k] for k in range(n_channels)]
    baseline = numpy.column_stack(executor.map(estimate, columns)) if n_channels else numpy.zeros_like(Y)

    if y_arr.ndim == 1:
        baseline = baseline[:, 0]

    if y_arr.dtype.kind == "f" and y_arr.dtype.itemsize < baseline.dtype.itemsize:
        baseline = baseline.astype(y_arr.dtype)
    return baseline


def _estimate_channel_baseline(
    y: FloatArray1D, penalty: FloatArray, asymmetry: float, max_iter: int, tol: float
) -> FloatArray1D:
    if not numpy.any(y):
        logger.debug("Skipping baseline estimation of an all-zero channel.")
        return numpy.zeros_like(y)
    baseline, n_iter = asls(y, penalty, asymmetry, max_iter, tol)
    logger.debug(f"Baseline estimated in {n_iter} iterations.")
    return baseline
