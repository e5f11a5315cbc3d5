"""Whittaker smoothing of trace intensity."""

from __future__ import annotations

from functools import partial
from logging import getLogger

import numpy
from numpy.typing import ArrayLike
from scipy.linalg import LinAlgError

from ..core.config import SmoothingConfiguration
from ..core.executors import ChannelExecutor, SequentialChannelExecutor
from ..utils.numpy import FloatArray, FloatArray1D, as_intensity_matrix
from .baseline import create_penalty_band, solve_weighted

logger = getLogger(__name__)


def smooth(
    y: ArrayLike,
    config: SmoothingConfiguration | None = None,
    executor: ChannelExecutor | None = None,
) -> FloatArray:
    r"""Smooth each channel using a Whittaker smoother.

    The smoothed trace :math:`z` minimizes :math:`|y - z|^{2} + s |D z|^{2}`, where :math:`D`
    is the second order difference operator and :math:`s` is the smoothness parameter.

    :param y: 1D array with a single channel or 2D array where each column is a channel.
    :param config: the smoother parameters. If not provided, the default configuration is used.
    :param executor: distribute the channels computation. By default, channels are processed
        sequentially.
    :return: a float array with the same shape as `y`. All-zero channels are returned unchanged.

    """
    if config is None:
        config = SmoothingConfiguration()

    if executor is None:
        executor = SequentialChannelExecutor()

    y_arr = numpy.asarray(y)
    Y = as_intensity_matrix(y_arr)
    n_samples, n_channels = Y.shape

    penalty = create_penalty_band(n_samples, config.smoothness)
    func = partial(_smooth_channel, penalty=penalty)
    columns = [Y[:, k] for k in range(n_channels)]
    smoothed = numpy.column_stack(executor.map(func, columns)) if n_channels else Y.copy()

    if y_arr.ndim == 1:
        smoothed = smoothed[:, 0]
    return smoothed


def _smooth_channel(y: FloatArray1D, penalty: FloatArray) -> FloatArray1D:
    if not numpy.any(y):
        return y.copy()
    try:
        return solve_weighted(penalty, numpy.ones_like(y), y)
    except LinAlgError:
        logger.warning("Smoothing system is not positive definite. Channel left unchanged.")
        return y.copy()
