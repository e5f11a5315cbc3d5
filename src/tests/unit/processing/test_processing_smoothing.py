import numpy as np

from tidychrom.core.config import SmoothingConfiguration
from tidychrom.processing.smoothing import smooth


def test_smooth_reduces_noise(time):
    y = np.sin(time) + np.random.normal(scale=0.1, size=time.size)
    smoothed = smooth(y, SmoothingConfiguration(smoothness=10.0))
    assert smoothed.shape == y.shape
    assert np.std(np.diff(smoothed)) < np.std(np.diff(y))


def test_smooth_preserves_linear_trace(time):
    y = 2.0 * time + 1.0
    assert np.allclose(smooth(y), y)


def test_smooth_zero_column_unchanged(time):
    Y = np.column_stack([np.sin(time), np.zeros_like(time)])
    smoothed = smooth(Y)
    assert smoothed.shape == Y.shape
    assert not np.any(smoothed[:, 1])


def test_smooth_larger_smoothness_is_smoother(time):
    y = np.sin(time) + np.random.normal(scale=0.1, size=time.size)
    low = smooth(y, SmoothingConfiguration(smoothness=1.0))
    high = smooth(y, SmoothingConfiguration(smoothness=100.0))
    assert np.std(np.diff(high, n=2)) < np.std(np.diff(low, n=2))


def test_smooth_solves_unit_weight_whittaker_system():
    size = 50
    smoothness = 0.5
    y = np.random.normal(size=size) + 3.0
    D = np.diff(np.eye(size), n=2, axis=0)
    expected = np.linalg.solve(np.eye(size) + smoothness * D.T @ D, y)
    actual = smooth(y, SmoothingConfiguration(smoothness=smoothness))
    assert np.allclose(actual, expected)
