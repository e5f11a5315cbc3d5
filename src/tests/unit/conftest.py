import numpy as np
import pytest

from tidychrom.processing.fitting import egh

GAUSSIAN_CENTER = 4.987
GAUSSIAN_HEIGHT = 100.0
GAUSSIAN_WIDTH = 0.5


@pytest.fixture
def gaussian(time) -> np.ndarray:
    return egh(time, GAUSSIAN_CENTER, GAUSSIAN_HEIGHT, GAUSSIAN_WIDTH, 0.0)


@pytest.fixture
def gaussian_params() -> tuple[float, float, float]:
    return GAUSSIAN_CENTER, GAUSSIAN_HEIGHT, GAUSSIAN_WIDTH


@pytest.fixture
def tailing_params() -> tuple[float, float, float, float]:
    return 5.0037, 80.0, 0.3, 0.1


@pytest.fixture
def tailing_peak(time, tailing_params) -> np.ndarray:
    return egh(time, *tailing_params)
