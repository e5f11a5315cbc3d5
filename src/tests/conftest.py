import numpy as np
import pytest
from numpy.random import seed

from tidychrom.simulation import EGHPeakSpec, LinearBaselineSpec, SimulatedTraceFactory


@pytest.fixture(scope="session", autouse=True)
def random_seed():
    seed(1234)
    return


@pytest.fixture
def time() -> np.ndarray:
    return np.linspace(0.0, 10.0, 1001)


@pytest.fixture
def ramp_peak_factory() -> SimulatedTraceFactory:
    peak = EGHPeakSpec(center=5.0037, height=100.0, width=0.5)
    return SimulatedTraceFactory(channels=[[peak]], baseline=LinearBaselineSpec(slope=0.1))
