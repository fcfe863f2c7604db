import numpy as np
import pytest

from fakes import StationaryWorld


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def stationary_world():
    return StationaryWorld()
