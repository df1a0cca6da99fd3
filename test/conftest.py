import numpy as np
import pytest
from bitonic_sort.orchestrator import BitonicSorter
from bitonic_sort.simulator import SimulatedDevice


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unittest: mark test as an Unit Test"
    )


@pytest.fixture
def device():
    return SimulatedDevice()


@pytest.fixture
def strict_device():
    return SimulatedDevice(strict_barriers=True, trace=True)


@pytest.fixture
def sorter(strict_device):
    return BitonicSorter(strict_device)


@pytest.fixture
def small_group_sorter(strict_device):
    # four lanes per group, so short arrays already need global merges
    return BitonicSorter(strict_device, group_size=4)


@pytest.fixture
def mixed_values():
    return [5, -3, 5, 2, 0, 2, -3, 9]


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
