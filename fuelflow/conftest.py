import pytest

from fuelflow.config import set_config_for_test
from fuelflow.data.backends.memory_backend import MemoryTokenStore
from fuelflow.tests.factories import CNG, DIESEL, PETROL, FakeClock


@pytest.fixture(autouse=True)
def reset_config():
    set_config_for_test(backend="memory", log_level="WARNING")
    yield
    set_config_for_test(backend="memory", log_level="WARNING")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryTokenStore(fuel_types=[PETROL, DIESEL, CNG], clock=clock)
