import itertools

import pytest

from cryptutil.common import config
from cryptutil.crypto import sampler


class CyclingSource:
    """Hands out bytes from a repeating sequence and records request sizes."""

    def __init__(self, values):
        self._values = itertools.cycle(values)
        self.requests = []

    def get_bytes(self, num_bytes):
        self.requests.append(num_bytes)
        return bytes(next(self._values) for _ in range(num_bytes))


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    # setenv first so monkeypatch remembers (and restores) the original state,
    # including anything a .env file loads during the test
    for name in (config.ENV_RAND_SOURCE, config.ENV_USE_INSECURE_RAND):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    config.reset_config()
    yield
    config.reset_config()
    sampler.get_sampler().clear_cache()


@pytest.fixture
def cycling_source():
    return CyclingSource(range(256))
