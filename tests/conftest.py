import pytest

from helpers import FakeEncoder, FakeProber, FakeStore


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def encoder():
    return FakeEncoder()
