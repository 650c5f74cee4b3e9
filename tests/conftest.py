import pytest

from mocks import MemoryLogger


@pytest.fixture
def logger():
    return MemoryLogger()
