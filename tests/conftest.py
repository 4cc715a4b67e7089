import pytest

from PlantDiary.core.retry import BackoffExecutor, RetryPolicy
from PlantDiary.database.memory import InMemoryEntryStore

from helpers import JPEG_BYTES


@pytest.fixture
def photos_dir(tmp_path):
    d = tmp_path / "photos"
    d.mkdir()
    return d


@pytest.fixture
def make_photo(photos_dir):
    def _make(name, data=JPEG_BYTES):
        path = photos_dir / name
        path.write_bytes(data)
        return path
    return _make


@pytest.fixture
def store():
    return InMemoryEntryStore()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def executor(sleeps):
    return BackoffExecutor(sleep_fn=sleeps.append)


@pytest.fixture
def policy():
    return RetryPolicy(max_retries=3, intervals=(1.0, 2.0, 4.0))
