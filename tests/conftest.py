import pytest

from tiotest.config import TestConfiguration
from tiotest.worker import WorkerState


@pytest.fixture
def make_config(tmp_path):
    def factory(**overrides):
        values = dict(
            threads=2,
            block_size=4096,
            file_size_mb=1,
            random_ops=100,
            paths=(str(tmp_path),),
        )
        values.update(overrides)
        return TestConfiguration(**values)
    return factory


@pytest.fixture
def worker_state(tmp_path):
    state = WorkerState(
        number=0,
        path=str(tmp_path / "target.dat"),
        file_size_mb=1,
        block_size=4096,
        random_ops=100,
    )
    state.allocate()
    yield state
    state.release()
