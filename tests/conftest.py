import pytest
from loguru import logger

from htrackr.db import SQLiteRepository
from htrackr.repositories import InMemoryRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    """Every storage test runs against both backends."""
    if request.param == "memory":
        backend = InMemoryRepository()
    else:
        backend = SQLiteRepository(str(tmp_path / "habits.db"))
    yield backend
    backend.close()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "habits.db")


@pytest.fixture(autouse=True)
def _reset_logger():
    # CLI invocations attach a sink to the runner's stderr; drop it afterwards
    yield
    logger.remove()
