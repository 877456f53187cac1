from pathlib import Path

import pytest
import pytest_asyncio

from app.crud import TaskRepository
from app.db import Database

from .fakes import FakeTaskGateway


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}"


@pytest_asyncio.fixture()
async def database(database_url: str):
    db = Database(database_url)
    await db.init(max_retries=1)
    yield db
    await db.close()


@pytest.fixture()
def repo(database: Database) -> TaskRepository:
    return TaskRepository(database)


@pytest.fixture()
def gateway() -> FakeTaskGateway:
    return FakeTaskGateway()
