import pytest
import pytest_asyncio
from tortoise import Tortoise

from scimpatch.config import settings


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def schema_config():
    return settings.schema_config()


@pytest_asyncio.fixture
async def db():
    # Initialize Tortoise ORM for tests
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["scimpatch.models"]},
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()
