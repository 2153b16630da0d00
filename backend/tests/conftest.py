import pytest

from timeline_pro.config import settings
from timeline_pro.database.db import init_db
from timeline_pro.services.identity import IdentityService


@pytest.fixture(autouse=True, scope="session")
def no_retry_delay():
    original = settings.FETCH_RETRY_BASE_SECONDS
    settings.FETCH_RETRY_BASE_SECONDS = 0.0
    yield
    settings.FETCH_RETRY_BASE_SECONDS = original


@pytest.fixture
async def db_path(tmp_path):
    path = str(tmp_path / "timelines.db")
    await init_db(path)
    return path


@pytest.fixture
async def user_id(db_path):
    identity = await IdentityService(db_path).sign_in_anonymously()
    return identity.uid
