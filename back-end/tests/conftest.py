import os
import tempfile
from pathlib import Path

# Settings are read once and cached, so the test environment goes in first
_TMP_ROOT = Path(tempfile.mkdtemp(prefix="resumecraft-tests-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", str(_TMP_ROOT / "uploads"))
os.environ.setdefault("LOG_DIR", str(_TMP_ROOT / "logs"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP_ROOT / 'unused.db'}")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from database import init_db, seed_templates
from dependencies import get_session
from main import app
from models.relational_models import Profile, User
from services.storage import LocalObjectStorage, get_storage
from utilities.authentication import create_access_token, get_password_hash
from utilities.enumerables import UserRole


TEST_PASSWORD = "Secret123"
MAX_TEST_UPLOAD = 64 * 1024


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash(TEST_PASSWORD)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    async with AsyncSession(engine) as session:
        await seed_templates(session)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with AsyncSession(engine) as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    root = tmp_path / "uploads"
    (root / "avatars").mkdir(parents=True)
    return LocalObjectStorage(root=root, url_prefix="/uploads", max_size=MAX_TEST_UPLOAD)


@pytest_asyncio.fixture
async def client(engine, storage):
    async def _get_test_session():
        async with AsyncSession(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_test_session
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(session, password_hash, email, role=UserRole.USER, full_name=None, location=None):
    user = User(email=email, role=role, password=password_hash)
    session.add(user)
    await session.flush()
    session.add(Profile(id=user.id, email=email, full_name=full_name, location=location))
    await session.commit()
    await session.refresh(user)
    # detached, so later commits on the shared session do not expire it
    session.expunge(user)
    return user


def bearer(user) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role.value, "token_type": "access"})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def user(session, password_hash):
    return await make_user(session, password_hash, "harry@example.com", full_name="Harry Maguire Johnson")


@pytest_asyncio.fixture
async def other_user(session, password_hash):
    return await make_user(session, password_hash, "someone@example.com", full_name="Someone Else")


@pytest_asyncio.fixture
async def admin(session, password_hash):
    return await make_user(session, password_hash, "admin@example.com", role=UserRole.ADMIN, full_name="Site Admin")


@pytest.fixture
def user_headers(user):
    return bearer(user)


@pytest.fixture
def other_headers(other_user):
    return bearer(other_user)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)
