import pytest
import os
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.reference_data import seed_reference_data
from app.db.redis import get_redis
from app.db.session import get_db
from app.main import app
from app.models.users import User, Role, RoleName
from app.models.professionals import Professional, ProfessionalType, VerificationStatus

# In-memory SQLite per test unless a real database is provided
TEST_DB_URL = os.getenv("TEST_DB_URL", "sqlite+aiosqlite://")

settings.SECRET_KEY = "test_secret_key"
settings.BCRYPT_ROUNDS = 4


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    if TEST_DB_URL.startswith("sqlite"):
        test_engine = create_async_engine(
            TEST_DB_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(test_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        test_engine = create_async_engine(TEST_DB_URL)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine):
    """Session on a freshly created schema with reference data"""
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        await seed_reference_data(session)
        yield session


async def _create_user(db_session, email, password, role_names, **extra):
    roles = (await db_session.execute(select(Role).where(Role.name.in_(role_names)))).scalars().all()
    user = User(
        email=email,
        password=get_password_hash(password),
        first_name="Test",
        last_name="User",
        is_email_verified=True,
        is_active=True,
        **extra,
    )
    user.roles = list(roles)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def test_user(db_session):
    """Create a customer and return credentials"""
    user = await _create_user(db_session, "test@example.com", "Password123", [RoleName.CUSTOMER.value])
    return {
        "user": user,
        "email": "test@example.com",
        "password": "Password123",
        "id": user.id,
    }


@pytest.fixture
async def admin_user(db_session):
    user = await _create_user(db_session, "admin@example.com", "AdminPass123", [RoleName.ADMIN.value])
    return {
        "user": user,
        "email": "admin@example.com",
        "password": "AdminPass123",
        "id": user.id,
    }


@pytest.fixture
async def test_professional(db_session, test_user):
    """A pending dealer profile owned by test_user"""
    dealer = (await db_session.execute(
        select(ProfessionalType).where(ProfessionalType.name == "dealer")
    )).scalar_one()
    professional = Professional(
        user_id=test_user["id"],
        business_name="Lovelace Gems",
        years_of_experience=12,
        specializations=["Sapphires", "Faceting"],
        verification_status=VerificationStatus.PENDING.value,
        is_verified=False,
        review_count=0,
    )
    professional.types = [dealer]
    db_session.add(professional)
    await db_session.commit()
    await db_session.refresh(professional)
    return professional


@pytest.fixture
def registration_form_data():
    """A complete professional registration, camelCase as sent by the web client"""
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@x.com",
        "password": "p1",
        "confirmPassword": "p1",
        "professionalRole": "dealer",
        "businessName": "Analytical Gems",
        "businessDescription": "Colored stones and calibrated parcels",
        "yearsOfExperience": "",
        "specializations": "Sapphires, Rubies, ",
        "website": "https://analytical-gems.example.com",
        "documentType": "business_license",
        "documentUrl": "https://files.example.com/license.pdf",
        "hasAcceptedTerms": True,
    }


@pytest.fixture
async def mock_redis():
    """Mock Redis client"""
    redis_mock = AsyncMock()
    redis_mock.get.return_value = None
    redis_mock.set.return_value = True
    redis_mock.delete.return_value = True
    redis_mock.incr.return_value = 1
    redis_mock.expire.return_value = True
    return redis_mock


@pytest.fixture
async def client(db_session, mock_redis):
    """Create test client with mocked dependencies"""

    async def override_get_db():
        yield db_session

    async def override_get_redis():
        yield mock_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides = {}


def make_token(user_id, expires_in=timedelta(days=1)) -> str:
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_in,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def test_token(test_user):
    return make_token(test_user["id"])


@pytest.fixture
def admin_token(admin_user):
    return make_token(admin_user["id"])


@pytest.fixture
def user_headers(test_token):
    return {"Authorization": f"Bearer {test_token}"}


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def mock_enqueue():
    """Capture queued notifications instead of reaching the Celery broker"""
    with patch("app.api.v1.registration.enqueue") as registration_enqueue, \
            patch("app.api.v1.professionals.enqueue") as professionals_enqueue:
        yield {"registration": registration_enqueue, "professionals": professionals_enqueue}
