# /app/db/session.py
import asyncio
import logging

from fastapi import HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

CONNECT_ATTEMPTS = 3


def async_database_uri(uri: str) -> str:
    """Point plain PostgreSQL URLs at the asyncpg driver"""
    for scheme in ("postgres://", "postgresql://"):
        if uri.startswith(scheme):
            return "postgresql+asyncpg://" + uri[len(scheme):]
    return uri


DATABASE_URI = async_database_uri(settings.SQLALCHEMY_DATABASE_URI)

engine_options = {"echo": False, "pool_pre_ping": True}
if DATABASE_URI.startswith("postgresql+asyncpg"):
    engine_options["connect_args"] = {"server_settings": {"application_name": "gemstone_system"}}

engine = create_async_engine(DATABASE_URI, **engine_options)

AsyncSessionLocal = async_sessionmaker(
    engine, expire_on_commit=False, class_=AsyncSession
)


async def _wait_for_database(db: AsyncSession) -> None:
    delay = 0.5
    for attempt in range(1, CONNECT_ATTEMPTS + 1):
        try:
            await db.execute(text("SELECT 1"))
            return
        except Exception as e:
            await db.rollback()
            if attempt == CONNECT_ATTEMPTS:
                logger.error(f"Database unreachable after {CONNECT_ATTEMPTS} attempts: {str(e)}")
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail=(
                        "Database connection error. "
                        f"Current connection: {settings.POSTGRES_SERVER}:{settings.POSTGRES_PORT}"
                    )
                )
            logger.warning(f"Database check {attempt} failed: {str(e)}. Retrying in {delay}s")
            await asyncio.sleep(delay)
            delay *= 2


async def get_db():
    async with AsyncSessionLocal() as db:
        await _wait_for_database(db)
        yield db
