# app/models/base.py
from sqlalchemy import Column, DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase
from datetime import datetime, timezone
import uuid
import nanoid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):

    @staticmethod
    def generate_token(size: int = 32) -> str:
        """Opaque url-safe token for email verification and password reset links"""
        return nanoid.generate(size=size)


class UUIDPrimaryKeyMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
