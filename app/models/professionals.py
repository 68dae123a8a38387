# app/models/professionals.py
from sqlalchemy import (
    Column, String, Integer, Boolean, Text, Numeric, DateTime, ForeignKey, Table, JSON, Uuid,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import relationship
import enum

from app.models.base import Base, UUIDPrimaryKeyMixin, TimestampMixin

# Native array/jsonb on PostgreSQL, JSON elsewhere (tests run on SQLite)
StringList = JSON().with_variant(ARRAY(Text), "postgresql")
JSONDocument = JSON().with_variant(JSONB, "postgresql")


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ProfessionalTypeName(str, enum.Enum):
    DEALER = "dealer"
    CUTTER = "cutter"
    APPRAISER = "appraiser"
    JEWELER = "jeweler"


professional_professional_types = Table(
    "professional_professional_types",
    Base.metadata,
    Column("professional_id", ForeignKey("professionals.id", ondelete="CASCADE"), primary_key=True),
    Column("professional_type_id", ForeignKey("professional_types.id", ondelete="CASCADE"), primary_key=True),
)


class Professional(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "professionals"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    business_name = Column(String(255))
    business_description = Column(Text)
    years_of_experience = Column(Integer)
    specializations = Column(StringList)
    website = Column(String(255))
    social_media = Column(JSONDocument)
    is_verified = Column(Boolean, default=False)
    verification_status = Column(String(50), default=VerificationStatus.PENDING.value, nullable=False)
    rating = Column(Numeric(3, 2))
    review_count = Column(Integer, default=0)

    user = relationship("User", back_populates="professional", lazy="selectin")
    types = relationship(
        "ProfessionalType",
        secondary=professional_professional_types,
        back_populates="professionals",
        lazy="selectin",
    )
    documents = relationship(
        "VerificationDocument",
        back_populates="professional",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="VerificationDocument.created_at",
    )

    @property
    def type_names(self):
        return sorted(t.name for t in self.types)


class ProfessionalType(Base):
    __tablename__ = "professional_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(Text)

    professionals = relationship(
        "Professional", secondary=professional_professional_types, back_populates="types"
    )


class VerificationDocument(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "verification_documents"
    __table_args__ = (
        CheckConstraint(
            "(verified_by IS NULL) = (verified_at IS NULL)",
            name="ck_verification_documents_verified_pair",
        ),
    )

    professional_id = Column(
        Uuid(as_uuid=True), ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_type = Column(String(100), nullable=False)
    document_url = Column(String(500), nullable=False)
    verification_notes = Column(Text)
    is_verified = Column(Boolean, default=False)
    verified_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    professional = relationship("Professional", back_populates="documents")
