from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash
from app.models.base import Base
from app.models.users import User, Role, RoleName
from app.models.professionals import (
    Professional, ProfessionalType, VerificationDocument, VerificationStatus,
)
from app.schemas.registration import ProfessionalRegistrationForm


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_roles(db: AsyncSession, names: List[str]) -> List[Role]:
    result = await db.execute(select(Role).where(Role.name.in_(names)))
    return list(result.scalars().all())


async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        role_names: List[str],
        **profile,
) -> User:
    """Add a new user with its roles to the session; the caller commits"""
    if await get_user_by_email(db, email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        password=get_password_hash(password),
        is_email_verified=False,
        is_active=True,
        verification_token=Base.generate_token(),
        **profile,
    )
    user.roles = await get_roles(db, role_names)
    db.add(user)
    return user


async def create_professional_account(db: AsyncSession, form: ProfessionalRegistrationForm) -> Professional:
    """Store the user, its professional profile and the initial verification document"""
    role_names = [RoleName.CUSTOMER.value]
    if form.professional_role in {r.value for r in RoleName}:
        role_names.append(form.professional_role)

    user = await create_user(
        db,
        email=form.email,
        password=form.password,
        role_names=role_names,
        first_name=form.first_name,
        last_name=form.last_name,
        phone=form.phone or None,
        address=form.business_address or None,
    )

    professional_type = await db.execute(
        select(ProfessionalType).where(ProfessionalType.name == form.professional_role)
    )
    professional_type = professional_type.scalar_one_or_none()
    if professional_type is None:
        raise HTTPException(status_code=400, detail=f"Unknown professional role: {form.professional_role}")

    professional = Professional(
        user=user,
        business_name=form.business_name,
        business_description=form.business_description or None,
        years_of_experience=form.experience_years(),
        specializations=form.specializations,
        website=form.website or None,
        social_media=form.social_media or None,
        is_verified=False,
        verification_status=VerificationStatus.PENDING.value,
        review_count=0,
    )
    professional.types = [professional_type]
    db.add(professional)

    if form.document_type and form.document_url:
        db.add(VerificationDocument(
            professional=professional,
            document_type=form.document_type,
            document_url=form.document_url,
        ))

    await db.commit()
    await db.refresh(professional)
    logger.info(f"Created professional {professional.id} for user {user.id}")
    return professional


async def get_professional(db: AsyncSession, professional_id: UUID) -> Professional:
    professional = await db.get(Professional, professional_id, populate_existing=True)
    if professional is None:
        raise HTTPException(status_code=404, detail="Professional not found")
    return professional


async def get_professional_by_user(db: AsyncSession, user_id: UUID) -> Optional[Professional]:
    result = await db.execute(
        select(Professional).where(Professional.user_id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_professionals(
        db: AsyncSession,
        verification_status: Optional[VerificationStatus] = None,
        skip: int = 0,
        limit: int = 20,
) -> Tuple[List[Professional], int]:
    query = select(Professional)
    count_query = select(func.count(Professional.id))
    if verification_status:
        query = query.where(Professional.verification_status == verification_status.value)
        count_query = count_query.where(Professional.verification_status == verification_status.value)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(
        query.order_by(Professional.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def add_verification_document(
        db: AsyncSession,
        professional: Professional,
        document_type: str,
        document_url: str,
) -> VerificationDocument:
    if professional.verification_status == VerificationStatus.VERIFIED.value:
        raise HTTPException(status_code=400, detail="Professional is already verified")

    document = VerificationDocument(
        professional_id=professional.id,
        document_type=document_type,
        document_url=document_url,
    )
    professional.documents.append(document)
    await db.commit()
    await db.refresh(document)
    return document


async def get_document(db: AsyncSession, document_id: UUID) -> VerificationDocument:
    document = await db.get(VerificationDocument, document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Verification document not found")
    return document


async def verify_document(
        db: AsyncSession,
        document: VerificationDocument,
        reviewer: User,
        notes: Optional[str] = None,
) -> VerificationDocument:
    if document.is_verified:
        raise HTTPException(status_code=400, detail="Document already verified")

    document.is_verified = True
    document.verified_by = reviewer.id
    document.verified_at = datetime.now(timezone.utc)
    if notes:
        document.verification_notes = notes
    await db.commit()
    await db.refresh(document)
    logger.info(f"Document {document.id} verified by {reviewer.id}")
    return document


async def approve_professional(db: AsyncSession, professional: Professional, reviewer: User) -> Professional:
    if professional.verification_status != VerificationStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Professional is already {professional.verification_status}",
        )
    if not any(document.is_verified for document in professional.documents):
        raise HTTPException(status_code=400, detail="At least one verified document is required")

    professional.verification_status = VerificationStatus.VERIFIED.value
    professional.is_verified = True
    await db.commit()
    await db.refresh(professional)
    logger.info(f"Professional {professional.id} approved by {reviewer.id}")
    return professional


async def reject_professional(
        db: AsyncSession,
        professional: Professional,
        reviewer: User,
        reason: str,
) -> Professional:
    if professional.verification_status != VerificationStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Professional is already {professional.verification_status}",
        )

    professional.verification_status = VerificationStatus.REJECTED.value
    professional.is_verified = False
    for document in professional.documents:
        if not document.is_verified:
            document.verification_notes = reason
    await db.commit()
    await db.refresh(professional)
    logger.info(f"Professional {professional.id} rejected by {reviewer.id}: {reason}")
    return professional
