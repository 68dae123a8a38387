from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.core.dependencies import get_current_active_user, require_permission
from app.db.session import get_db
from app.models.users import User
from app.schemas.common import ApiSuccess
from app.schemas.professional import (
    ProfessionalResponse, ProfessionalDetailResponse, VerificationDocumentCreate,
    VerificationDocumentResponse, VerificationStatus, DocumentReview, RejectionRequest,
)
from app.services import professionals as service
from app.tasks.notifications import enqueue, notify_verification_decision

router = APIRouter()

VERIFY_PERMISSION = "professional:verify"


@router.get("", response_model=ApiSuccess[List[ProfessionalResponse]])
async def list_professionals(
        verification_status: Optional[VerificationStatus] = VerificationStatus.PENDING,
        skip: int = 0,
        limit: int = 20,
        reviewer: User = Depends(require_permission(VERIFY_PERMISSION)),
        db: AsyncSession = Depends(get_db),
):
    professionals, total = await service.list_professionals(db, verification_status, skip, limit)
    return ApiSuccess(
        data=[ProfessionalResponse.model_validate(p) for p in professionals],
        message=f"{total} professionals",
    )


@router.get("/me", response_model=ApiSuccess[ProfessionalDetailResponse])
async def read_own_professional(
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
):
    """Profile and verification state of the signed-in professional"""
    professional = await service.get_professional_by_user(db, current_user.id)
    if professional is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No professional profile for this account")
    return ApiSuccess(data=ProfessionalDetailResponse.model_validate(professional))


@router.get("/{professional_id}", response_model=ApiSuccess[ProfessionalDetailResponse])
async def get_professional(
        professional_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
):
    professional = await service.get_professional(db, professional_id)
    if professional.user_id != current_user.id and VERIFY_PERMISSION not in current_user.permission_names:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
    return ApiSuccess(data=ProfessionalDetailResponse.model_validate(professional))


@router.post(
    "/{professional_id}/documents",
    response_model=ApiSuccess[VerificationDocumentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_document(
        professional_id: UUID,
        document_in: VerificationDocumentCreate,
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
):
    professional = await service.get_professional(db, professional_id)
    if professional.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your professional profile")

    document = await service.add_verification_document(
        db, professional, document_in.document_type, document_in.document_url
    )
    return ApiSuccess(data=VerificationDocumentResponse.model_validate(document))


@router.post("/documents/{document_id}/verify", response_model=ApiSuccess[VerificationDocumentResponse])
async def verify_document(
        document_id: UUID,
        review: DocumentReview,
        reviewer: User = Depends(require_permission(VERIFY_PERMISSION)),
        db: AsyncSession = Depends(get_db),
):
    document = await service.get_document(db, document_id)
    document = await service.verify_document(db, document, reviewer, review.notes)
    return ApiSuccess(data=VerificationDocumentResponse.model_validate(document))


@router.post("/{professional_id}/approve", response_model=ApiSuccess[ProfessionalResponse])
async def approve_professional(
        professional_id: UUID,
        reviewer: User = Depends(require_permission(VERIFY_PERMISSION)),
        db: AsyncSession = Depends(get_db),
):
    professional = await service.get_professional(db, professional_id)
    professional = await service.approve_professional(db, professional, reviewer)

    enqueue(notify_verification_decision, professional.user.email, professional.business_name, True)
    return ApiSuccess(data=ProfessionalResponse.model_validate(professional), message="Professional verified")


@router.post("/{professional_id}/reject", response_model=ApiSuccess[ProfessionalResponse])
async def reject_professional(
        professional_id: UUID,
        rejection: RejectionRequest,
        reviewer: User = Depends(require_permission(VERIFY_PERMISSION)),
        db: AsyncSession = Depends(get_db),
):
    professional = await service.get_professional(db, professional_id)
    professional = await service.reject_professional(db, professional, reviewer, rejection.reason)

    enqueue(
        notify_verification_decision,
        professional.user.email,
        professional.business_name,
        False,
        rejection.reason,
    )
    return ApiSuccess(data=ProfessionalResponse.model_validate(professional), message="Professional rejected")
