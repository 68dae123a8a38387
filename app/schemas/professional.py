# app/schemas/professional.py
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.models.professionals import VerificationStatus


class VerificationDocumentCreate(BaseModel):
    document_type: str = Field(..., min_length=1, max_length=100)
    document_url: str = Field(..., min_length=1, max_length=500)


class DocumentReview(BaseModel):
    notes: Optional[str] = None


class RejectionRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class VerificationDocumentResponse(BaseModel):
    id: UUID
    professional_id: UUID
    document_type: str
    document_url: str
    verification_notes: Optional[str] = None
    is_verified: bool
    verified_by: Optional[UUID] = None
    verified_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfessionalResponse(BaseModel):
    id: UUID
    user_id: UUID
    business_name: Optional[str] = None
    business_description: Optional[str] = None
    years_of_experience: Optional[int] = None
    specializations: Optional[List[str]] = None
    website: Optional[str] = None
    social_media: Optional[Dict[str, str]] = None
    is_verified: bool
    verification_status: VerificationStatus
    rating: Optional[Decimal] = None
    review_count: int = 0
    type_names: List[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfessionalDetailResponse(ProfessionalResponse):
    documents: List[VerificationDocumentResponse] = []
