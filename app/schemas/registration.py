# app/schemas/registration.py
from pydantic import BaseModel, Field, validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Literal
from uuid import UUID

from app.models.professionals import ProfessionalTypeName

MAX_EXPERIENCE_YEARS = 100


class ProfessionalRegistrationForm(BaseModel):
    """Accumulated state of the professional registration form.

    Every field may be empty: the form is valid at any point of the workflow
    and required fields are only enforced by the step transitions.
    """

    # Step 1: basic info
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    email: str = Field("", max_length=255)
    password: str = ""
    confirm_password: str = ""

    # Step 2: professional info
    professional_role: str = ""
    business_name: str = Field("", max_length=255)
    business_description: str = ""
    business_address: str = ""
    phone: str = Field("", max_length=50)
    website: str = Field("", max_length=255)
    years_of_experience: str = ""
    specializations: List[str] = []
    social_media: Dict[str, str] = {}

    # Step 3: verification
    document_type: str = Field("", max_length=100)
    document_url: str = Field("", max_length=500)
    has_accepted_terms: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @validator("professional_role")
    def role_must_be_known(cls, v):
        if v and v not in {t.value for t in ProfessionalTypeName}:
            raise ValueError(f"Unknown professional role: {v}")
        return v

    @validator("years_of_experience", pre=True)
    def experience_must_be_whole_years(cls, v):
        if v is None:
            return ""
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str) and v.strip():
            if not v.strip().isdecimal():
                raise ValueError("Years of experience must be a whole number")
            if int(v.strip()) > MAX_EXPERIENCE_YEARS:
                raise ValueError(f"Years of experience must be at most {MAX_EXPERIENCE_YEARS}")
        return v

    @validator("specializations", pre=True)
    def split_specializations(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [item.strip() for item in v if item and item.strip()]

    def experience_years(self) -> Optional[int]:
        """Empty string means unspecified, never zero"""
        value = self.years_of_experience.strip()
        return int(value) if value else None


class RegistrationStepRequest(BaseModel):
    step: int = Field(1, ge=1, le=3)
    direction: Literal["next", "previous"] = "next"
    form: ProfessionalRegistrationForm = ProfessionalRegistrationForm()


class RegistrationStepResponse(BaseModel):
    step: int
    error: str = ""


class RegistrationSubmitted(BaseModel):
    professional_id: UUID
    user_id: UUID
    verification_status: str
    redirect_to: str
