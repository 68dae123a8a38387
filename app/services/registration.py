"""Step-gated professional registration workflow.

The workflow walks BASIC_INFO -> PROFESSIONAL_INFO -> VERIFICATION and ends in
SUBMITTED once the persistence collaborator has stored the record. Forward
moves are gated on the fields of the current step; backward moves are always
allowed and never touch the form.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from app.core.config import settings
from app.core.security import MAX_PASSWORD_BYTES, password_too_long
from app.schemas.registration import ProfessionalRegistrationForm

PENDING_VERIFICATION_PATH = "/verification-pending"

MISSING_BASIC_INFO = "Please fill in all required fields"
PASSWORD_MISMATCH = "Passwords do not match"
PASSWORD_TOO_LONG = f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
MISSING_PROFESSIONAL_INFO = "Business name and professional role are required"
TERMS_NOT_ACCEPTED = "You must accept the terms and conditions to proceed"
SUBMISSION_FAILED = "Registration failed. Please try again."


class RegistrationStep(IntEnum):
    BASIC_INFO = 1
    PROFESSIONAL_INFO = 2
    VERIFICATION = 3
    SUBMITTED = 4


PersistCallback = Callable[[ProfessionalRegistrationForm], Awaitable[Any]]


@dataclass
class SubmissionResult:
    success: bool
    record: Any = None
    redirect_to: Optional[str] = None
    error: str = ""
    exception: Optional[BaseException] = None


@dataclass
class RegistrationWorkflow:
    form: ProfessionalRegistrationForm = field(default_factory=ProfessionalRegistrationForm)
    step: RegistrationStep = RegistrationStep.BASIC_INFO
    error: str = ""
    submitting: bool = False
    reject_blank_fields: bool = field(default_factory=lambda: settings.REGISTRATION_REJECT_BLANK_FIELDS)

    def update(self, **values: Any) -> None:
        """Merge field values into the form; step and error are left alone"""
        data = self.form.model_dump()
        data.update(values)
        self.form = ProfessionalRegistrationForm(**data)

    def _filled(self, value: str) -> bool:
        if self.reject_blank_fields:
            return bool(value and value.strip())
        return bool(value)

    def _fail(self, message: str) -> bool:
        self.error = message
        logger.debug(f"Registration step {int(self.step)} blocked: {message}")
        return False

    def _advance(self, to: RegistrationStep) -> bool:
        self.step = to
        self.error = ""
        return True

    def validate_basic_info(self) -> str:
        form = self.form
        required = (form.first_name, form.last_name, form.email, form.password, form.confirm_password)
        if not all(self._filled(value) for value in required):
            return MISSING_BASIC_INFO
        if form.password != form.confirm_password:
            return PASSWORD_MISMATCH
        if password_too_long(form.password):
            return PASSWORD_TOO_LONG
        return ""

    def validate_professional_info(self) -> str:
        if not (self._filled(self.form.business_name) and self._filled(self.form.professional_role)):
            return MISSING_PROFESSIONAL_INFO
        return ""

    def validate_verification(self) -> str:
        if not self.form.has_accepted_terms:
            return TERMS_NOT_ACCEPTED
        return ""

    def go_to_next_step(self) -> bool:
        if self.step == RegistrationStep.BASIC_INFO:
            message = self.validate_basic_info()
            if message:
                return self._fail(message)
            return self._advance(RegistrationStep.PROFESSIONAL_INFO)

        if self.step == RegistrationStep.PROFESSIONAL_INFO:
            message = self.validate_professional_info()
            if message:
                return self._fail(message)
            return self._advance(RegistrationStep.VERIFICATION)

        # Leaving VERIFICATION happens through submit()
        return False

    def go_to_previous_step(self) -> bool:
        if self.step in (RegistrationStep.PROFESSIONAL_INFO, RegistrationStep.VERIFICATION):
            self.step = RegistrationStep(self.step - 1)
            return True
        return False

    async def submit(self, persist: PersistCallback) -> Optional[SubmissionResult]:
        """Hand the form to ``persist`` once the terms are accepted.

        Returns None when a submission is already in flight.
        """
        if self.submitting:
            logger.warning("Registration submit ignored: submission already in progress")
            return None
        if self.step != RegistrationStep.VERIFICATION:
            return SubmissionResult(success=False, error=self.error)

        message = self.validate_verification()
        if message:
            self._fail(message)
            return SubmissionResult(success=False, error=message)

        self.submitting = True
        try:
            record = await persist(self.form)
        except Exception as e:
            logger.exception(f"Professional registration for {self.form.email} failed: {str(e)}")
            self.error = SUBMISSION_FAILED
            return SubmissionResult(success=False, error=SUBMISSION_FAILED, exception=e)
        finally:
            self.submitting = False

        self._advance(RegistrationStep.SUBMITTED)
        logger.info(f"Professional registration submitted for {self.form.email}")
        return SubmissionResult(success=True, record=record, redirect_to=PENDING_VERIFICATION_PATH)

    def run_to_verification(self) -> bool:
        """Drive the workflow forward until VERIFICATION or the first blocked step"""
        while self.step < RegistrationStep.VERIFICATION:
            if not self.go_to_next_step():
                return False
        return True
