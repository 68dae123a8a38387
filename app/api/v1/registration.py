from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import rate_limit_dependency
from app.db.session import get_db
from app.schemas.common import ApiSuccess, ApiError, ErrorDetail
from app.schemas.registration import (
    ProfessionalRegistrationForm, RegistrationStepRequest, RegistrationStepResponse, RegistrationSubmitted,
)
from app.services.professionals import create_professional_account
from app.services.registration import RegistrationWorkflow, RegistrationStep
from app.tasks.notifications import enqueue, notify_registration_received

router = APIRouter()


@router.post("/professional/step", response_model=RegistrationStepResponse)
async def professional_registration_step(step_in: RegistrationStepRequest):
    """Run one transition of the registration form; the client owns the form state"""
    workflow = RegistrationWorkflow(form=step_in.form, step=RegistrationStep(step_in.step))

    if step_in.direction == "previous":
        workflow.go_to_previous_step()
    elif workflow.step == RegistrationStep.VERIFICATION:
        # The last step is left through submission only; report what would block it
        workflow.error = workflow.validate_verification()
    else:
        workflow.go_to_next_step()

    return RegistrationStepResponse(step=int(workflow.step), error=workflow.error)


@router.post(
    "/professional",
    response_model=ApiSuccess[RegistrationSubmitted],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ApiError}, 409: {"model": ApiError}, 503: {"model": ApiError}},
    dependencies=[Depends(rate_limit_dependency(requests_limit=10, time_window=60))],
)
async def register_professional(
        form: ProfessionalRegistrationForm,
        db: AsyncSession = Depends(get_db),
):
    workflow = RegistrationWorkflow(form=form)

    if not workflow.run_to_verification():
        return _step_error(workflow)

    async def persist(submitted: ProfessionalRegistrationForm):
        return await create_professional_account(db, submitted)

    result = await workflow.submit(persist)
    if not result.success:
        if result.exception is None:
            return _step_error(workflow)

        await db.rollback()
        if isinstance(result.exception, (HTTPException, IntegrityError)):
            raise result.exception
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result.error)

    professional = result.record
    enqueue(notify_registration_received, form.email, professional.business_name)
    logger.info(f"Professional {professional.id} pending verification")

    return ApiSuccess(
        message="Your professional registration has been submitted for review",
        data=RegistrationSubmitted(
            professional_id=professional.id,
            user_id=professional.user_id,
            verification_status=professional.verification_status,
            redirect_to=result.redirect_to,
        ),
    )


def _step_error(workflow: RegistrationWorkflow) -> JSONResponse:
    error = ApiError(
        message=workflow.error,
        errors=[ErrorDetail(field=f"step:{int(workflow.step)}", message=workflow.error)],
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.model_dump())
