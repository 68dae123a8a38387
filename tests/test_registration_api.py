import pytest
from sqlalchemy import select

from app.core.config import settings
from app.models.professionals import Professional, VerificationDocument
from app.models.users import User
from app.tasks.notifications import notify_registration_received

REGISTRATION_URL = f"{settings.API_V1_STR}/registration/professional"


@pytest.mark.asyncio
async def test_register_professional(client, db_session, registration_form_data, mock_enqueue):
    """A complete form creates a pending professional with its document"""
    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["verification_status"] == "pending"
    assert body["data"]["redirect_to"] == "/verification-pending"

    user = (await db_session.execute(select(User).where(User.email == "ada@x.com"))).scalar_one()
    assert user.role_names == ["customer", "dealer"]
    assert user.password != "p1"
    assert str(user.id) == body["data"]["user_id"]

    professional = (await db_session.execute(
        select(Professional).where(Professional.user_id == user.id)
    )).scalar_one()
    assert professional.business_name == "Analytical Gems"
    assert professional.years_of_experience is None
    assert professional.specializations == ["Sapphires", "Rubies"]
    assert professional.type_names == ["dealer"]
    assert professional.is_verified is False

    documents = (await db_session.execute(
        select(VerificationDocument).where(VerificationDocument.professional_id == professional.id)
    )).scalars().all()
    assert len(documents) == 1
    assert documents[0].document_type == "business_license"
    assert documents[0].verified_at is None

    mock_enqueue["registration"].assert_called_once_with(
        notify_registration_received, "ada@x.com", "Analytical Gems"
    )


@pytest.mark.asyncio
async def test_register_professional_without_document(client, db_session, registration_form_data, mock_enqueue):
    registration_form_data.pop("documentType")
    registration_form_data.pop("documentUrl")
    registration_form_data["yearsOfExperience"] = "7"

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 201
    professional = (await db_session.execute(select(Professional))).scalar_one()
    assert professional.years_of_experience == 7
    documents = (await db_session.execute(select(VerificationDocument))).scalars().all()
    assert documents == []


@pytest.mark.asyncio
async def test_register_professional_terms_not_accepted(client, db_session, registration_form_data, mock_enqueue):
    """Unaccepted terms stop the submission on step 3"""
    registration_form_data["hasAcceptedTerms"] = False

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "You must accept the terms and conditions to proceed"
    assert body["errors"][0]["field"] == "step:3"
    assert (await db_session.execute(select(User))).scalars().all() == []
    mock_enqueue["registration"].assert_not_called()


@pytest.mark.asyncio
async def test_register_professional_password_mismatch(client, registration_form_data, mock_enqueue):
    registration_form_data["confirmPassword"] = "p2"

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 400
    assert response.json()["message"] == "Passwords do not match"
    assert response.json()["errors"][0]["field"] == "step:1"


@pytest.mark.asyncio
async def test_register_professional_missing_business_name(client, registration_form_data, mock_enqueue):
    registration_form_data["businessName"] = ""

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 400
    assert response.json()["message"] == "Business name and professional role are required"
    assert response.json()["errors"][0]["field"] == "step:2"


@pytest.mark.asyncio
async def test_register_professional_duplicate_email(client, test_user, registration_form_data, mock_enqueue):
    """An existing email is reported, not swallowed"""
    registration_form_data["email"] = test_user["email"]

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"
    mock_enqueue["registration"].assert_not_called()


@pytest.mark.asyncio
async def test_register_professional_unknown_role(client, registration_form_data):
    registration_form_data["professionalRole"] = "smuggler"

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert any("professionalRole" in error["field"] for error in body["errors"])


@pytest.mark.asyncio
async def test_register_professional_rate_limited(client, mock_redis, registration_form_data):
    mock_redis.incr.return_value = 11

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 429


@pytest.mark.asyncio
async def test_registration_step_next(client):
    """Step endpoint advances with complete basic info"""
    response = await client.post(f"{REGISTRATION_URL}/step", json={
        "step": 1,
        "direction": "next",
        "form": {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@x.com",
            "password": "p1",
            "confirmPassword": "p1",
        },
    })

    assert response.status_code == 200
    assert response.json() == {"step": 2, "error": ""}


@pytest.mark.asyncio
async def test_registration_step_blocked(client):
    response = await client.post(f"{REGISTRATION_URL}/step", json={
        "step": 1,
        "form": {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@x.com",
            "password": "p1",
            "confirmPassword": "p2",
        },
    })

    assert response.status_code == 200
    assert response.json() == {"step": 1, "error": "Passwords do not match"}


@pytest.mark.asyncio
async def test_registration_step_previous(client):
    response = await client.post(f"{REGISTRATION_URL}/step", json={"step": 3, "direction": "previous"})

    assert response.json() == {"step": 2, "error": ""}


@pytest.mark.asyncio
async def test_registration_step_verification_reports_terms(client):
    response = await client.post(f"{REGISTRATION_URL}/step", json={"step": 3, "direction": "next"})

    assert response.json() == {"step": 3, "error": "You must accept the terms and conditions to proceed"}


@pytest.mark.asyncio
async def test_registration_step_out_of_range(client):
    response = await client.post(f"{REGISTRATION_URL}/step", json={"step": 4})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_professional_password_too_long(client, db_session, registration_form_data, mock_enqueue):
    """A password bcrypt cannot hash is a step 1 error, not a failed submission"""
    registration_form_data["password"] = "x" * 80
    registration_form_data["confirmPassword"] = "x" * 80

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Password must be at most 72 bytes"
    assert body["errors"][0]["field"] == "step:1"
    assert (await db_session.execute(select(User))).scalars().all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("years", ["²", "-1", "101", "3.5"])
async def test_register_professional_invalid_experience(client, registration_form_data, years):
    registration_form_data["yearsOfExperience"] = years

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 422
    assert any("yearsOfExperience" in error["field"] for error in response.json()["errors"])


@pytest.mark.asyncio
@pytest.mark.parametrize("field, length", [
    ("firstName", 101),
    ("businessName", 256),
    ("website", 256),
    ("documentType", 101),
    ("documentUrl", 501),
])
async def test_register_professional_value_longer_than_column(client, registration_form_data, field, length):
    """Values that do not fit their column are rejected before reaching the database"""
    registration_form_data[field] = "a" * length

    response = await client.post(REGISTRATION_URL, json=registration_form_data)

    assert response.status_code == 422
    assert any(field in error["field"] for error in response.json()["errors"])


@pytest.mark.asyncio
async def test_registration_step_password_too_long(client):
    response = await client.post(f"{REGISTRATION_URL}/step", json={
        "step": 1,
        "form": {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@x.com",
            "password": "x" * 73,
            "confirmPassword": "x" * 73,
        },
    })

    assert response.json() == {"step": 1, "error": "Password must be at most 72 bytes"}
