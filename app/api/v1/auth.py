from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from datetime import datetime, timezone
from jose import JWTError

from app.core.security import create_access_token, verify_password, decode_access_token
from app.core.dependencies import get_current_active_user, oauth2_scheme
from app.db.session import get_db
from app.db.redis import get_redis
from app.models.users import User, RoleName
from app.schemas.common import ApiSuccess
from app.schemas.user import UserCreate, UserResponse, Token
from app.services.professionals import create_user, get_user_by_email

router = APIRouter()


@router.post("/register", response_model=ApiSuccess[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
        user_in: UserCreate,
        db: AsyncSession = Depends(get_db),
):
    user = await create_user(
        db,
        email=user_in.email,
        password=user_in.password,
        role_names=[RoleName.CUSTOMER.value],
        first_name=user_in.first_name,
        last_name=user_in.last_name,
    )
    await db.commit()
    await db.refresh(user)

    return ApiSuccess(data=UserResponse.model_validate(user), message="Registration successful")


@router.post("/login", response_model=Token)
async def login(
        form_data: OAuth2PasswordRequestForm = Depends(),
        db: AsyncSession = Depends(get_db),
):
    user = await get_user_by_email(db, form_data.username)

    if not user or not verify_password(form_data.password, user.password):
        raise HTTPException(status_code=401, detail="Incorrect email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    user.last_login = datetime.now(timezone.utc)
    await db.commit()

    return Token(access_token=create_access_token(subject=user.id))


@router.post("/logout")
async def logout(
        current_user: User = Depends(get_current_active_user),
        token: str = Depends(oauth2_scheme),
        redis: Redis = Depends(get_redis)
):
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    token_jti = payload.get("jti")
    exp_timestamp = payload.get("exp")
    current_timestamp = datetime.now(timezone.utc).timestamp()
    ttl = max(int(exp_timestamp - current_timestamp), 1)

    await redis.set(f"blacklist:{token_jti}", "1", ex=ttl)

    return {"message": "Logged out successfully"}


@router.get("/me", response_model=ApiSuccess[UserResponse])
async def read_current_user(
        current_user: User = Depends(get_current_active_user),
):
    return ApiSuccess(data=UserResponse.model_validate(current_user))
