from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from redis.asyncio import Redis
from uuid import UUID

from app.db.session import get_db
from app.db.redis import get_redis
from app.models.users import User
from app.core.config import settings
from app.core.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def get_current_user(
        db: AsyncSession = Depends(get_db),
        token: str = Depends(oauth2_scheme),
        redis: Redis = Depends(get_redis),
) -> User:
    """
    Resolve the user from the bearer JWT
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        token_jti = payload.get("jti")
        user_id = payload.get("sub")

        if user_id is None:
            raise credentials_exception

        blacklisted = await redis.get(f"blacklist:{token_jti}")
        if blacklisted:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has been revoked",
                headers={"WWW-Authenticate": "Bearer"},
            )
        user_id = UUID(user_id)
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
        current_user: User = Depends(get_current_user),
) -> User:
    """
    Reject soft-disabled accounts
    """
    if not current_user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")
    return current_user


def require_permission(permission: str):
    """
    Dependency factory checking a permission granted through the user's roles
    """

    async def permission_checker(
            current_user: User = Depends(get_current_active_user),
    ) -> User:
        if permission not in current_user.permission_names:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return permission_checker


def rate_limit_dependency(
        requests_limit: int = 100,
        time_window: int = 60
):
    """
    Limit requests per client IP within a time window
    """

    async def rate_limit(
            request: Request,
            redis: Redis = Depends(get_redis)
    ):
        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{request.url.path}:{client_ip}"

        count = await redis.incr(key)

        if count == 1:
            await redis.expire(key, time_window)

        if count > requests_limit:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests",
            )

    return rate_limit
