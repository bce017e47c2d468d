from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.session import SessionAsync
from app.services.applications import ApplicationService
from app.services.invitations import InvitationService
from app.services.team_lifecycle import TeamLifecycleService

# Tokens come from the external identity provider; tokenUrl is only used by Swagger UI
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/token",
    description="Bearer token issued by the identity provider",
)


async def get_db():
    async with SessionAsync() as session:
        yield session


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """
    Resolve the caller's user id from the bearer token.

    The token is trusted once its signature checks out; the ``sub`` claim is
    the user id.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.AUTH_SECRET_KEY, algorithms=[settings.AUTH_ALGORITHM])
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception
    return str(user_id)


# ==================== Service Dependencies ====================

def get_team_service(db: AsyncSession = Depends(get_db)) -> TeamLifecycleService:
    return TeamLifecycleService(db)


def get_invitation_service(db: AsyncSession = Depends(get_db)) -> InvitationService:
    return InvitationService(db)


def get_application_service(db: AsyncSession = Depends(get_db)) -> ApplicationService:
    return ApplicationService(db)
