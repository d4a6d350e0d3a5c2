from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from ..database import get_db, get_supabase
from ..models.user import User
from ..models.enums import UserRole
from supabase import Client
import logging

security = HTTPBearer()
logger = logging.getLogger(__name__)


# Auth Helper Functions
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    supabase: Client = Depends(get_supabase),
) -> User:
    """Get current authenticated user from Supabase token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        auth_response = supabase.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise credentials_exception

    if not auth_response or not auth_response.user:
        raise credentials_exception

    supabase_user = auth_response.user

    user = (
        db.query(User)
        .filter(User.supabase_id == supabase_user.id, User.is_active == True)
        .first()
    )

    # First sign-in: every new account starts as a volunteer
    if not user:
        user = User.create_from_supabase(supabase_user, db)

    return user


async def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """Staff and admins manage opportunities, hours and the catalog"""
    if not current_user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff permissions required",
        )
    return current_user


async def require_volunteer(current_user: User = Depends(get_current_user)) -> User:
    """Only volunteers RSVP for themselves"""
    if current_user.role != UserRole.VOLUNTEER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Volunteer account required",
        )
    return current_user
