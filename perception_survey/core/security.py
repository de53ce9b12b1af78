# perception_survey/core/security.py
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from perception_survey.core.config import settings


# =====================================================================
# JWT TOKEN CONFIGURATION
# =====================================================================

security = HTTPBearer()

ADMIN_SUBJECT = "admin"


# =====================================================================
# PASSWORD CHECK
# =====================================================================

def check_admin_password(password: str) -> bool:
    """
    Compare a submitted password with the configured admin password.

    This is a plain string comparison, there are no admin accounts.
    """
    return secrets.compare_digest(
        password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
    )


# =====================================================================
# TOKEN CREATION
# =====================================================================

def create_access_token(data: dict) -> str:
    """
    Create JWT access token.

    Args:
        data: Dictionary containing token claims (typically {"sub": "admin"})

    Returns:
        Encoded JWT access token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire, "type": "access"})
    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt


# =====================================================================
# TOKEN VERIFICATION
# =====================================================================

def verify_access_token(token: str) -> str:
    """
    Verify JWT access token and return its subject.

    Raises:
        HTTPException: If token is invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise credentials_exception

    subject: str = payload.get("sub")
    if subject is None or payload.get("type") != "access":
        raise credentials_exception

    return subject


# =====================================================================
# ADMIN DEPENDENCY
# =====================================================================

async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """
    Require a valid admin bearer token.

    Returns:
        The token subject
    """
    subject = verify_access_token(credentials.credentials)
    if subject != ADMIN_SUBJECT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return subject
