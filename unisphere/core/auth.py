"""
Authentication Utility - JWT sessions and role checks.

Provides:
- JWT token creation/verification
- Session: the caller's identity and typed role, passed down explicitly
- FastAPI dependencies for protected routes

Login and sign-up live in the auth service; this module only trusts the
tokens it signs.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from unisphere.core.config import get_settings
from unisphere.schemas.schemas import UserRole

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class Session(BaseModel):
    """Who is calling, and as what."""
    user_id: str
    role: UserRole
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_session_token(session: Session, expires_delta: Optional[timedelta] = None) -> str:
    """Token carrying a session's identity and role."""
    data = {"sub": session.user_id, "role": session.role.value}
    if session.email:
        data["email"] = session.email
    return create_access_token(data, expires_delta)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def session_from_token(token: str) -> Optional[Session]:
    """Session for a valid token, None for anything else."""
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None

    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        return None

    return Session(user_id=str(payload["sub"]), role=role, email=payload.get("email"))


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Session:
    """
    FastAPI dependency - Get the caller's session.

    Usage:
        @app.get("/protected")
        async def route(session: Session = Depends(get_current_session)):
            return session
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    session = session_from_token(credentials.credentials)
    if session is None:
        raise credentials_exception

    return session


async def require_admin(session: Session = Depends(get_current_session)) -> Session:
    """Dependency - Require admin role."""
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admins only")
    return session
