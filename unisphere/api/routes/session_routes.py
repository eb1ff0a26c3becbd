"""
Session Routes

GET /auth/me - The caller's session (identity + role)
"""

from fastapi import APIRouter, Depends

from unisphere.core.auth import Session, get_current_session
from unisphere.schemas.schemas import SessionResponse

router = APIRouter(prefix="/auth", tags=["Session"])


@router.get("/me", response_model=SessionResponse)
async def get_me(session: Session = Depends(get_current_session)):
    """Frontends use this to decide between the student and admin views."""
    return SessionResponse(user_id=session.user_id, role=session.role, email=session.email)
