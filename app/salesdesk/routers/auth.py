from fastapi import APIRouter, Depends, Request

from app.salesdesk.core.deps import require_active_user
from app.salesdesk.db.session import get_db
from app.salesdesk.schemas.auth import LoginRequest, TokenResponse, UserProfile, VerifyResponse
from app.salesdesk.services.auth import AuthService

router = APIRouter()


def _profile(user) -> UserProfile:
    return UserProfile(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        status=user.status,
        pos_ids=user.pos_ids,
    )


@router.post("/login", response_model=TokenResponse)
def login(request: Request, payload: LoginRequest, db=Depends(get_db)):
    user, token = AuthService(db).login(payload.email, payload.password)
    request.state.user_id = user.id
    request.state.role = user.role
    return TokenResponse(
        access_token=token,
        user=_profile(user),
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.get("/verify", response_model=VerifyResponse)
def verify(request: Request, current_user=Depends(require_active_user)):
    return VerifyResponse(user=_profile(current_user), trace_id=getattr(request.state, "trace_id", ""))
