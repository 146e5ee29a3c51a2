from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.salesdesk.core.context import RequestContext, build_request_context
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.core.security import TokenData, decode_token, oauth2_scheme
from app.salesdesk.db.session import get_db
from app.salesdesk.repos.users import UserRepository
from app.salesdesk.services.access_policy import Capability, PolicyDecision, evaluate
from app.salesdesk.services.attachments import LocalAttachmentStore, get_default_store
from app.salesdesk.services.auth import AuthService


def get_current_token_data(token: str = Depends(oauth2_scheme)) -> TokenData:
    try:
        payload = decode_token(token)
        return TokenData(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc


def get_current_user(token_data: TokenData = Depends(get_current_token_data), db=Depends(get_db)):
    if not token_data.sub:
        raise AppError(ErrorCatalog.INVALID_TOKEN)

    user = UserRepository(db).get_by_id(token_data.sub)
    if user is None:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    return user


def require_active_user(request: Request, user=Depends(get_current_user)):
    AuthService.ensure_user_active(user)
    # Role comes from storage, not from the token, so demotions apply at once.
    request.state.user_id = user.id
    request.state.role = user.role
    return user


def require_request_context(request: Request, user=Depends(require_active_user)) -> RequestContext:
    context = build_request_context(user, trace_id=getattr(request.state, "trace_id", ""))
    request.state.context = context
    return context


def require_capability(capability: Capability):
    def dependency(context: RequestContext = Depends(require_request_context)) -> PolicyDecision:
        decision = evaluate(context, capability)
        if not decision.allowed:
            raise AppError(ErrorCatalog.PERMISSION_DENIED)
        return decision

    return dependency


def get_attachment_store() -> LocalAttachmentStore:
    return get_default_store()


__all__ = [
    "get_current_token_data",
    "get_current_user",
    "require_active_user",
    "require_request_context",
    "require_capability",
    "get_attachment_store",
]
