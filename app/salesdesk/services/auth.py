from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.core.security import create_user_access_token, verify_password
from app.salesdesk.repos.users import UserRepository


class AuthService:
    def __init__(self, db):
        self.repo = UserRepository(db)

    def login(self, email: str, password: str):
        user = self.repo.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        self.ensure_user_active(user)
        return user, create_user_access_token(user)

    @staticmethod
    def ensure_user_active(user) -> None:
        if user.status != "active":
            raise AppError(ErrorCatalog.USER_INACTIVE)
