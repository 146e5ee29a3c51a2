from sqlalchemy import select

from app.salesdesk.db.models import User


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id: int | str):
        try:
            return self.db.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    def get_by_email(self, email: str):
        stmt = select(User).where(User.email == email.strip().lower())
        return self.db.execute(stmt).scalars().first()
