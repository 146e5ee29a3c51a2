from sqlalchemy import select

from app.salesdesk.core.config import settings
from app.salesdesk.core.security import get_password_hash
from app.salesdesk.db.models import User
from app.salesdesk.services.access_policy import Role


def _get_or_create_superadmin(db):
    email = settings.SUPERADMIN_EMAIL.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    if user:
        return user
    user = User(
        name=settings.SUPERADMIN_NAME,
        email=email,
        hashed_password=get_password_hash(settings.SUPERADMIN_PASSWORD),
        role=Role.SUPERADMIN.value,
        status="active",
    )
    db.add(user)
    return user


def run_seed(db):
    user = _get_or_create_superadmin(db)
    db.commit()
    return user


if __name__ == "__main__":
    from app.salesdesk.db.session import SessionLocal

    session = SessionLocal()
    try:
        run_seed(session)
    finally:
        session.close()
