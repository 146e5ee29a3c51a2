from sqlalchemy import select

from app.salesdesk.db.models import SalesType


class SalesTypeRepository:
    def __init__(self, db):
        self.db = db

    def list_active(self) -> list[SalesType]:
        stmt = select(SalesType).where(SalesType.status == "active").order_by(SalesType.name, SalesType.id)
        return self.db.execute(stmt).scalars().all()
