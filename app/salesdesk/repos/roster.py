from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select

from app.salesdesk.db.models import City, Location, PosTerminal, User, user_pos


@dataclass(frozen=True)
class RosterRow:
    pos_id: int
    pos_name: str
    location_name: str
    city_name: str


class RosterRepository:
    def __init__(self, db):
        self.db = db

    def get_terminal(self, pos_id: int) -> PosTerminal | None:
        return self.db.get(PosTerminal, pos_id)

    def is_assigned(self, user_id: int, pos_id: int) -> bool:
        stmt = select(user_pos.c.pos_id).where(user_pos.c.user_id == user_id, user_pos.c.pos_id == pos_id)
        return self.db.execute(stmt).first() is not None

    def _active_roster_query(self):
        return (
            select(PosTerminal.id, PosTerminal.name, Location.name, City.name)
            .join(Location, PosTerminal.location_id == Location.id)
            .join(City, Location.city_id == City.id)
            .where(PosTerminal.status == "active")
            .order_by(City.name, Location.name, PosTerminal.name, PosTerminal.id)
        )

    def list_active_roster(self) -> list[RosterRow]:
        rows = self.db.execute(self._active_roster_query()).all()
        return [RosterRow(*row) for row in rows]

    def list_active_for_user(self, user_id: int) -> list[RosterRow]:
        stmt = self._active_roster_query().join(user_pos, user_pos.c.pos_id == PosTerminal.id).where(
            user_pos.c.user_id == user_id
        )
        rows = self.db.execute(stmt).all()
        return [RosterRow(*row) for row in rows]

    def primary_assignees(self, pos_ids: list[int]) -> dict[int, str]:
        """Name of the lowest-id assigned user for each terminal."""
        if not pos_ids:
            return {}
        first_user = (
            select(user_pos.c.pos_id, func.min(user_pos.c.user_id).label("user_id"))
            .where(user_pos.c.pos_id.in_(pos_ids))
            .group_by(user_pos.c.pos_id)
            .subquery()
        )
        stmt = select(first_user.c.pos_id, User.name).join(User, User.id == first_user.c.user_id)
        return {pos_id: name for pos_id, name in self.db.execute(stmt).all()}
