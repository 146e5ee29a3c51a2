from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


user_pos = Table(
    "user_pos",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("pos_id", Integer, ForeignKey("pos_terminals.id", ondelete="CASCADE"), primary_key=True),
)


class City(Base):
    __tablename__ = "cities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    locations = relationship("Location", back_populates="city")


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    city_id: Mapped[int] = mapped_column(ForeignKey("cities.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    city = relationship("City", back_populates="locations")
    terminals = relationship("PosTerminal", back_populates="location")

    __table_args__ = (UniqueConstraint("city_id", "name", name="uq_locations_city_name"),)


class PosTerminal(Base):
    __tablename__ = "pos_terminals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[int] = mapped_column(ForeignKey("locations.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    location = relationship("Location", back_populates="terminals")
    users = relationship("User", secondary=user_pos, back_populates="terminals")

    __table_args__ = (UniqueConstraint("location_id", "name", name="uq_pos_terminals_location_name"),)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), default="USER", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    terminals = relationship("PosTerminal", secondary=user_pos, back_populates="users")

    @property
    def pos_ids(self) -> list[int]:
        return sorted(terminal.id for terminal in self.terminals)


class SalesType(Base):
    __tablename__ = "sales_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    attachment_applicable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attachment_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class SalesEntry(Base):
    __tablename__ = "sales_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    pos_id: Mapped[int] = mapped_column(ForeignKey("pos_terminals.id"), index=True, nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="submitted", nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    details = relationship("SalesEntryDetail", back_populates="entry", order_by="SalesEntryDetail.id")

    __table_args__ = (UniqueConstraint("pos_id", "entry_date", name="uq_sales_entries_pos_date"),)


class SalesEntryDetail(Base):
    __tablename__ = "sales_entry_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sales_entry_id: Mapped[int] = mapped_column(ForeignKey("sales_entries.id"), index=True, nullable=False)
    sales_type_id: Mapped[int] = mapped_column(ForeignKey("sales_types.id"), index=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    attachment_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)

    entry = relationship("SalesEntry", back_populates="details")
    sales_type = relationship("SalesType")

    __table_args__ = (
        UniqueConstraint("sales_entry_id", "sales_type_id", name="uq_sales_entry_details_entry_type"),
    )
