"""
Module: stock_kernel.models.directory
Responsibility: Read-only reference tables the kernel looks up but never
    writes: catalog items, shops, routes and users.
Architecture position: Kernel > Models.

Shops reach a representative in two ways: directly (``shops.rep_id``) or
through a route the representative owns (``shops.route_id`` ->
``routes.rep_id``).  ShopAssignmentSelector resolves both.
"""

from enum import Enum

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base
from stock_kernel.db.types import REF_LENGTH


class UserRole(str, Enum):
    """Roles of people using the field apps."""

    REP = "rep"
    SALESMAN = "salesman"
    STOREKEEPER = "storekeeper"
    ADMIN = "admin"


class Item(Base):
    """Catalog item.  ``code`` is the opaque id movements refer to."""

    __tablename__ = "items"

    code: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"<Item {self.code} {self.name}>"


class Route(Base):
    """A delivery route owned by one representative."""

    __tablename__ = "routes"

    __table_args__ = (Index("idx_route_rep", "rep_id"),)

    code: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    rep_id: Mapped[str | None] = mapped_column(String(REF_LENGTH), nullable=True)


class Shop(Base):
    """A retail shop."""

    __tablename__ = "shops"

    __table_args__ = (
        Index("idx_shop_rep", "rep_id"),
        Index("idx_shop_route", "route_id"),
    )

    code: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Direct assignment to a representative
    rep_id: Mapped[str | None] = mapped_column(String(REF_LENGTH), nullable=True)

    # Assignment through a route (routes.code)
    route_id: Mapped[str | None] = mapped_column(String(REF_LENGTH), nullable=True)

    def __repr__(self) -> str:
        return f"<Shop {self.code} {self.name}>"


class User(Base):
    """Field user.  ``code`` is the opaque actor id used in movements."""

    __tablename__ = "users"

    code: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    role: Mapped[UserRole] = mapped_column(String(20), nullable=False)
