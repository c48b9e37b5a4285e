from __future__ import annotations

from sqlalchemy import Column, Integer, String, UniqueConstraint

from models import Base


class Owner(Base):
    """Address registry row.

    One row per distinct address string currently used by a natural person,
    a legal entity or a registration document. Parties and documents hold the
    address by value; this table is kept in sync by
    `api.services.address_registry`.
    """

    __tablename__ = "owners"
    __table_args__ = (
        # Storage-level guard for the find-or-create step.
        UniqueConstraint("address", name="uq_owners_address"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(255), nullable=False)
