from __future__ import annotations

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from models import Base


class NaturalPerson(Base):
    __tablename__ = "natural_persons"

    # Format: "1234 567890" (series, space, number).
    passport_data = Column(String(11), primary_key=True)

    last_name = Column(String(50), nullable=False)
    first_name = Column(String(50), nullable=False)
    patronymic = Column(String(50), nullable=False)

    # Not a FK to owners.address; reconciled by value.
    address = Column(String(255), nullable=False, index=True)

    # Documents whose owner of record is this person.
    registration_docs = relationship(
        "RegistrationDoc",
        primaryjoin="NaturalPerson.passport_data == foreign(RegistrationDoc.document_owner)",
        viewonly=True,
        order_by="RegistrationDoc.registration_date",
    )
