from __future__ import annotations

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from models import Base


class LegalEntity(Base):
    __tablename__ = "legal_entities"

    # 10-digit tax identifier.
    tax_number = Column(String(10), primary_key=True)

    company_name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False, index=True)

    # Documents whose owner of record is this company.
    registration_docs = relationship(
        "RegistrationDoc",
        primaryjoin="LegalEntity.tax_number == foreign(RegistrationDoc.document_owner)",
        viewonly=True,
        order_by="RegistrationDoc.registration_date",
    )
