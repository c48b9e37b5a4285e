from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, String
from sqlalchemy.orm import relationship

from models import Base


class RegistrationDoc(Base):
    """Issued registration document.

    `address` is a snapshot: it follows the owner's address only while the
    owner of record (`document_owner`) is the party that moves.
    """

    __tablename__ = "registration_docs"

    registration_number = Column(String(20), primary_key=True)

    address = Column(String(255), nullable=False, index=True)
    pts = Column(String(20), nullable=False)
    sts = Column(String(20), nullable=False)
    registration_date = Column(Date, nullable=False)

    vin = Column(
        String(17),
        ForeignKey("transport_vehicles.vin", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Passport data of a natural person or tax number of a legal entity.
    document_owner = Column(String(11), nullable=False, index=True)

    vehicle = relationship("TransportVehicle", back_populates="registration_docs")
