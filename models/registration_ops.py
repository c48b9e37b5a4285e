from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from models import Base


class RegistrationOp(Base):
    """Registration operation performed (or requested) for a vehicle.

    Citizen requests are stored with `badge_number` NULL and `requested_by`
    set; an employee fills in the badge number when processing.
    """

    __tablename__ = "registration_ops"

    operation_id = Column(Integer, primary_key=True, autoincrement=True)

    vin = Column(
        String(17),
        ForeignKey("transport_vehicles.vin", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    registration_number = Column(
        String(20),
        ForeignKey("registration_docs.registration_number", ondelete="SET NULL"),
        nullable=True,
    )
    unit_code = Column(
        String(50),
        ForeignKey("reg_departments.unit_code", ondelete="RESTRICT"),
        nullable=False,
    )

    operation_type = Column(String(20), nullable=False)  # registration / deregistration / change
    operation_base = Column(String(255), nullable=False)
    operation_date = Column(Date, nullable=False)

    badge_number = Column(
        String(10),
        ForeignKey("employees.badge_number", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    requested_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    employee = relationship("Employee")
    vehicle = relationship("TransportVehicle")
    registration_doc = relationship("RegistrationDoc")
    department = relationship("RegDepartment")
