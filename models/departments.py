from __future__ import annotations

from sqlalchemy import Column, String, UniqueConstraint

from models import Base


class RegDepartment(Base):
    __tablename__ = "reg_departments"
    __table_args__ = (UniqueConstraint("email", name="uq_reg_departments_email"),)

    unit_code = Column(String(50), primary_key=True)

    name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    working_hours = Column(String(100), nullable=False)
    phone_number = Column(String(16), nullable=False)
    email = Column(String(320), nullable=False)
