from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from models import Base


class Employee(Base):
    __tablename__ = "employees"

    badge_number = Column(String(10), primary_key=True)

    unit_code = Column(
        String(50),
        ForeignKey("reg_departments.unit_code", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    last_name = Column(String(50), nullable=False)
    first_name = Column(String(50), nullable=False)
    patronymic = Column(String(50), nullable=False)
    rank = Column(String(50), nullable=False)

    department = relationship("RegDepartment")
