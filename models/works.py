from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from models import Base


class Work(Base):
    """Work log entry: an employee's involvement in an operation on a day."""

    __tablename__ = "works"
    __table_args__ = (
        UniqueConstraint(
            "badge_number",
            "operation_id",
            "work_date",
            name="uq_works_badge_operation_date",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    badge_number = Column(
        String(10),
        ForeignKey("employees.badge_number", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    operation_id = Column(
        Integer,
        ForeignKey("registration_ops.operation_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    purpose = Column(String(255), nullable=False)
    work_date = Column(Date, nullable=False)

    employee = relationship("Employee")
    operation = relationship("RegistrationOp")
