from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from models import Base
from utils.time_utils import utcnow_sa_default


class TransportVehicle(Base):
    __tablename__ = "transport_vehicles"

    vin = Column(String(17), primary_key=True)

    make_and_model = Column(String(100), nullable=False)
    release_year = Column(String(4), nullable=False)
    manufacture = Column(String(100), nullable=False)
    type_of_drive = Column(String(3), nullable=False)  # FWD / RWD / AWD / 4WD
    power = Column(String(20), nullable=False)  # e.g. "150 hp", "110kW"

    # Equal to the VIN when the vehicle has a chassis number, NULL otherwise.
    chassis_number = Column(String(50), nullable=True)
    body_number = Column(String(50), nullable=False)
    body_color = Column(String(50), nullable=False)

    transmission_type = Column(String(3), nullable=False)  # MT / AT / AMT / CVT / DCT
    steering_wheel = Column(String(5), nullable=False)  # left / right
    engine_model = Column(String(50), nullable=False)
    engine_volume = Column(Integer, nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow_sa_default)

    registration_docs = relationship(
        "RegistrationDoc",
        back_populates="vehicle",
        passive_deletes=True,
    )
