"""SQLAlchemy models package.

Important: This project uses a single declarative Base defined in `db.py`.
Import `Base` from this package in all model modules.

Example:

    Base.metadata.create_all(...)

This keeps `Base.metadata` consistent across the app.
"""

from db import Base  # re-export a single shared Base

# Import models so they are registered with SQLAlchemy metadata on startup.
# This makes `Base.metadata.create_all()` create all tables for a fresh DB.
#
# Keep imports local to this package to avoid circular dependencies in app code.
from models.owners import Owner  # noqa: F401
from models.natural_persons import NaturalPerson  # noqa: F401
from models.legal_entities import LegalEntity  # noqa: F401
from models.transport_vehicles import TransportVehicle  # noqa: F401
from models.registration_docs import RegistrationDoc  # noqa: F401
from models.departments import RegDepartment  # noqa: F401
from models.employees import Employee  # noqa: F401
from models.registration_ops import RegistrationOp  # noqa: F401
from models.works import Work  # noqa: F401
from models.users import User  # noqa: F401
