from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import select, union
from sqlalchemy.orm import Session

from api.errors import BadRequest, Conflict, NotFound
from api.schemas.vehicles import VehicleCreate, VehicleOut, VehicleQuery, VehicleWithDocs
from api.services.immutability import VEHICLE, check_mutable, has_dependent_documents
from api.services.listing import Listing, contains, paginate
from logging_utils import get_logger
from models.registration_docs import RegistrationDoc
from models.registration_ops import RegistrationOp
from models.transport_vehicles import TransportVehicle

logger = get_logger(__name__)

VEHICLE_SORT = {
    "createdAt": TransportVehicle.created_at,
    "releaseYear": TransportVehicle.release_year,
    "makeAndModel": TransportVehicle.make_and_model,
    "engineVolume": TransportVehicle.engine_volume,
}
VEHICLE_DEFAULT_SORT = ("createdAt", "DESC")
VEHICLE_TIEBREAKER = (TransportVehicle.vin.asc(),)

# Exact-match filters; the remaining text filters are substring matches.
_EXACT_FILTERS = ("vin", "release_year", "type_of_drive", "transmission_type", "steering_wheel")
_TEXT_FILTERS = ("make_and_model", "manufacture", "body_color", "engine_model")

_PLAIN_FIELDS = (
    "make_and_model",
    "release_year",
    "manufacture",
    "type_of_drive",
    "power",
    "body_number",
    "body_color",
    "transmission_type",
    "steering_wheel",
    "engine_model",
    "engine_volume",
)


def _chassis_number(vin: str, has_chassis_number: bool) -> str | None:
    return vin if has_chassis_number else None


def normalize_chassis(vin: str, changes: Mapping[str, Any]) -> dict[str, Any]:
    """Translate `has_chassis_number` into a `chassis_number` change.

    An explicit `chassis_number` must equal the VIN (or be None).
    """

    out = dict(changes)
    if "has_chassis_number" in out:
        out["chassis_number"] = _chassis_number(vin, bool(out.pop("has_chassis_number")))
    elif out.get("chassis_number") is not None and out["chassis_number"] != vin:
        raise BadRequest("chassisNumber must equal the vehicle VIN", field="chassisNumber")
    return out


def get_vehicle_row(session: Session, vin: str) -> TransportVehicle:
    vehicle = session.get(TransportVehicle, vin)
    if vehicle is None:
        raise NotFound("Vehicle not found", field="vin")
    return vehicle


def filter_vehicles(query, params: VehicleQuery):
    for field in _EXACT_FILTERS:
        value = getattr(params, field)
        if value is not None:
            query = query.filter(getattr(TransportVehicle, field) == value)
    for field in _TEXT_FILTERS:
        value = getattr(params, field)
        if value:
            query = query.filter(contains(getattr(TransportVehicle, field), value))
    if params.engine_volume_from is not None:
        query = query.filter(TransportVehicle.engine_volume >= params.engine_volume_from)
    if params.engine_volume_to is not None:
        query = query.filter(TransportVehicle.engine_volume <= params.engine_volume_to)
    return query


def list_vehicles(session: Session, params: VehicleQuery, listing: Listing) -> dict:
    query = filter_vehicles(session.query(TransportVehicle), params)
    return paginate(query, listing, VehicleOut.serialize)


def _citizen_vins(party_key: str, user_id: int):
    """VINs on the citizen's documents or on operations they requested."""

    documented = select(RegistrationDoc.vin).where(RegistrationDoc.document_owner == party_key)
    requested = select(RegistrationOp.vin).where(RegistrationOp.requested_by == user_id)
    return union(documented, requested)


def list_vehicles_of_owner(
    session: Session,
    *,
    party_key: str,
    user_id: int,
    params: VehicleQuery,
    listing: Listing,
) -> dict:
    query = filter_vehicles(
        session.query(TransportVehicle).filter(TransportVehicle.vin.in_(_citizen_vins(party_key, user_id))),
        params,
    )
    return paginate(query, listing, VehicleOut.serialize)


def get_vehicle(session: Session, vin: str) -> dict:
    return VehicleWithDocs.serialize(get_vehicle_row(session, vin))


def get_vehicle_of_owner(session: Session, vin: str, *, party_key: str, user_id: int) -> dict:
    vehicle = get_vehicle_row(session, vin)
    owned = set(session.execute(_citizen_vins(party_key, user_id)).scalars())
    if vin not in owned:
        raise NotFound("Vehicle not found", field="vin")
    return VehicleOut.serialize(vehicle)


def create_vehicle(session: Session, payload: VehicleCreate) -> TransportVehicle:
    if session.get(TransportVehicle, payload.vin) is not None:
        raise Conflict("Vehicle with this VIN already exists", field="vin")

    data = payload.model_dump(exclude={"has_chassis_number"})
    vehicle = TransportVehicle(
        **data,
        chassis_number=_chassis_number(payload.vin, payload.has_chassis_number),
    )
    session.add(vehicle)
    session.flush()
    logger.info("Created vehicle vin=%s", vehicle.vin)
    return vehicle


def update_vehicle(session: Session, vin: str, changes: Mapping[str, Any]) -> TransportVehicle:
    vehicle = get_vehicle_row(session, vin)
    normalized = normalize_chassis(vin, changes)
    check_mutable(session, VEHICLE, vin, vehicle, normalized)

    for field in _PLAIN_FIELDS:
        if field in normalized:
            setattr(vehicle, field, normalized[field])
    if "chassis_number" in normalized:
        vehicle.chassis_number = normalized["chassis_number"]

    session.flush()
    logger.info("Updated vehicle vin=%s fields=%s", vin, sorted(normalized))
    return vehicle


def delete_vehicle(session: Session, vin: str) -> None:
    vehicle = get_vehicle_row(session, vin)
    if has_dependent_documents(session, VEHICLE, vin):
        raise Conflict("Cannot delete vehicle with registration documents")
    if session.query(RegistrationOp.operation_id).filter(RegistrationOp.vin == vin).first() is not None:
        raise Conflict("Cannot delete vehicle with registration operations")
    session.delete(vehicle)
    session.flush()
    logger.info("Deleted vehicle vin=%s", vin)
