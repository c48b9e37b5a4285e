"""Employee workspace: parties, vehicles, documents, operations, work log."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

import db
from api.api_v1.crud import CrudResource, register_crud
from api.auth import protect_blueprint
from api.schemas.common import PASSPORT_PATTERN, REG_NUMBER_PATTERN, TAX_NUMBER_PATTERN, VIN_PATTERN
from api.schemas.parties import (
    LegalEntityCreate,
    LegalEntityOut,
    LegalEntityPatch,
    LegalEntityPut,
    LegalEntityQuery,
    NaturalPersonCreate,
    NaturalPersonOut,
    NaturalPersonPatch,
    NaturalPersonPut,
    NaturalPersonQuery,
    OwnerQuery,
)
from api.schemas.registration_docs import (
    RegistrationDocCreate,
    RegistrationDocOut,
    RegistrationDocPatch,
    RegistrationDocPut,
    RegistrationDocQuery,
)
from api.schemas.staff import (
    RegistrationOpCreate,
    RegistrationOpOut,
    RegistrationOpPatch,
    RegistrationOpQuery,
    WorkCreate,
    WorkOut,
    WorkPatch,
    WorkQuery,
)
from api.schemas.vehicles import VehicleCreate, VehicleOut, VehiclePatch, VehiclePut, VehicleQuery
from api.services import (
    address_registry,
    operations_service,
    parties_service,
    registration_docs_service,
    vehicles_service,
)
from api.services.listing import parse_query, prepare_listing
from logging_utils import get_logger
from models.users import ROLE_ADMIN, ROLE_EMPLOYEE

logger = get_logger(__name__)

employee_v1_bp = Blueprint("employee_v1", __name__, url_prefix="/employee")
protect_blueprint(employee_v1_bp, ROLE_EMPLOYEE, ROLE_ADMIN)

register_crud(
    employee_v1_bp,
    "/natural-persons",
    CrudResource(
        name="natural_persons",
        key_field="passportData",
        key_attr="passport_data",
        key_pattern=PASSPORT_PATTERN,
        query_model=NaturalPersonQuery,
        sort_fields=parties_service.NATURAL_PERSON_SORT,
        default_sort=parties_service.NATURAL_PERSON_DEFAULT_SORT,
        create_model=NaturalPersonCreate,
        put_model=NaturalPersonPut,
        patch_model=NaturalPersonPatch,
        out_model=NaturalPersonOut,
        list_fn=parties_service.list_natural_persons,
        get_fn=parties_service.get_natural_person,
        create_fn=parties_service.create_natural_person,
        update_fn=parties_service.update_natural_person,
        delete_fn=parties_service.delete_natural_person,
    ),
)

register_crud(
    employee_v1_bp,
    "/legal-entities",
    CrudResource(
        name="legal_entities",
        key_field="taxNumber",
        key_attr="tax_number",
        key_pattern=TAX_NUMBER_PATTERN,
        query_model=LegalEntityQuery,
        sort_fields=parties_service.LEGAL_ENTITY_SORT,
        default_sort=parties_service.LEGAL_ENTITY_DEFAULT_SORT,
        create_model=LegalEntityCreate,
        put_model=LegalEntityPut,
        patch_model=LegalEntityPatch,
        out_model=LegalEntityOut,
        list_fn=parties_service.list_legal_entities,
        get_fn=parties_service.get_legal_entity,
        create_fn=parties_service.create_legal_entity,
        update_fn=parties_service.update_legal_entity,
        delete_fn=parties_service.delete_legal_entity,
    ),
)

register_crud(
    employee_v1_bp,
    "/vehicles",
    CrudResource(
        name="vehicles",
        key_field="vin",
        key_attr="vin",
        key_pattern=VIN_PATTERN,
        query_model=VehicleQuery,
        sort_fields=vehicles_service.VEHICLE_SORT,
        default_sort=vehicles_service.VEHICLE_DEFAULT_SORT,
        tiebreaker=vehicles_service.VEHICLE_TIEBREAKER,
        create_model=VehicleCreate,
        put_model=VehiclePut,
        patch_model=VehiclePatch,
        out_model=VehicleOut,
        list_fn=vehicles_service.list_vehicles,
        get_fn=vehicles_service.get_vehicle,
        create_fn=vehicles_service.create_vehicle,
        update_fn=vehicles_service.update_vehicle,
        delete_fn=vehicles_service.delete_vehicle,
    ),
)

register_crud(
    employee_v1_bp,
    "/reg-docs",
    CrudResource(
        name="reg_docs",
        key_field="registrationNumber",
        key_attr="registration_number",
        key_pattern=REG_NUMBER_PATTERN,
        query_model=RegistrationDocQuery,
        sort_fields=registration_docs_service.REGISTRATION_DOC_SORT,
        default_sort=registration_docs_service.REGISTRATION_DOC_DEFAULT_SORT,
        tiebreaker=registration_docs_service.REGISTRATION_DOC_TIEBREAKER,
        create_model=RegistrationDocCreate,
        put_model=RegistrationDocPut,
        patch_model=RegistrationDocPatch,
        out_model=RegistrationDocOut,
        list_fn=registration_docs_service.list_documents,
        get_fn=registration_docs_service.get_document,
        create_fn=registration_docs_service.create_document,
        update_fn=registration_docs_service.update_document,
        delete_fn=registration_docs_service.delete_document,
    ),
)

register_crud(
    employee_v1_bp,
    "/reg-ops",
    CrudResource(
        name="reg_ops",
        key_field="operationId",
        key_attr="operation_id",
        query_model=RegistrationOpQuery,
        sort_fields=operations_service.REGISTRATION_OP_SORT,
        default_sort=operations_service.REGISTRATION_OP_DEFAULT_SORT,
        tiebreaker=operations_service.REGISTRATION_OP_TIEBREAKER,
        create_model=RegistrationOpCreate,
        put_model=RegistrationOpCreate,
        patch_model=RegistrationOpPatch,
        out_model=RegistrationOpOut,
        list_fn=operations_service.list_operations,
        get_fn=operations_service.get_operation,
        create_fn=operations_service.create_operation,
        update_fn=operations_service.update_operation,
        delete_fn=operations_service.delete_operation,
    ),
)

register_crud(
    employee_v1_bp,
    "/works",
    CrudResource(
        name="works",
        key_field="id",
        key_attr="id",
        query_model=WorkQuery,
        sort_fields=operations_service.WORK_SORT,
        default_sort=operations_service.WORK_DEFAULT_SORT,
        tiebreaker=operations_service.WORK_TIEBREAKER,
        create_model=WorkCreate,
        put_model=WorkCreate,
        patch_model=WorkPatch,
        out_model=WorkOut,
        list_fn=operations_service.list_works,
        get_fn=operations_service.get_work,
        create_fn=operations_service.create_work,
        update_fn=operations_service.update_work,
        delete_fn=operations_service.delete_work,
    ),
)


@employee_v1_bp.get("/owners")
def list_owners():
    params = parse_query(OwnerQuery, request.args)
    listing = prepare_listing(
        params,
        sort_fields=parties_service.OWNER_SORT,
        default_sort=parties_service.OWNER_DEFAULT_SORT,
    )
    with db.session_scope() as session:
        return jsonify(parties_service.list_owners(session, params, listing))


@employee_v1_bp.post("/owners/rebuild")
def rebuild_owners():
    """Recompute the owner registry from party and document addresses."""

    with db.session_scope() as session:
        result = address_registry.rebuild_owner_registry(session)
    logger.info("Owner registry rebuild requested via API: %s", result)
    return jsonify(result)
