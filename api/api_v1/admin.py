from __future__ import annotations

from flask import Blueprint

from api.api_v1.crud import CrudResource, register_crud
from api.auth import protect_blueprint
from api.schemas.common import BADGE_PATTERN, SearchParams
from api.schemas.staff import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentPatch,
    DepartmentPut,
    EmployeeCreate,
    EmployeeOut,
    EmployeePatch,
    EmployeePut,
    EmployeeQuery,
)
from api.schemas.users import UserCreate, UserOut, UserPatch, UserQuery
from api.services import staff_service, users_service
from models.users import ROLE_ADMIN

admin_v1_bp = Blueprint("admin_v1", __name__, url_prefix="/admin")
protect_blueprint(admin_v1_bp, ROLE_ADMIN)

# Unit codes are free-form but never contain a slash.
UNIT_CODE_PATTERN = r"^[^/]{3,50}$"

register_crud(
    admin_v1_bp,
    "/employees",
    CrudResource(
        name="employees",
        key_field="badgeNumber",
        key_attr="badge_number",
        key_pattern=BADGE_PATTERN,
        query_model=EmployeeQuery,
        sort_fields=staff_service.EMPLOYEE_SORT,
        default_sort=staff_service.EMPLOYEE_DEFAULT_SORT,
        tiebreaker=staff_service.EMPLOYEE_TIEBREAKER,
        create_model=EmployeeCreate,
        put_model=EmployeePut,
        patch_model=EmployeePatch,
        out_model=EmployeeOut,
        list_fn=staff_service.list_employees,
        get_fn=staff_service.get_employee,
        create_fn=staff_service.create_employee,
        update_fn=staff_service.update_employee,
        delete_fn=staff_service.delete_employee,
    ),
)

register_crud(
    admin_v1_bp,
    "/departments",
    CrudResource(
        name="departments",
        key_field="unitCode",
        key_attr="unit_code",
        key_pattern=UNIT_CODE_PATTERN,
        query_model=SearchParams,
        sort_fields=staff_service.DEPARTMENT_SORT,
        default_sort=staff_service.DEPARTMENT_DEFAULT_SORT,
        create_model=DepartmentCreate,
        put_model=DepartmentPut,
        patch_model=DepartmentPatch,
        out_model=DepartmentOut,
        list_fn=staff_service.list_departments,
        get_fn=staff_service.get_department,
        create_fn=staff_service.create_department,
        update_fn=staff_service.update_department,
        delete_fn=staff_service.delete_department,
    ),
)

register_crud(
    admin_v1_bp,
    "/users",
    CrudResource(
        name="users",
        key_field="id",
        key_attr="id",
        query_model=UserQuery,
        sort_fields=users_service.USER_SORT,
        default_sort=users_service.USER_DEFAULT_SORT,
        create_model=UserCreate,
        # No separate full-update model for accounts.
        put_model=UserPatch,
        patch_model=UserPatch,
        out_model=UserOut,
        list_fn=users_service.list_users,
        get_fn=users_service.get_user,
        create_fn=users_service.create_user,
        update_fn=users_service.update_user,
        delete_fn=users_service.delete_user,
    ),
)
