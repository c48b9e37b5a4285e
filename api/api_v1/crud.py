"""Generic CRUD routes.

`register_crud(bp, "/vehicles", resource)` adds:

    GET    /vehicles           list (filters, page, limit, sortBy, sortOrder)
    GET    /vehicles/<key>     detail
    POST   /vehicles           create -> 201
    PUT    /vehicles/<key>     full update
    PATCH  /vehicles/<key>     partial update (only the fields sent)
    DELETE /vehicles/<key>     -> 204

Request validation (path key, query string, body) happens before a session is
opened; each write runs in one `db.session_scope()` transaction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Type

from flask import Blueprint, jsonify, request
from pydantic import BaseModel

import db
from api.errors import BadRequest
from api.schemas.common import OutModel
from api.services.listing import parse_query, prepare_listing


@dataclass(frozen=True)
class CrudResource:
    name: str
    # Public (camelCase) and Python names of the natural key.
    key_field: str
    key_attr: str
    query_model: Type[BaseModel]
    sort_fields: dict[str, Any]
    default_sort: tuple[str, str]
    create_model: Type[BaseModel]
    put_model: Type[BaseModel]
    patch_model: Type[BaseModel]
    out_model: Type[OutModel]
    list_fn: Callable[..., dict]
    get_fn: Callable[..., dict]
    create_fn: Callable[..., Any]
    update_fn: Callable[..., Any]
    delete_fn: Callable[..., None]
    # None for integer keys (validated by the URL converter).
    key_pattern: Optional[str] = None
    tiebreaker: Sequence[Any] = field(default_factory=tuple)

    @property
    def converter(self) -> str:
        return "string" if self.key_pattern else "int"


def parse_body(model_cls: Type[BaseModel]) -> Any:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return model_cls.model_validate(data)


def check_key(value: Any, pattern: Optional[str], field_name: str) -> None:
    if pattern and not re.fullmatch(pattern, str(value)):
        raise BadRequest(f"Invalid {field_name} format", field=field_name)


def put_changes(payload: BaseModel, key_attr: str) -> dict[str, Any]:
    """Fields of a PUT body; an omitted or null key means "keep the current one"."""

    changes = payload.model_dump(exclude_unset=True)
    if changes.get(key_attr) is None:
        changes.pop(key_attr, None)
    return changes


def no_content():
    return "", 204


def register_crud(bp: Blueprint, rule: str, resource: CrudResource) -> None:
    item_rule = f"{rule}/<{resource.converter}:key>"
    name = resource.name

    def list_view():
        params = parse_query(resource.query_model, request.args)
        listing = prepare_listing(
            params,
            sort_fields=resource.sort_fields,
            default_sort=resource.default_sort,
            tiebreaker=resource.tiebreaker,
        )
        with db.session_scope() as session:
            return jsonify(resource.list_fn(session, params, listing))

    def get_view(key):
        check_key(key, resource.key_pattern, resource.key_field)
        with db.session_scope() as session:
            return jsonify(resource.get_fn(session, key))

    def create_view():
        payload = parse_body(resource.create_model)
        with db.session_scope() as session:
            row = resource.create_fn(session, payload)
            body = resource.out_model.serialize(row)
        return jsonify(body), 201

    def _update(key, changes: dict[str, Any]):
        with db.session_scope() as session:
            row = resource.update_fn(session, key, changes)
            body = resource.out_model.serialize(row)
        return jsonify(body)

    def put_view(key):
        check_key(key, resource.key_pattern, resource.key_field)
        payload = parse_body(resource.put_model)
        return _update(key, put_changes(payload, resource.key_attr))

    def patch_view(key):
        check_key(key, resource.key_pattern, resource.key_field)
        payload = parse_body(resource.patch_model)
        return _update(key, payload.changes())

    def delete_view(key):
        check_key(key, resource.key_pattern, resource.key_field)
        with db.session_scope() as session:
            resource.delete_fn(session, key)
        return no_content()

    bp.add_url_rule(rule, f"{name}_list", list_view, methods=["GET"])
    bp.add_url_rule(rule, f"{name}_create", create_view, methods=["POST"])
    bp.add_url_rule(item_rule, f"{name}_get", get_view, methods=["GET"])
    bp.add_url_rule(item_rule, f"{name}_put", put_view, methods=["PUT"])
    bp.add_url_rule(item_rule, f"{name}_patch", patch_view, methods=["PATCH"])
    bp.add_url_rule(item_rule, f"{name}_delete", delete_view, methods=["DELETE"])
