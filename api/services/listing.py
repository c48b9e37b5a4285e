"""Pagination, filtering and sorting shared by every list endpoint.

Flow for a list route:

    params = parse_query(VehicleQuery, request.args)        # 400 on bad input
    listing = prepare_listing(params, sort_fields=..., default_sort=...)
    with db.session_scope() as session:
        return paginate(build_query(session, params), listing, serialize)

`prepare_listing` validates the sort field/order against an allow-list and
resolves page bounds before any session is opened.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Type, TypeVar

from flask import current_app, has_app_context
from sqlalchemy.orm import Query

from api.errors import BadRequest
from api.schemas.api_responses import page
from api.schemas.common import ListParams

P = TypeVar("P", bound=ListParams)

SORT_ORDERS = ("ASC", "DESC")

_FALLBACK_DEFAULT_PAGE_SIZE = 10
_FALLBACK_MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Listing:
    page: int
    limit: int
    order_by: tuple[Any, ...]

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_query(model_cls: Type[P], args: Mapping[str, Any]) -> P:
    """Validate query-string args (werkzeug MultiDict or plain dict)."""

    raw = args.to_dict() if hasattr(args, "to_dict") else dict(args)
    # Empty params are treated as absent (`?vin=&page=2`).
    return model_cls.model_validate({k: v for k, v in raw.items() if v != ""})


def _page_bounds() -> tuple[int, int]:
    if not has_app_context():
        return _FALLBACK_DEFAULT_PAGE_SIZE, _FALLBACK_MAX_PAGE_SIZE
    cfg = current_app.config
    return (
        int(cfg.get("DEFAULT_PAGE_SIZE", _FALLBACK_DEFAULT_PAGE_SIZE)),
        int(cfg.get("MAX_PAGE_SIZE", _FALLBACK_MAX_PAGE_SIZE)),
    )


def prepare_listing(
    params: ListParams,
    *,
    sort_fields: Mapping[str, Any],
    default_sort: tuple[str, str],
    tiebreaker: Sequence[Any] = (),
) -> Listing:
    """Resolve limit and ordering; unknown sort field/order is a BadRequest.

    `sort_fields` maps the public (camelCase) field name to a column.
    `tiebreaker` columns are appended so pages are stable.
    """

    default_size, max_size = _page_bounds()
    limit = params.limit if params.limit is not None else default_size
    if limit > max_size:
        raise BadRequest(f"limit must be less than or equal to {max_size}", field="limit")

    sort_by = params.sort_by or default_sort[0]
    if sort_by not in sort_fields:
        raise BadRequest(
            f"Unknown sort field: {sort_by}. Allowed: {', '.join(sorted(sort_fields))}",
            field="sortBy",
        )

    sort_order = (params.sort_order or default_sort[1]).upper()
    if sort_order not in SORT_ORDERS:
        raise BadRequest("sortOrder must be ASC or DESC", field="sortOrder")

    column = sort_fields[sort_by]
    primary = column.asc() if sort_order == "ASC" else column.desc()
    return Listing(page=params.page, limit=limit, order_by=(primary, *tiebreaker))


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column, term: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""

    return column.ilike(f"%{escape_like(term)}%", escape="\\")


def paginate(
    query: Query,
    listing: Listing,
    serialize: Callable[[Any], dict],
) -> dict[str, Any]:
    """Run a count + page query and build `{total, pages, currentPage, data}`."""

    total = query.order_by(None).count()
    rows = query.order_by(*listing.order_by).offset(listing.offset).limit(listing.limit).all()
    return page(
        [serialize(r) for r in rows],
        total=total,
        page_number=listing.page,
        limit=listing.limit,
    )
