from __future__ import annotations

import math
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiError(BaseModel):
    """Standard error payload for API responses."""

    code: str = Field(default="error")
    message: str
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")


class ApiMeta(BaseModel):
    """Optional metadata attached to responses."""

    request_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope used for error responses."""

    ok: bool
    data: Optional[T] = None
    error: Optional[ApiError] = None
    meta: ApiMeta = Field(default_factory=ApiMeta)

    model_config = ConfigDict(extra="ignore")


class ListPage(BaseModel, Generic[T]):
    """Page of a list endpoint: `{total, pages, currentPage, data}`."""

    total: int
    pages: int
    current_page: int = Field(serialization_alias="currentPage")
    data: List[T]


def page(items: List[Any], *, total: int, page_number: int, limit: int) -> Dict[str, Any]:
    """Create a list-page payload as a JSON-serializable dict."""

    payload = ListPage[Any](
        total=total,
        pages=math.ceil(total / limit) if limit else 0,
        current_page=page_number,
        data=items,
    )
    return payload.model_dump(mode="json", by_alias=True)


def fail(
    message: str,
    *,
    code: str = "error",
    details: Optional[Dict[str, Any]] = None,
    meta: Optional[ApiMeta] = None,
) -> Dict[str, Any]:
    """Create an error envelope as a JSON-serializable dict."""

    payload = ApiResponse[None](
        ok=False,
        data=None,
        error=ApiError(code=code, message=message, details=details),
        meta=meta or ApiMeta(),
    )
    return payload.model_dump(mode="json")
