"""API error taxonomy.

Services raise these; `app.create_app` turns them into JSON error envelopes
(see `api.schemas.api_responses.fail`). Session scopes roll back before the
exception reaches the handler.
"""

from __future__ import annotations

from typing import Any


class ApiException(Exception):
    status_code = 500
    code = "internal"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = dict(details or {})
        if field is not None:
            self.details.setdefault("field", field)


class BadRequest(ApiException):
    status_code = 400
    code = "bad_request"


class Unauthorized(ApiException):
    status_code = 401
    code = "unauthorized"


class Forbidden(ApiException):
    status_code = 403
    code = "forbidden"


class NotFound(ApiException):
    status_code = 404
    code = "not_found"


class Conflict(ApiException):
    status_code = 409
    code = "conflict"
