import time
import uuid
from typing import Any, Mapping, Optional

from flask import Flask, g, jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

import db
from api.blueprint import create_api_blueprint
from api.errors import ApiException
from api.schemas.api_responses import ApiMeta, fail
from config import Config, configure_logging
from logging_utils import configure_app_logging, get_logger

# Models must be imported before create_all so every table is registered.
import models  # noqa: F401


def init_db() -> None:
    """Initialize DB schema.

    Kept out of default startup path to minimize app spin-up time.
    """

    db.Base.metadata.create_all(bind=db.engine)


def _validation_details(exc: ValidationError) -> dict[str, Any]:
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if not isinstance(part, int)]
    details: dict[str, Any] = {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]}
    if loc:
        details["field"] = loc[-1]
    return details


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)

    # Load config from file, then environment, then explicit overrides.
    app.config.from_pyfile("settings.py")
    app.config.update(Config.from_env())
    if test_config:
        app.config.update(test_config)

    # Configure unified app logging (UTC timestamps, per-file logs, daily rotation)
    configure_app_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger = get_logger(__name__)
    configure_logging(app.logger, app.config.get("LOG_LEVEL", "INFO"))

    # --- slow request logging (opt-in by threshold; default 250ms) ---
    # Set to "0" to disable.
    slow_ms = int(app.config.get("SLOW_REQUEST_MS", 250) or 0)

    @app.before_request
    def _start_timer():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        if slow_ms > 0:
            request.environ["_req_start_ns"] = time.perf_counter_ns()

    @app.after_request
    def _log_slow_requests(resp):
        if slow_ms <= 0:
            return resp

        start_ns = request.environ.get("_req_start_ns")
        if not start_ns:
            return resp

        elapsed_ms = (time.perf_counter_ns() - int(start_ns)) / 1_000_000.0
        if elapsed_ms >= slow_ms:
            # Keep it compact and stable for grepping.
            logger.warning(
                "SLOW_REQUEST ms=%.1f status=%s method=%s path=%s query=%s",
                elapsed_ms,
                getattr(resp, "status_code", "?"),
                request.method,
                request.path,
                request.query_string.decode("utf-8", errors="replace"),
            )
        return resp

    app.register_blueprint(create_api_blueprint(enable_health=app.config.get("ENABLE_HEALTH", True)))

    def _error(status: int, message: str, *, code: str, details: Optional[dict] = None):
        meta = ApiMeta(request_id=g.get("request_id"))
        return jsonify(fail(message, code=code, details=details or None, meta=meta)), status

    # Error handlers
    @app.errorhandler(ApiException)
    def api_error(err: ApiException):
        if err.status_code >= 500:
            logger.error("API error %s: %s", err.code, err.message)
        return _error(err.status_code, err.message, code=err.code, details=err.details)

    @app.errorhandler(ValidationError)
    def validation_error(err: ValidationError):
        details = _validation_details(err)
        field = details.get("field")
        message = f"Invalid value for {field}" if field else "Invalid request"
        first = err.errors(include_url=False)
        if first:
            message = f"{message}: {first[0].get('msg')}"
        return _error(400, message, code="bad_request", details=details)

    @app.errorhandler(IntegrityError)
    def integrity_error(err: IntegrityError):
        logger.warning("Integrity error: %s", getattr(err, "orig", err))
        return _error(409, "Conflict with existing data", code="conflict")

    @app.errorhandler(HTTPException)
    def http_error(err: HTTPException):
        code = "not_found" if err.code == 404 else "http_error"
        return _error(err.code or 500, err.description or err.name, code=code)

    @app.errorhandler(Exception)
    def server_error(err: Exception):
        logger.exception("Unhandled server error")
        return _error(500, "Internal server error", code="internal")

    # Optional: initialize tables on startup only when explicitly requested.
    if app.config.get("INIT_DB_ON_STARTUP"):
        logger.info("INIT_DB_ON_STARTUP=1; initializing database schema")
        init_db()

    return app


# NOTE: Do not instantiate the Flask app at import time.
# Tests patch the DB engine/sessionmaker before calling create_app().
app: Flask | None = None


if __name__ == "__main__":
    app = create_app()
    get_logger(__name__).info("Starting Flask app")
    app.run(debug=True, use_reloader=False)
