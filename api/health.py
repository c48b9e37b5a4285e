from flask import Blueprint, jsonify
from sqlalchemy import inspect

import db

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Liveness plus a cheap DB probe: list the tables the schema has."""

    session = db.SessionLocal()
    try:
        tables = sorted(inspect(session.bind).get_table_names())
    finally:
        session.close()

    return jsonify({"status": "ok", "tables": len(tables)})
