from flask import Blueprint

from api.api_v1.admin import admin_v1_bp
from api.api_v1.auth import auth_v1_bp
from api.api_v1.employee import employee_v1_bp
from api.api_v1.me import me_v1_bp


def create_api_v1_blueprint() -> Blueprint:
    """Create the /api/v1 blueprint and register sub-blueprints."""

    v1_bp = Blueprint("api_v1", __name__, url_prefix="/api/v1")
    v1_bp.register_blueprint(auth_v1_bp)
    v1_bp.register_blueprint(admin_v1_bp)
    v1_bp.register_blueprint(employee_v1_bp)
    v1_bp.register_blueprint(me_v1_bp)
    return v1_bp
