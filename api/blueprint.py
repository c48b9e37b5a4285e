from flask import Blueprint

from api.api_v1.blueprint import create_api_v1_blueprint
from api.health import health_bp


def create_api_blueprint(*, enable_health: bool = True) -> Blueprint:
    """Create the main API blueprint and register sub-blueprints.

    Keep this as the single registration point to avoid double-registering routes.
    """
    api_bp = Blueprint("api", __name__)

    if enable_health:
        api_bp.register_blueprint(health_bp)

    # Versioned API
    api_bp.register_blueprint(create_api_v1_blueprint())

    return api_bp
