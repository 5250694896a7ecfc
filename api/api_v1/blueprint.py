from flask import Blueprint

from api.api_v1.form4 import form4_v1_bp
from api.api_v1.watchlist import watchlist_v1_bp


def create_api_v1_blueprint(*, enable_watchlist: bool = True) -> Blueprint:
    """Create the /api/v1 blueprint and register sub-blueprints."""

    v1_bp = Blueprint("api_v1", __name__, url_prefix="/api/v1")
    v1_bp.register_blueprint(form4_v1_bp)
    if enable_watchlist:
        v1_bp.register_blueprint(watchlist_v1_bp)
    return v1_bp
