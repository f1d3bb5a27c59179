from flask import Blueprint

admin_api_bp = Blueprint("admin_api", __name__)

from storefront.blueprints.admin_api import views  # noqa: F401, E402
