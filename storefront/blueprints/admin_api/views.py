"""Admin JSON API over the stock-accounting services."""
import hmac
import logging
from flask import current_app, request
from storefront.blueprints.admin_api import admin_api_bp
from storefront.errors import (
    DuplicateError,
    NotFoundError,
    ReferentialError,
    TransportError,
    ValidationError,
)
from storefront.serializers import (
    attribute_to_dict,
    product_to_dict,
    sale_to_dict,
    stock_order_to_dict,
    variant_to_dict,
)
from storefront.services import (
    attribute_service,
    inventory_service,
    product_service,
    sales_service,
    stock_order_service,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateError, 409),
    (ReferentialError, 422),
    (TransportError, 503),
)


@admin_api_bp.before_request
def check_admin_token():
    """Require X-Admin-Token when ADMIN_API_TOKEN is configured."""
    expected = current_app.config["ADMIN_API_TOKEN"]
    if not expected:
        return None
    provided = request.headers.get("X-Admin-Token", "")
    if not hmac.compare_digest(provided, expected):
        logger.warning("Rejected admin API call to %s", request.path)
        return {"error": "Forbidden"}, 403
    return None


def respond(result, serialize=None, status=200):
    """Turn a service Result into a JSON response."""
    warnings = result.warning_messages
    if result.ok:
        data = result.data
        if serialize is not None:
            if isinstance(data, list):
                data = [serialize(item) for item in data]
            else:
                data = serialize(data)
        return {"data": data, "warnings": warnings}, status

    code = 500
    for error_cls, error_status in STATUS_BY_ERROR:
        if isinstance(result.error, error_cls):
            code = error_status
            break
    return {"error": result.message, "warnings": warnings}, code


def _body():
    return request.get_json(silent=True) or {}


def _optional_int(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

@admin_api_bp.route("/attributes", methods=["GET"])
def list_attributes():
    subcategory_id = request.args.get("subcategory_id", type=int)
    if subcategory_id is not None:
        return respond(attribute_service.list_by_subcategory(subcategory_id), attribute_to_dict)
    return respond(attribute_service.list_attributes(), attribute_to_dict)


@admin_api_bp.route("/attributes", methods=["POST"])
def create_attribute():
    data = _body()
    data["subcategory_id"] = _optional_int(data.get("subcategory_id"))
    return respond(attribute_service.create_attribute(data), attribute_to_dict, status=201)


@admin_api_bp.route("/attributes/<int:attribute_id>", methods=["GET"])
def get_attribute(attribute_id):
    return respond(attribute_service.get_attribute(attribute_id), attribute_to_dict)


@admin_api_bp.route("/attributes/<int:attribute_id>", methods=["PATCH"])
def update_attribute(attribute_id):
    patch = _body()
    if "subcategory_id" in patch:
        patch["subcategory_id"] = _optional_int(patch["subcategory_id"])
    return respond(attribute_service.update_attribute(attribute_id, patch), attribute_to_dict)


@admin_api_bp.route("/attributes/<int:attribute_id>", methods=["DELETE"])
def delete_attribute(attribute_id):
    return respond(attribute_service.delete_attribute(attribute_id))


@admin_api_bp.route("/attributes/<int:attribute_id>/toggle", methods=["POST"])
def toggle_attribute(attribute_id):
    return respond(attribute_service.toggle_active(attribute_id), attribute_to_dict)


@admin_api_bp.route("/attributes/orphaned-stock", methods=["GET"])
def orphaned_stock():
    return respond(attribute_service.find_orphaned_variants(), variant_to_dict)


# ---------------------------------------------------------------------------
# Variant inventory
# ---------------------------------------------------------------------------

@admin_api_bp.route("/products/<int:product_id>/variants", methods=["GET"])
def list_variants(product_id):
    return respond(inventory_service.get_by_product(product_id), variant_to_dict)


@admin_api_bp.route("/products/<int:product_id>/variants", methods=["POST"])
def create_variant(product_id):
    data = _body()
    row = {
        "product_id": product_id,
        "variant_data": {"attribute_id": _optional_int(data.get("attribute_id"))},
        "quantity": data.get("quantity", 0),
        "reserved_quantity": data.get("reserved_quantity", 0),
    }
    return respond(inventory_service.create_variant(row), variant_to_dict, status=201)


@admin_api_bp.route("/products/<int:product_id>/variants", methods=["PUT"])
def reconcile_variants(product_id):
    updates = _body().get("updates")
    if isinstance(updates, list):
        updates = [
            {
                "attribute_id": _optional_int(u.get("attribute_id")),
                "quantity": u.get("quantity"),
            }
            for u in updates
            if isinstance(u, dict)
        ]
    return respond(inventory_service.bulk_reconcile(product_id, updates), variant_to_dict)


@admin_api_bp.route("/variants/<int:variant_id>", methods=["PATCH"])
def update_variant(variant_id):
    return respond(inventory_service.update_variant(variant_id, _body()), variant_to_dict)


@admin_api_bp.route("/variants/<int:variant_id>", methods=["DELETE"])
def delete_variant(variant_id):
    return respond(inventory_service.delete_variant(variant_id))


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@admin_api_bp.route("/products/<int:product_id>/attributes", methods=["PUT"])
def set_product_attributes(product_id):
    stocks = _body().get("stocks")
    if not isinstance(stocks, dict):
        return {"error": "stocks must map option ids to quantities", "warnings": []}, 400
    return respond(
        product_service.set_product_attributes(product_id, stocks), product_to_dict
    )


@admin_api_bp.route("/products/<int:product_id>/stock/sync", methods=["POST"])
def sync_stock(product_id):
    return respond(product_service.sync_aggregate_stock(product_id))


@admin_api_bp.route("/products/<int:product_id>/restock", methods=["POST"])
def restock(product_id):
    data = _body()
    return respond(
        sales_service.increment(
            product_id, _optional_int(data.get("attribute_id")), data.get("quantity")
        ),
        variant_to_dict,
    )


# ---------------------------------------------------------------------------
# Sales and stock orders
# ---------------------------------------------------------------------------

@admin_api_bp.route("/sales", methods=["POST"])
def record_sale():
    data = _body()
    result = sales_service.record_sale(
        product_id=_optional_int(data.get("product_id")),
        attribute_id=_optional_int(data.get("attribute_id")),
        quantity=data.get("quantity"),
        unit_price=data.get("unit_price"),
    )
    return respond(result, sale_to_dict, status=201)


@admin_api_bp.route("/sales", methods=["GET"])
def list_sales():
    product_id = request.args.get("product_id", type=int)
    return respond(sales_service.list_sales(product_id), sale_to_dict)


@admin_api_bp.route("/stock-orders", methods=["POST"])
def create_stock_order():
    data = _body()
    items = data.get("items")
    if not isinstance(items, list):
        items = None
    else:
        items = [
            {
                "product_id": _optional_int(i.get("product_id")),
                "attribute_id": _optional_int(i.get("attribute_id")),
                "quantity": i.get("quantity"),
            }
            for i in items
            if isinstance(i, dict)
        ]
    result = stock_order_service.record_stock_order(items, notes=data.get("notes"))
    return respond(result, stock_order_to_dict, status=201)


@admin_api_bp.route("/stock-orders", methods=["GET"])
def list_stock_orders():
    status = request.args.get("status")
    return respond(stock_order_service.list_stock_orders(status), stock_order_to_dict)


@admin_api_bp.route("/stock-orders/<int:order_id>/receive", methods=["POST"])
def receive_stock_order(order_id):
    return respond(stock_order_service.receive_stock_order(order_id), stock_order_to_dict)


@admin_api_bp.route("/stock-orders/<int:order_id>/cancel", methods=["POST"])
def cancel_stock_order(order_id):
    return respond(stock_order_service.cancel_stock_order(order_id), stock_order_to_dict)
