"""Stock replenishment orders.

Submitting an order only records it. Stock rows grow when the order is
received, through :func:`sales_service.increment`.
"""
import logging
from datetime import date, datetime, timezone

from storefront.errors import (
    InventoryInconsistencyWarning,
    ReferentialError,
    Result,
    StorefrontError,
    ValidationError,
)
from storefront.models.audit_log import AuditLog
from storefront.services import sales_service
from storefront.services.record_store import NOT_FOUND, store, translate_error

logger = logging.getLogger(__name__)

DEFAULT_NOTES = "Stock replenishment order"


def _order_error(result, action, order_id=None):
    return Result.failure(
        translate_error(result, action, entity="Stock order", record_id=order_id)
    )


def _merge_items(items):
    """Sum quantities of repeated (product, attribute) lines, keeping order."""
    merged = {}
    for item in items:
        product_id = item.get("product_id")
        attribute_id = item.get("attribute_id") or None
        quantity = item.get("quantity")
        if product_id in (None, ""):
            raise ValidationError("Every line needs a product")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        key = (product_id, attribute_id)
        merged[key] = merged.get(key, 0) + quantity
    return merged


def record_stock_order(items, notes=None):
    """Save a pending order with a name snapshot of every line."""
    if not items:
        return Result.failure(ValidationError("Add at least one product to the order"))
    try:
        merged = _merge_items(items)
    except ValidationError as e:
        return Result.failure(e)

    lines = []
    for (product_id, attribute_id), quantity in merged.items():
        product = store.select_one("products", product_id)
        if not product.ok:
            return Result.failure(
                translate_error(product, "fetch product", entity="Product", record_id=product_id)
            )
        line = {
            "product_id": product_id,
            "product_name": product.data.name,
            "quantity": quantity,
            "attribute_id": None,
            "attribute_name": None,
            "attribute_value": None,
        }
        if attribute_id is not None:
            attribute = store.select_one("product_attributes", attribute_id)
            if not attribute.ok:
                if attribute.code == NOT_FOUND:
                    return Result.failure(
                        ReferentialError(
                            "The referenced attribute does not exist", reference="attribute"
                        )
                    )
                return Result.failure(translate_error(attribute, "fetch product attribute"))
            line.update(
                attribute_id=attribute.data.id,
                attribute_name=attribute.data.name,
                attribute_value=attribute.data.value,
            )
        lines.append(line)

    order = store.insert(
        "stock_orders",
        {
            "order_date": date.today(),
            "status": "pending",
            "notes": (notes or "").strip() or DEFAULT_NOTES,
        },
    )
    if not order.ok:
        return _order_error(order, "create stock order")

    for line in lines:
        saved = store.insert("stock_order_items", dict(line, stock_order_id=order.data.id))
        if not saved.ok:
            # Drop the half-written order so it cannot be received later
            dropped = store.delete("stock_orders", order.data.id)
            if not dropped.ok:
                logger.warning(
                    "Stock order %s has missing lines and could not be removed: %s",
                    order.data.id,
                    dropped.error,
                )
            return _order_error(saved, "create stock order")

    logger.info("Stock order %s created with %d lines", order.data.id, len(lines))
    return get_stock_order(order.data.id)


def get_stock_order(order_id):
    result = store.select_one("stock_orders", order_id)
    if not result.ok:
        return _order_error(result, "fetch stock order", order_id)
    return Result.success(result.data)


def list_stock_orders(status=None):
    filters = {"status": status} if status else None
    result = store.select("stock_orders", filters=filters, order=["-created_at", "-id"])
    if not result.ok:
        return _order_error(result, "fetch stock orders")
    return Result.success(result.data)


def receive_stock_order(order_id, admin_id=None):
    """Mark a pending order received and add its units to stock.

    Receiving an order twice changes nothing the second time. Lines without
    an option, and lines whose restock fails, are reported as warnings; the
    order is still marked received.
    """
    order = get_stock_order(order_id)
    if not order.ok:
        return order
    if order.data.status == "received":
        logger.info("Stock order %s already received, skipping", order_id)
        return Result.success(order.data)
    if order.data.status != "pending":
        return Result.failure(
            ValidationError(f"Stock order {order_id} is {order.data.status}")
        )

    items = store.select("stock_order_items", filters={"stock_order_id": order_id}, order=["id"])
    if not items.ok:
        return _order_error(items, "fetch stock order items", order_id)

    warnings = []
    for item in items.data:
        if item.product_id is None:
            warnings.append(
                InventoryInconsistencyWarning(
                    f"{item.product_name} no longer exists; {item.quantity} units not added"
                )
            )
            continue
        if item.attribute_id is None:
            warnings.append(
                InventoryInconsistencyWarning(
                    f"{item.product_name} has no option; {item.quantity} units not added",
                    product_id=item.product_id,
                )
            )
            continue
        restocked = sales_service.increment(item.product_id, item.attribute_id, item.quantity)
        warnings.extend(restocked.warnings)
        if not restocked.ok:
            warnings.append(
                InventoryInconsistencyWarning(
                    f"{item.product_name} ({item.attribute_name}: {item.attribute_value}): "
                    f"{restocked.message}",
                    product_id=item.product_id,
                    attribute_id=item.attribute_id,
                )
            )

    for warning in warnings:
        logger.warning("Stock order %s: %s", order_id, warning.message)

    updated = store.update(
        "stock_orders",
        order_id,
        {"status": "received", "received_at": datetime.now(timezone.utc)},
    )
    if not updated.ok:
        # Units were added; the caller must not receive this order again blindly
        return Result.failure(
            StorefrontError(f"Stock order {order_id} was restocked but not marked received"),
            warnings=warnings,
        )

    AuditLog.record(
        "RECEIVE_STOCK_ORDER",
        admin_id=admin_id,
        payload={"stock_order_id": order_id, "warnings": len(warnings)},
    )
    return Result.success(updated.data, warnings=warnings)


def cancel_stock_order(order_id, admin_id=None):
    order = get_stock_order(order_id)
    if not order.ok:
        return order
    if order.data.status != "pending":
        return Result.failure(
            ValidationError(f"Only pending orders can be cancelled; {order_id} is {order.data.status}")
        )
    updated = store.update("stock_orders", order_id, {"status": "cancelled"})
    if not updated.ok:
        return _order_error(updated, "cancel stock order", order_id)
    AuditLog.record(
        "CANCEL_STOCK_ORDER", admin_id=admin_id, payload={"stock_order_id": order_id}
    )
    return Result.success(updated.data)
