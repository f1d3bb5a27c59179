"""Product-level stock: attribute sets, aggregate stock and buyer options."""
import logging
from urllib.parse import quote

from storefront.errors import Result, ValidationError
from storefront.models.audit_log import AuditLog
from storefront.services import attribute_service, inventory_service
from storefront.services.record_store import store, translate_error
from storefront.services.variant_data import payload_attribute_id

logger = logging.getLogger(__name__)


def get_product(product_id):
    result = store.select_one("products", product_id)
    if not result.ok:
        return Result.failure(
            translate_error(result, "fetch product", entity="Product", record_id=product_id)
        )
    return Result.success(result.data)


def list_products(active_only=True, category_id=None, subcategory_id=None):
    filters = {"is_active": True} if active_only else {}
    if category_id is not None:
        filters["category_id"] = category_id
    if subcategory_id is not None:
        filters["subcategory_id"] = subcategory_id
    result = store.select("products", filters=filters, order=["-created_at", "-id"])
    if not result.ok:
        return Result.failure(translate_error(result, "fetch products"))
    return Result.success(result.data)


def sync_aggregate_stock(product_id):
    """Recompute ``Product.stock`` as the sum of its active stock rows.

    Products without attributes keep whatever stock they have.
    """
    product = get_product(product_id)
    if not product.ok:
        return product
    if not product.data.attribute_ids:
        return Result.success(product.data.stock)

    rows = inventory_service.get_by_product(product_id)
    if not rows.ok:
        return rows
    total = sum(row.quantity for row in rows.data if row.is_active)
    if total != product.data.stock:
        updated = store.update("products", product_id, {"stock": total})
        if not updated.ok:
            return Result.failure(
                translate_error(
                    updated, "update product stock", entity="Product", record_id=product_id
                )
            )
        logger.info(
            "Product %s aggregate stock %s -> %s", product_id, product.data.stock, total
        )
    return Result.success(total)


def _normalize_stocks(attribute_stocks):
    """{attribute_id: quantity} with int ids, keeping the given order."""
    normalized = {}
    for raw_id, quantity in attribute_stocks.items():
        try:
            attribute_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid option id: {raw_id}") from None
        normalized[attribute_id] = quantity
    return normalized


def set_product_attributes(product_id, attribute_stocks, admin_id=None):
    """Replace the options a product offers together with their stock.

    ``attribute_stocks`` maps attribute id to on-hand quantity. The product's
    ``attribute_ids`` become exactly those ids, the ledger is reconciled to the
    quantities, rows of options no longer offered are deactivated (not
    deleted) and the aggregate stock is recomputed.
    """
    try:
        stocks = _normalize_stocks(attribute_stocks)
    except ValidationError as e:
        return Result.failure(e)

    product = get_product(product_id)
    if not product.ok:
        return product

    for attribute_id in stocks:
        attribute = attribute_service.get_attribute(attribute_id)
        if not attribute.ok:
            return attribute
        subcategory_id = product.data.subcategory_id
        if subcategory_id is not None and attribute.data.subcategory_id != subcategory_id:
            return Result.failure(
                ValidationError(
                    f"Option {attribute.data.name}: {attribute.data.value} does not "
                    f"belong to the product's subcategory"
                )
            )

    updated = store.update("products", product_id, {"attribute_ids": list(stocks)})
    if not updated.ok:
        return Result.failure(
            translate_error(updated, "update product", entity="Product", record_id=product_id)
        )

    reconciled = inventory_service.bulk_reconcile(
        product_id,
        [{"attribute_id": a, "quantity": q} for a, q in stocks.items()],
    )
    warnings = list(reconciled.warnings)

    rows = inventory_service.get_by_product(product_id)
    if rows.ok:
        for row in rows.data:
            if row.is_active and payload_attribute_id(row.variant_data) not in stocks:
                deactivated = inventory_service.update_variant(row.id, {"is_active": False})
                if deactivated.ok:
                    logger.info(
                        "Deactivated stock row %s of product %s", row.id, product_id
                    )
                else:
                    logger.warning(
                        "Could not deactivate stock row %s: %s", row.id, deactivated.message
                    )
    else:
        logger.warning("Could not read stock rows of product %s: %s", product_id, rows.message)

    synced = sync_aggregate_stock(product_id)
    if not synced.ok:
        logger.warning("Aggregate stock of product %s not synced: %s", product_id, synced.message)

    AuditLog.record(
        "RECONCILE_STOCK",
        admin_id=admin_id,
        product_id=product_id,
        payload={"stocks": {str(a): q for a, q in stocks.items()}},
    )

    if not reconciled.ok:
        return Result.failure(reconciled.error, warnings=warnings)
    return get_product(product_id)


def product_options(product_id):
    """Active options a product offers, with how many units can be sold."""
    product = get_product(product_id)
    if not product.ok:
        return product
    offered = product.data.attribute_ids or []
    if not offered:
        return Result.success([])

    attributes = attribute_service.list_attributes()
    if not attributes.ok:
        return attributes
    stock = inventory_service.get_by_product(product_id)
    if not stock.ok:
        return stock

    available = {}
    for row in stock.data:
        attribute_id = payload_attribute_id(row.variant_data)
        if row.is_active and attribute_id is not None and attribute_id not in available:
            available[attribute_id] = max(0, row.quantity - row.reserved_quantity)

    options = []
    for attribute in attributes.data:
        if attribute.id in offered and attribute.is_active:
            options.append(
                {
                    "id": attribute.id,
                    "name": attribute.name,
                    "type": attribute.type,
                    "value": attribute.value,
                    "color_hex": attribute.color_hex,
                    "available": available.get(attribute.id, 0),
                }
            )
    return Result.success(options)


def build_whatsapp_link(phone, store_name, product_name, option_text, page_url):
    """Build WhatsApp deep link with pre-filled order message."""
    message = (
        f"Hi {store_name}, I would like to order {product_name}.\n"
        f"Option: {option_text}\n"
        f"Link: {page_url}"
    )
    return f"https://wa.me/{phone}?text={quote(message)}"


def get_stats():
    """Counts for the /stats CLI command."""
    products = store.select("products")
    variants = store.select("product_variant_inventory")
    orders = store.select("stock_orders", filters={"status": "pending"})
    for result in (products, variants, orders):
        if not result.ok:
            return Result.failure(translate_error(result, "fetch stats"))
    return Result.success(
        {
            "products": len(products.data),
            "active_products": sum(1 for p in products.data if p.is_active),
            "stock_rows": len(variants.data),
            "units_on_hand": sum(v.quantity for v in variants.data if v.is_active),
            "pending_stock_orders": len(orders.data),
        }
    )
