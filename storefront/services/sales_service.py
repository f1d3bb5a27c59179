"""Sale recording and restocking against the variant ledger.

A sale always writes its ``product_sales`` row first. Stock bookkeeping comes
after and can only add warnings to the result: a sale is never lost or
rolled back because its stock row could not be found or updated.
"""
import logging

from storefront.errors import (
    InventoryInconsistencyWarning,
    ReferentialError,
    Result,
    ValidationError,
)
from storefront.services import inventory_service
from storefront.services.record_store import store, translate_error
from storefront.services.variant_data import VariantData

logger = logging.getLogger(__name__)


def _positive_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be greater than 0")
    return quantity


def _get_product(product_id):
    result = store.select_one("products", product_id)
    if not result.ok:
        return Result.failure(
            translate_error(result, "fetch product", entity="Product", record_id=product_id)
        )
    return Result.success(result.data)


def _get_attribute(attribute_id):
    """Attribute record or None; only needed for the legacy name/value match."""
    result = store.select_one("product_attributes", attribute_id)
    return result.data if result.ok else None


def record_sale(product_id, attribute_id, quantity, unit_price=None):
    """Log a sale and take the units off the matching stock row.

    ``unit_price`` is in cents and defaults to the product's current price.
    Without ``attribute_id`` only the sale is written; product-level stock is
    not touched.
    """
    try:
        if product_id in (None, ""):
            raise ValidationError("A product is required")
        _positive_quantity(quantity)
        if unit_price is not None and (
            isinstance(unit_price, bool) or not isinstance(unit_price, int) or unit_price < 0
        ):
            raise ValidationError("Unit price must be a non-negative amount in cents")
    except ValidationError as e:
        return Result.failure(e)

    product = _get_product(product_id)
    if not product.ok:
        return product
    if unit_price is None:
        unit_price = product.data.price

    sale = store.insert(
        "product_sales",
        {
            "product_id": product_id,
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": unit_price * quantity,
            "attribute_id": attribute_id,
        },
    )
    if not sale.ok:
        return Result.failure(
            translate_error(
                sale,
                "record sale",
                reference_message="The referenced product does not exist",
                reference="product",
            )
        )
    logger.info(
        "Sale %s: %dx product %s option %s at %d",
        sale.data.id,
        quantity,
        product_id,
        attribute_id,
        unit_price,
    )

    if attribute_id is None:
        logger.info("Sale %s has no option; stock rows left unchanged", sale.data.id)
        return Result.success(sale.data)

    warnings = _deduct(product_id, attribute_id, quantity)
    return Result.success(sale.data, warnings=warnings)


def _deduct(product_id, attribute_id, quantity):
    rows = inventory_service.get_by_product(product_id)
    if not rows.ok:
        return [_warn(product_id, attribute_id, f"stock rows could not be read: {rows.message}")]

    row, warnings = inventory_service.find_variant(
        rows.data, attribute_id, _get_attribute(attribute_id)
    )
    if row is None:
        warnings.append(
            _warn(product_id, attribute_id, "no stock row found; stock was not deducted")
        )
        return warnings

    updated = inventory_service.apply_delta(row.id, -quantity)
    if not updated.ok:
        warnings.append(
            _warn(product_id, attribute_id, f"stock was not deducted: {updated.message}")
        )
    return warnings


def _warn(product_id, attribute_id, reason):
    logger.warning("Product %s option %s: %s", product_id, attribute_id, reason)
    return InventoryInconsistencyWarning(
        f"Product {product_id} option {attribute_id}: {reason}",
        product_id=product_id,
        attribute_id=attribute_id,
    )


def increment(product_id, attribute_id, quantity):
    """Add received units to the stock row of (product, attribute).

    The row is created with reserved_quantity 0 when the pair has none yet.
    """
    try:
        if product_id in (None, ""):
            raise ValidationError("A product is required")
        _positive_quantity(quantity)
        if attribute_id in (None, ""):
            raise ValidationError("An option is required to restock")
    except ValidationError as e:
        return Result.failure(e)

    rows = inventory_service.get_by_product(product_id)
    if not rows.ok:
        return rows
    attribute = _get_attribute(attribute_id)
    row, warnings = inventory_service.find_variant(rows.data, attribute_id, attribute)

    if row is not None:
        updated = inventory_service.apply_delta(row.id, quantity)
        if not updated.ok:
            return Result.failure(updated.error, warnings=warnings)
        logger.info(
            "Restocked product %s option %s: +%d (now %d)",
            product_id,
            attribute_id,
            quantity,
            updated.data.quantity,
        )
        return Result.success(updated.data, warnings=warnings)

    if attribute is None:
        return Result.failure(
            ReferentialError(
                inventory_service.MISSING_REFERENCE_MESSAGE, reference="attribute"
            )
        )
    created = inventory_service.create_variant(
        {
            "product_id": product_id,
            "variant_data": VariantData.for_attribute(attribute),
            "quantity": quantity,
            "reserved_quantity": 0,
        }
    )
    if not created.ok:
        return created
    return Result.success(created.data, warnings=warnings)


def list_sales(product_id=None):
    filters = {"product_id": product_id} if product_id is not None else None
    result = store.select("product_sales", filters=filters, order=["-created_at", "-id"])
    if not result.ok:
        return Result.failure(translate_error(result, "fetch sales"))
    return Result.success(result.data)
