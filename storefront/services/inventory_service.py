"""Variant inventory ledger: one stock row per (product, attribute)."""
import logging

from storefront.errors import (
    InventoryInconsistencyWarning,
    ReferentialError,
    Result,
    StorefrontError,
    ValidationError,
)
from storefront.services.record_store import NOT_FOUND, store, translate_error
from storefront.services.variant_data import (
    VariantData,
    matches_by_id,
    matches_by_name_value,
    payload_attribute_id,
)

logger = logging.getLogger(__name__)

TABLE = "product_variant_inventory"
NEWEST_FIRST = ["-created_at", "-id"]

MISSING_REFERENCE_MESSAGE = "The referenced product or attribute does not exist"


def _error(result, action, record_id=None):
    return Result.failure(
        translate_error(
            result,
            action,
            entity="Stock row",
            record_id=record_id,
            reference_message=MISSING_REFERENCE_MESSAGE,
            reference="product",
        )
    )


def _check_quantity(value, label):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be a whole number")
    if value < 0:
        raise ValidationError(f"{label} cannot be negative")
    return value


def list_all():
    result = store.select(TABLE, order=NEWEST_FIRST)
    if not result.ok:
        return _error(result, "fetch product variant inventories")
    return Result.success(result.data)


def get_by_product(product_id):
    """Stock rows of a product, most recently created first."""
    result = store.select(TABLE, filters={"product_id": product_id}, order=NEWEST_FIRST)
    if not result.ok:
        return _error(result, "fetch product variant inventories")
    return Result.success(result.data)


def get_variant(variant_id):
    result = store.select_one(TABLE, variant_id)
    if not result.ok:
        return _error(result, "fetch product variant inventory", variant_id)
    return Result.success(result.data)


def stock_by_attribute(product_id):
    """{attribute_id: quantity} for the product's active rows."""
    rows = get_by_product(product_id)
    if not rows.ok:
        return rows
    stock = {}
    # Newest first, so the first row seen for an attribute wins
    for row in rows.data:
        attribute_id = payload_attribute_id(row.variant_data)
        if row.is_active and attribute_id is not None and attribute_id not in stock:
            stock[attribute_id] = row.quantity
    return Result.success(stock)


def find_variant(rows, attribute_id, attribute=None):
    """Pick the stock row that stands for ``attribute_id``.

    Matching is by ``variant_data.attribute_id`` first. Only when no row
    carries the id are legacy rows shaped ``{name: value}`` considered, which
    needs the attribute record. Active rows win over inactive ones; a match
    that is only an inactive row is still returned, with a warning. When
    several rows remain, the first one in ``rows`` (newest first) is used and
    a warning is returned.

    Returns ``(row_or_None, warnings)``.
    """
    warnings = []
    matches = [row for row in rows if matches_by_id(row.variant_data, attribute_id)]
    if not matches and attribute is not None:
        matches = [
            row for row in rows if matches_by_name_value(row.variant_data, attribute)
        ]
        if matches:
            logger.info(
                "Matched legacy stock row %s for attribute %s by name/value",
                matches[0].id,
                attribute_id,
            )
    active = [row for row in matches if row.is_active]
    if active:
        matches = active
    elif matches:
        logger.warning(
            "Attribute %s only matches inactive stock row %s", attribute_id, matches[0].id
        )
        warnings.append(
            InventoryInconsistencyWarning(
                f"Option {attribute_id} is no longer offered; inactive row "
                f"{matches[0].id} was used",
                product_id=matches[0].product_id,
                attribute_id=attribute_id,
            )
        )
    if len(matches) > 1:
        logger.warning(
            "Attribute %s matches %d stock rows %s; using row %s",
            attribute_id,
            len(matches),
            [row.id for row in matches],
            matches[0].id,
        )
        warnings.append(
            InventoryInconsistencyWarning(
                f"Option {attribute_id} has {len(matches)} stock rows; "
                f"row {matches[0].id} was used",
                product_id=matches[0].product_id,
                attribute_id=attribute_id,
            )
        )
    return (matches[0] if matches else None), warnings


def _variant_payload(variant_data):
    if isinstance(variant_data, VariantData):
        return variant_data
    return VariantData.from_payload(variant_data)


def create_variant(row):
    """Insert a stock row.

    ``row`` needs ``product_id`` and ``variant_data`` (a :class:`VariantData`
    or a payload with ``attribute_id``); ``quantity`` and
    ``reserved_quantity`` default to 0. The attribute must exist; its name,
    value and type are copied into the payload.
    """
    product_id = row.get("product_id")
    if product_id in (None, ""):
        return Result.failure(ValidationError("A product is required"))
    variant_data = _variant_payload(row.get("variant_data"))
    if variant_data is None:
        return Result.failure(ValidationError("An option is required"))
    try:
        quantity = _check_quantity(row.get("quantity", 0), "Quantity")
        reserved = _check_quantity(row.get("reserved_quantity", 0), "Reserved quantity")
    except ValidationError as e:
        return Result.failure(e)

    attribute = store.select_one("product_attributes", variant_data.attribute_id)
    if not attribute.ok:
        if attribute.code == NOT_FOUND:
            return Result.failure(
                ReferentialError(MISSING_REFERENCE_MESSAGE, reference="attribute")
            )
        return _error(attribute, "create product variant inventory")

    result = store.insert(
        TABLE,
        {
            "product_id": product_id,
            "variant_data": VariantData.for_attribute(attribute.data).to_payload(),
            "quantity": quantity,
            "reserved_quantity": reserved,
            "is_active": bool(row.get("is_active", True)),
        },
    )
    if not result.ok:
        return _error(result, "create product variant inventory")
    logger.info(
        "Created stock row %s for product %s option %s (qty %d)",
        result.data.id,
        product_id,
        variant_data.attribute_id,
        quantity,
    )
    return Result.success(result.data)


def update_variant(variant_id, patch):
    changes = {}
    try:
        for key in ("quantity", "reserved_quantity"):
            if key in patch:
                changes[key] = _check_quantity(patch[key], key.replace("_", " ").capitalize())
    except ValidationError as e:
        return Result.failure(e)
    if "is_active" in patch:
        changes["is_active"] = bool(patch["is_active"])
    if "variant_data" in patch:
        variant_data = _variant_payload(patch["variant_data"])
        if variant_data is None:
            return Result.failure(ValidationError("An option is required"))
        changes["variant_data"] = variant_data.to_payload()
    unknown = set(patch) - {"quantity", "reserved_quantity", "is_active", "variant_data"}
    if unknown:
        return Result.failure(
            ValidationError(f"Unknown stock row fields: {', '.join(sorted(unknown))}")
        )

    result = store.update(TABLE, variant_id, changes)
    if not result.ok:
        return _error(result, "update product variant inventory", variant_id)
    return Result.success(result.data)


def update_quantity(variant_id, quantity):
    return update_variant(variant_id, {"quantity": quantity})


def delete_variant(variant_id):
    result = store.delete(TABLE, variant_id)
    if not result.ok:
        return _error(result, "delete product variant inventory", variant_id)
    return Result.success(True)


def apply_delta(variant_id, delta):
    """Add ``delta`` to a row's quantity in one statement, clamped at zero."""
    result = store.apply_delta(TABLE, variant_id, "quantity", delta, floor=0)
    if not result.ok:
        return _error(result, "update product variant inventory", variant_id)
    return Result.success(result.data)


def bulk_reconcile(product_id, updates):
    """Overwrite stock for each ``{"attribute_id", "quantity"}`` pair.

    Existing rows are overwritten (and reactivated); missing ones are created
    with reserved_quantity 0. Running it twice with the same input leaves
    the ledger as running it once. Pairs are applied independently: a failed
    pair does not undo the others, and the result then is a failure whose
    warnings name every pair that did not go through.
    """
    if not isinstance(updates, (list, tuple)):
        return Result.failure(ValidationError("Stock updates must be a list"))

    existing = get_by_product(product_id)
    if not existing.ok:
        return existing
    rows = list(existing.data)

    applied = []
    failures = []
    for update in updates:
        if not isinstance(update, dict):
            failures.append((None, "Each stock update needs an option and a quantity"))
            continue
        attribute_id = update.get("attribute_id")
        quantity = update.get("quantity")
        try:
            if attribute_id in (None, ""):
                raise ValidationError("An option is required")
            _check_quantity(quantity, "Quantity")
        except ValidationError as e:
            failures.append((attribute_id, e.message))
            continue

        attribute = store.select_one("product_attributes", attribute_id)
        if not attribute.ok:
            failures.append((attribute_id, MISSING_REFERENCE_MESSAGE))
            continue

        row, _ = find_variant(rows, attribute_id, attribute.data)
        if row is not None:
            patch = {"quantity": quantity, "is_active": True}
            if payload_attribute_id(row.variant_data) is None:
                # Legacy row matched by name/value: record the id from now on
                patch["variant_data"] = VariantData.for_attribute(attribute.data)
            result = update_variant(row.id, patch)
        else:
            result = create_variant(
                {
                    "product_id": product_id,
                    "variant_data": VariantData.for_attribute(attribute.data),
                    "quantity": quantity,
                    "reserved_quantity": 0,
                    "is_active": True,
                }
            )
            if result.ok:
                rows.insert(0, result.data)

        if result.ok:
            applied.append(result.data)
        else:
            failures.append((attribute_id, result.message))

    if failures:
        warnings = []
        for attribute_id, message in failures:
            logger.warning(
                "Stock reconcile for product %s option %s failed: %s",
                product_id,
                attribute_id,
                message,
            )
            warnings.append(
                InventoryInconsistencyWarning(
                    f"Stock for option {attribute_id} was not saved: {message}",
                    product_id=product_id,
                    attribute_id=attribute_id,
                )
            )
        return Result.failure(
            StorefrontError("Some stock updates failed"), warnings=warnings
        )
    return Result.success(applied)
