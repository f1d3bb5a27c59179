"""Attribute catalog: options (Color=Rojo, Aroma=Vainilla, ...) per subcategory."""
import logging

from storefront.errors import (
    DuplicateError,
    InventoryInconsistencyWarning,
    Result,
    ValidationError,
)
from storefront.models.attribute import Attribute
from storefront.models.audit_log import AuditLog
from storefront.services.record_store import store, translate_error
from storefront.services.variant_data import payload_attribute_id

logger = logging.getLogger(__name__)

TABLE = "product_attributes"

DUPLICATE_MESSAGE = (
    "An option with the same name and value already exists in this subcategory"
)
MISSING_SUBCATEGORY_MESSAGE = "The selected subcategory does not exist"

EDITABLE_FIELDS = {
    "subcategory_id",
    "name",
    "type",
    "value",
    "description",
    "color_hex",
    "sort_order",
    "is_active",
}


def _error(result, action, record_id=None):
    return Result.failure(
        translate_error(
            result,
            action,
            entity="Attribute",
            record_id=record_id,
            duplicate_message=DUPLICATE_MESSAGE,
            reference_message=MISSING_SUBCATEGORY_MESSAGE,
            reference="subcategory",
        )
    )


def list_attributes():
    """All attributes, by sort order."""
    result = store.select(TABLE, order=["sort_order", "id"])
    if not result.ok:
        return _error(result, "fetch product attributes")
    return Result.success(result.data)


def list_by_subcategory(subcategory_id):
    """Active attributes of one subcategory, for buyer-facing pickers."""
    result = store.select(
        TABLE,
        filters={"subcategory_id": subcategory_id, "is_active": True},
        order=["sort_order", "id"],
    )
    if not result.ok:
        return _error(result, "fetch product attributes")
    return Result.success(result.data)


def get_attribute(attribute_id):
    result = store.select_one(TABLE, attribute_id)
    if not result.ok:
        return _error(result, "fetch product attribute", attribute_id)
    return Result.success(result.data)


def _text(data, key):
    value = data.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _sort_order(raw):
    if raw in (None, ""):
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Sort order must be a whole number") from None


def _find_duplicate(subcategory_id, name, value, exclude_id=None):
    """Active attribute with the same subcategory, name and value (case-insensitive)."""
    result = store.select(
        TABLE, filters={"subcategory_id": subcategory_id, "is_active": True}
    )
    if not result.ok:
        return result, None
    for attribute in result.data:
        if attribute.id == exclude_id:
            continue
        if (
            attribute.name.lower() == name.lower()
            and attribute.value.lower() == value.lower()
        ):
            return result, attribute
    return result, None


def create_attribute(data):
    """Validate, check for duplicates, then insert a new attribute."""
    name = _text(data, "name")
    value = _text(data, "value")
    subcategory_id = data.get("subcategory_id")
    attr_type = _text(data, "type") or "variant"

    if not name:
        return Result.failure(ValidationError("The option name is required"))
    if not value:
        return Result.failure(ValidationError("The option value is required"))
    if subcategory_id in (None, ""):
        return Result.failure(ValidationError("A subcategory must be selected"))
    if attr_type not in Attribute.TYPES:
        return Result.failure(ValidationError(f"Unknown option type: {attr_type}"))
    try:
        sort_order = _sort_order(data.get("sort_order"))
    except ValidationError as e:
        return Result.failure(e)

    lookup, duplicate = _find_duplicate(subcategory_id, name, value)
    if not lookup.ok:
        return _error(lookup, "create product attribute")
    if duplicate is not None:
        return Result.failure(DuplicateError(DUPLICATE_MESSAGE))

    row = {
        "subcategory_id": subcategory_id,
        "name": name,
        "type": attr_type,
        "value": value,
        "sort_order": sort_order,
        "is_active": bool(data.get("is_active", True)),
    }
    # Optional fields are only stored when they carry something
    description = _text(data, "description")
    if description:
        row["description"] = description
    color_hex = _text(data, "color_hex")
    if color_hex:
        row["color_hex"] = color_hex

    result = store.insert(TABLE, row)
    if not result.ok:
        return _error(result, "create product attribute")
    logger.info("Created attribute %s=%s (id %s)", name, value, result.data.id)
    return Result.success(result.data)


def update_attribute(attribute_id, patch):
    """Apply a partial update; only the given fields change."""
    unknown = set(patch) - EDITABLE_FIELDS
    if unknown:
        return Result.failure(
            ValidationError(f"Unknown attribute fields: {', '.join(sorted(unknown))}")
        )

    current = get_attribute(attribute_id)
    if not current.ok:
        return current
    attribute = current.data

    changes = {}
    for key in ("name", "value"):
        if key in patch:
            text = _text(patch, key)
            if not text:
                return Result.failure(ValidationError(f"The option {key} is required"))
            changes[key] = text
    if "subcategory_id" in patch:
        if patch["subcategory_id"] in (None, ""):
            return Result.failure(ValidationError("A subcategory must be selected"))
        changes["subcategory_id"] = patch["subcategory_id"]
    if "type" in patch:
        attr_type = _text(patch, "type")
        if attr_type not in Attribute.TYPES:
            return Result.failure(ValidationError(f"Unknown option type: {attr_type}"))
        changes["type"] = attr_type
    for key in ("description", "color_hex"):
        if key in patch:
            changes[key] = _text(patch, key) or None
    if "sort_order" in patch:
        try:
            changes["sort_order"] = _sort_order(patch["sort_order"])
        except ValidationError as e:
            return Result.failure(e)
    if "is_active" in patch:
        changes["is_active"] = bool(patch["is_active"])

    identity_changed = any(
        key in changes for key in ("name", "value", "subcategory_id", "is_active")
    )
    will_be_active = changes.get("is_active", attribute.is_active)
    if identity_changed and will_be_active:
        lookup, duplicate = _find_duplicate(
            changes.get("subcategory_id", attribute.subcategory_id),
            changes.get("name", attribute.name),
            changes.get("value", attribute.value),
            exclude_id=attribute.id,
        )
        if not lookup.ok:
            return _error(lookup, "update product attribute", attribute_id)
        if duplicate is not None:
            return Result.failure(DuplicateError(DUPLICATE_MESSAGE))

    result = store.update(TABLE, attribute_id, changes)
    if not result.ok:
        return _error(result, "update product attribute", attribute_id)
    return Result.success(result.data)


def _variants_referencing(attribute_id):
    result = store.select("product_variant_inventory")
    if not result.ok:
        return result, []
    rows = [
        row
        for row in result.data
        if payload_attribute_id(row.variant_data) == attribute_id
    ]
    return result, rows


def delete_attribute(attribute_id, admin_id=None):
    """Hard delete. Stock rows that point at the attribute are left in place.

    Any such rows are reported as warnings on the result so the caller can
    decide what to do with them.
    """
    lookup, referencing = _variants_referencing(attribute_id)
    if not lookup.ok:
        return _error(lookup, "delete product attribute", attribute_id)

    result = store.delete(TABLE, attribute_id)
    if not result.ok:
        return _error(result, "delete product attribute", attribute_id)

    warnings = []
    if referencing:
        logger.warning(
            "Attribute %s deleted while %d stock rows still reference it: %s",
            attribute_id,
            len(referencing),
            [row.id for row in referencing],
        )
        for row in referencing:
            warnings.append(
                InventoryInconsistencyWarning(
                    f"Stock row {row.id} of product {row.product_id} still "
                    f"references deleted option {attribute_id}",
                    product_id=row.product_id,
                    attribute_id=attribute_id,
                )
            )
    AuditLog.record(
        "DELETE_ATTRIBUTE",
        admin_id=admin_id,
        payload={
            "attribute_id": attribute_id,
            "orphaned_variant_ids": [row.id for row in referencing],
        },
    )
    return Result.success(True, warnings=warnings)


def toggle_active(attribute_id):
    """Flip is_active. A failed read is returned as is."""
    current = get_attribute(attribute_id)
    if not current.ok:
        return current
    return update_attribute(attribute_id, {"is_active": not current.data.is_active})


def find_orphaned_variants():
    """Stock rows whose attribute id no longer exists."""
    attributes = store.select(TABLE)
    if not attributes.ok:
        return _error(attributes, "fetch product attributes")
    variants = store.select("product_variant_inventory", order=["-created_at", "-id"])
    if not variants.ok:
        return _error(variants, "fetch product variant inventories")

    known = {attribute.id for attribute in attributes.data}
    orphans = []
    for row in variants.data:
        attribute_id = payload_attribute_id(row.variant_data)
        if attribute_id is not None and attribute_id not in known:
            orphans.append(row)
    return Result.success(orphans)
