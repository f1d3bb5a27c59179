"""Tests for the table-oriented record store."""
from storefront.errors import DuplicateError, NotFoundError, ReferentialError
from storefront.services.record_store import (
    FOREIGN_KEY_VIOLATION,
    NOT_FOUND,
    UNIQUE_VIOLATION,
    StoreResult,
    store,
    translate_error,
)


def _attribute(subcategory_id, value, name="Color"):
    return {"subcategory_id": subcategory_id, "name": name, "value": value}


def test_insert_and_select_one(subcategory):
    created = store.insert("product_attributes", _attribute(subcategory.id, "Rojo"))
    assert created.ok
    assert created.data.id is not None

    fetched = store.select_one("product_attributes", created.data.id)
    assert fetched.ok
    assert fetched.data.value == "Rojo"


def test_select_one_missing_row(app):
    result = store.select_one("products", 12345)
    assert not result.ok
    assert result.code == NOT_FOUND


def test_select_filters_and_orders(subcategory):
    store.insert("product_attributes", dict(_attribute(subcategory.id, "B"), sort_order=2))
    store.insert("product_attributes", dict(_attribute(subcategory.id, "A"), sort_order=1))
    store.insert(
        "product_attributes",
        dict(_attribute(subcategory.id, "C"), sort_order=0, is_active=False),
    )

    result = store.select(
        "product_attributes", filters={"is_active": True}, order=["sort_order"]
    )
    assert [a.value for a in result.data] == ["A", "B"]

    newest = store.select("product_attributes", order=["-created_at", "-id"])
    assert [a.value for a in newest.data] == ["C", "A", "B"]


def test_unique_violation_is_classified(subcategory):
    assert store.insert("product_attributes", _attribute(subcategory.id, "Rojo")).ok

    result = store.insert("product_attributes", _attribute(subcategory.id, "rojo", "COLOR"))
    assert not result.ok
    assert result.code == UNIQUE_VIOLATION


def test_foreign_key_violation_is_classified(app):
    result = store.insert("product_attributes", _attribute(9999, "Rojo"))
    assert not result.ok
    assert result.code == FOREIGN_KEY_VIOLATION


def test_store_usable_after_failed_insert(subcategory):
    store.insert("product_attributes", _attribute(9999, "Rojo"))
    assert store.insert("product_attributes", _attribute(subcategory.id, "Rojo")).ok


def test_update_and_delete_missing_row(app):
    assert store.update("products", 404, {"stock": 1}).code == NOT_FOUND
    assert store.delete("products", 404).code == NOT_FOUND


def test_apply_delta_clamps_at_floor(make_product):
    product = make_product(stock=5)

    lowered = store.apply_delta("products", product.id, "stock", -3)
    assert lowered.data.stock == 2

    clamped = store.apply_delta("products", product.id, "stock", -10)
    assert clamped.ok
    assert clamped.data.stock == 0

    raised = store.apply_delta("products", product.id, "stock", 4)
    assert raised.data.stock == 4


def test_apply_delta_missing_row(app):
    result = store.apply_delta("product_variant_inventory", 404, "quantity", 1)
    assert result.code == NOT_FOUND


def test_translate_error_messages():
    duplicate = translate_error(
        StoreResult.failure("raw", code=UNIQUE_VIOLATION),
        "create thing",
        duplicate_message="Already there",
    )
    assert isinstance(duplicate, DuplicateError)
    assert duplicate.message == "Already there"

    reference = translate_error(
        StoreResult.failure("raw", code=FOREIGN_KEY_VIOLATION),
        "create thing",
        reference_message="Parent missing",
        reference="subcategory",
    )
    assert isinstance(reference, ReferentialError)
    assert reference.reference == "subcategory"

    missing = translate_error(
        StoreResult.failure("raw", code=NOT_FOUND), "fetch", entity="Product", record_id=7
    )
    assert isinstance(missing, NotFoundError)
    assert missing.message == "Product 7 not found"

    generic = translate_error(StoreResult.failure("syntax error near FROM"), "fetch products")
    assert generic.message == "Failed to fetch products"
