"""Tests for sale recording and restocking."""
from storefront.errors import (
    InventoryInconsistencyWarning,
    NotFoundError,
    ReferentialError,
    Result,
    TransportError,
    ValidationError,
)
from storefront.models import ProductSale, VariantInventory
from storefront.services import inventory_service, product_service, sales_service


def _stock(product_id):
    return inventory_service.stock_by_attribute(product_id).unwrap()


def test_sale_deducts_only_the_sold_option(candle):
    product, vanilla, lavender = candle

    result = sales_service.record_sale(product.id, vanilla.id, 3)

    assert result.ok
    assert result.warnings == []
    assert _stock(product.id) == {vanilla.id: 7, lavender.id: 6}


def test_overselling_clamps_at_zero(candle):
    product, vanilla, lavender = candle

    sale = sales_service.record_sale(product.id, vanilla.id, 12).unwrap()

    assert sale.quantity == 12
    assert sale.total_price == 12 * 95000
    assert _stock(product.id) == {vanilla.id: 0, lavender.id: 6}
    assert product_service.get_product(product.id).unwrap().stock == 16


def test_sale_uses_product_price_unless_given(candle):
    product, vanilla, _ = candle

    default = sales_service.record_sale(product.id, vanilla.id, 2).unwrap()
    custom = sales_service.record_sale(product.id, vanilla.id, 2, unit_price=80000).unwrap()

    assert default.unit_price == 95000
    assert custom.unit_price == 80000
    assert custom.total_price == 160000


def test_sale_without_option_leaves_stock(candle):
    product, vanilla, lavender = candle

    sale = sales_service.record_sale(product.id, None, 2).unwrap()

    assert sale.attribute_id is None
    assert _stock(product.id) == {vanilla.id: 10, lavender.id: 6}


def test_sale_without_stock_row_is_kept_with_warning(make_product, make_attribute):
    product = make_product()
    vanilla = make_attribute("Vainilla")

    result = sales_service.record_sale(product.id, vanilla.id, 1)

    assert result.ok
    assert len(result.warnings) == 1
    assert isinstance(result.warnings[0], InventoryInconsistencyWarning)
    assert result.warnings[0].attribute_id == vanilla.id
    assert ProductSale.query.count() == 1


def test_sale_deducts_legacy_row(db, make_product, make_attribute):
    product = make_product()
    vanilla = make_attribute("Vainilla")
    legacy = VariantInventory(product_id=product.id, variant_data={"Aroma": "Vainilla"}, quantity=4)
    db.session.add(legacy)
    db.session.commit()

    sales_service.record_sale(product.id, vanilla.id, 1).unwrap()

    assert inventory_service.get_variant(legacy.id).unwrap().quantity == 3


def test_sale_with_duplicate_rows_warns(db, candle):
    product, vanilla, _ = candle
    extra = VariantInventory(product_id=product.id, variant_data={"attribute_id": vanilla.id}, quantity=2)
    db.session.add(extra)
    db.session.commit()

    result = sales_service.record_sale(product.id, vanilla.id, 1)

    assert result.ok
    assert len(result.warnings) == 1
    assert inventory_service.get_variant(extra.id).unwrap().quantity == 1


def test_sale_rejects_bad_input(candle):
    product, vanilla, _ = candle

    for quantity in (0, -1, 1.5, True, "2"):
        result = sales_service.record_sale(product.id, vanilla.id, quantity)
        assert isinstance(result.error, ValidationError)
    assert isinstance(sales_service.record_sale(None, vanilla.id, 1).error, ValidationError)
    assert isinstance(
        sales_service.record_sale(product.id, vanilla.id, 1, unit_price=-5).error,
        ValidationError,
    )
    assert ProductSale.query.count() == 0


def test_sale_of_missing_product(app):
    result = sales_service.record_sale(999, None, 1)
    assert isinstance(result.error, NotFoundError)
    assert result.message == "Product 999 not found"


def test_increment_adds_to_existing_row(candle):
    product, vanilla, lavender = candle

    row = sales_service.increment(product.id, lavender.id, 4).unwrap()

    assert row.quantity == 10
    assert _stock(product.id) == {vanilla.id: 10, lavender.id: 10}


def test_increment_creates_missing_row(make_product, make_attribute):
    product = make_product()
    vanilla = make_attribute("Vainilla")

    row = sales_service.increment(product.id, vanilla.id, 5).unwrap()

    assert row.quantity == 5
    assert row.reserved_quantity == 0
    assert row.variant_data["attribute_value"] == "Vainilla"


def test_increment_requires_option_and_positive_quantity(candle):
    product, vanilla, _ = candle

    assert sales_service.increment(product.id, None, 1).message == "An option is required to restock"
    assert isinstance(sales_service.increment(product.id, vanilla.id, 0).error, ValidationError)


def test_increment_with_unknown_option(candle):
    product, _, _ = candle
    result = sales_service.increment(product.id, 404, 1)
    assert isinstance(result.error, ReferentialError)


def test_list_sales_newest_first(candle):
    product, vanilla, lavender = candle
    first = sales_service.record_sale(product.id, vanilla.id, 1).unwrap()
    second = sales_service.record_sale(product.id, lavender.id, 1).unwrap()

    sales = sales_service.list_sales(product.id).unwrap()
    assert [s.id for s in sales] == [second.id, first.id]
    assert sales_service.list_sales(product.id + 1).unwrap() == []


def test_sale_stands_when_stock_update_fails(candle, monkeypatch):
    product, vanilla, _ = candle

    def failing_delta(variant_id, delta):
        return Result.failure(TransportError())

    monkeypatch.setattr(inventory_service, "apply_delta", failing_delta)

    result = sales_service.record_sale(product.id, vanilla.id, 3)

    assert result.ok
    assert len(result.warnings) == 1
    assert "stock was not deducted" in result.warnings[0].message
    assert [s.id for s in sales_service.list_sales(product.id).unwrap()] == [result.data.id]


def test_sale_of_dropped_option_warns(candle):
    product, vanilla, lavender = candle
    product_service.set_product_attributes(product.id, {vanilla.id: 10}).unwrap()

    result = sales_service.record_sale(product.id, lavender.id, 1)

    assert result.ok
    assert len(result.warnings) == 1
    assert "no longer offered" in result.warnings[0].message


def test_restock_of_dropped_option_warns(candle):
    product, vanilla, lavender = candle
    product_service.set_product_attributes(product.id, {vanilla.id: 10}).unwrap()

    result = sales_service.increment(product.id, lavender.id, 2)

    assert result.ok
    assert "no longer offered" in result.warnings[0].message
