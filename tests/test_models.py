"""Tests for database models."""
import pytest
from sqlalchemy.exc import IntegrityError

from storefront.models import Attribute, Product, VariantInventory
from storefront.models.settings import Settings


def test_product_creation(db, subcategory):
    p = Product(
        name="Aros Luna",
        price=1850000,  # 18,500.00 in cents
        subcategory_id=subcategory.id,
    )
    db.session.add(p)
    db.session.flush()

    assert p.id is not None
    assert p.price_display == 18500.0
    assert p.stock == 0
    assert not p.has_attributes


def test_attribute_unique_index_is_case_insensitive(db, subcategory):
    db.session.add(Attribute(subcategory_id=subcategory.id, name="Color", value="Rojo"))
    db.session.commit()

    db.session.add(Attribute(subcategory_id=subcategory.id, name="color", value="ROJO"))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_attribute_unique_index_ignores_inactive(db, subcategory):
    db.session.add(
        Attribute(subcategory_id=subcategory.id, name="Color", value="Rojo", is_active=False)
    )
    db.session.add(Attribute(subcategory_id=subcategory.id, name="Color", value="Rojo"))
    db.session.commit()

    assert db.session.query(Attribute).count() == 2


def test_variant_quantity_cannot_be_negative(db, make_product):
    product = make_product()
    db.session.add(
        VariantInventory(product_id=product.id, variant_data={"attribute_id": 1}, quantity=-1)
    )
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_settings(db):
    Settings.set("test_key", "test_value")
    assert Settings.get("test_key") == "test_value"
    assert Settings.get("missing_key", "default") == "default"


def test_settings_seed_defaults(app):
    assert set(Settings.seed_defaults()) == {"whatsapp_number", "low_stock_threshold"}
    assert Settings.seed_defaults() == []
    assert Settings.get_low_stock_threshold() == app.config["DEFAULT_LOW_STOCK_THRESHOLD"]


def test_settings_bad_threshold_falls_back(app):
    Settings.set("low_stock_threshold", "lots")
    assert Settings.get_low_stock_threshold() == app.config["DEFAULT_LOW_STOCK_THRESHOLD"]
