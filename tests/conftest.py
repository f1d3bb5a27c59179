import pytest
from storefront import create_app
from storefront.extensions import db as _db
from storefront.models import Category, Product, Subcategory
from storefront.services import attribute_service, product_service


@pytest.fixture
def app():
    """Create application for testing with a fresh in-memory schema."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def admin_headers(app):
    return {"X-Admin-Token": app.config["ADMIN_API_TOKEN"]}


@pytest.fixture
def subcategory(db):
    category = Category(name="Hogar", slug="hogar")
    db.session.add(category)
    db.session.flush()
    sub = Subcategory(category_id=category.id, name="Velas")
    db.session.add(sub)
    db.session.commit()
    return sub


@pytest.fixture
def other_subcategory(db, subcategory):
    sub = Subcategory(category_id=subcategory.category_id, name="Difusores")
    db.session.add(sub)
    db.session.commit()
    return sub


@pytest.fixture
def make_attribute(subcategory):
    def _make(value, name="Aroma", type="aroma", **kwargs):
        data = {
            "subcategory_id": subcategory.id,
            "name": name,
            "type": type,
            "value": value,
        }
        data.update(kwargs)
        return attribute_service.create_attribute(data).unwrap()

    return _make


@pytest.fixture
def make_product(db, subcategory):
    def _make(name="Vela de Soja", price=95000, **kwargs):
        kwargs.setdefault("subcategory_id", subcategory.id)
        kwargs.setdefault("category_id", subcategory.category_id)
        product = Product(name=name, price=price, **kwargs)
        db.session.add(product)
        db.session.commit()
        return product

    return _make


@pytest.fixture
def candle(make_product, make_attribute):
    """Candle with Vanilla (10 units) and Lavender (6 units)."""
    product = make_product(name="Candle", price=95000)
    vanilla = make_attribute("Vanilla")
    lavender = make_attribute("Lavender")
    product_service.set_product_attributes(
        product.id, {vanilla.id: 10, lavender.id: 6}
    ).unwrap()
    return product, vanilla, lavender
