from storefront.models import Product, Settings
from storefront.services import inventory_service, stock_order_service


def test_init_db_seeds_whatsapp_number(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert Settings.get("whatsapp_number") == app.config["DEFAULT_WHATSAPP_NUMBER"]


def test_seed_demo_is_idempotent(app):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["seed-demo"])
    second = runner.invoke(args=["seed-demo"])

    assert "Seeded 2 demo products." in first.output
    assert "skipping" in second.output
    assert Product.query.count() == 2


def test_sync_stock(app, candle):
    product, _, _ = candle
    result = app.test_cli_runner().invoke(args=["sync-stock", "--product-id", str(product.id)])
    assert f"Product {product.id}: stock 16" in result.output


def test_receive_order(app, candle):
    product, vanilla, _ = candle
    order = stock_order_service.record_stock_order(
        [{"product_id": product.id, "attribute_id": vanilla.id, "quantity": 1}]
    ).unwrap()

    result = app.test_cli_runner().invoke(args=["receive-order", str(order.id)])

    assert result.exit_code == 0
    assert "received" in result.output
    assert inventory_service.stock_by_attribute(product.id).unwrap()[vanilla.id] == 11


def test_receive_missing_order_fails(app):
    result = app.test_cli_runner().invoke(args=["receive-order", "404"])
    assert result.exit_code != 0
    assert "Stock order 404 not found" in result.output


def test_stats(app, candle):
    result = app.test_cli_runner().invoke(args=["stats"])
    assert "units on hand: 16" in result.output
