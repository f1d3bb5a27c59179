from storefront.services import inventory_service, stock_order_service, telegram_service
from storefront.workers.stock_receiving import enqueue_receive, receive_stock_order_job


def _order(product, attribute, quantity=5):
    return stock_order_service.record_stock_order(
        [{"product_id": product.id, "attribute_id": attribute.id, "quantity": quantity}]
    ).unwrap()


def test_job_receives_order(app, candle, monkeypatch):
    product, vanilla, _ = candle
    notices = []
    monkeypatch.setattr(telegram_service, "notify_admins", notices.append)
    order = _order(product, vanilla)

    assert receive_stock_order_job(order.id) is True
    assert inventory_service.stock_by_attribute(product.id).unwrap()[vanilla.id] == 15
    assert notices == []


def test_job_is_idempotent(app, candle):
    product, vanilla, _ = candle
    order = _order(product, vanilla)

    receive_stock_order_job(order.id)
    receive_stock_order_job(order.id)

    assert inventory_service.stock_by_attribute(product.id).unwrap()[vanilla.id] == 15


def test_job_notifies_admins_of_warnings(app, candle, monkeypatch):
    product, vanilla, _ = candle
    notices = []
    monkeypatch.setattr(telegram_service, "notify_admins", notices.append)
    order = stock_order_service.record_stock_order(
        [{"product_id": product.id, "quantity": 3}]
    ).unwrap()

    assert receive_stock_order_job(order.id) is True
    assert len(notices) == 1
    assert "has no option" in notices[0]


def test_job_notifies_admins_of_failure(app, monkeypatch):
    notices = []
    monkeypatch.setattr(telegram_service, "notify_admins", notices.append)

    assert receive_stock_order_job(404) is False
    assert "Stock order 404 not found" in notices[0]


def test_enqueue_runs_inline_without_redis(app, candle):
    product, vanilla, _ = candle
    order = _order(product, vanilla, quantity=2)

    assert enqueue_receive(order.id) is True
    assert stock_order_service.get_stock_order(order.id).unwrap().status == "received"


def test_inline_receive_updates_objects_already_loaded(app, candle):
    product, vanilla, _ = candle
    order = _order(product, vanilla, quantity=2)
    loaded = stock_order_service.get_stock_order(order.id).unwrap()

    enqueue_receive(order.id)

    assert loaded.status == "received"
    assert loaded.received_at is not None
