"""RQ worker job: receive a stock order into the variant ledger."""
import logging
from flask import current_app, has_app_context
from redis.exceptions import LockError
from storefront import create_app, extensions
from storefront.services import stock_order_service, telegram_service

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Lazily create the app used by RQ worker processes."""
    global _worker_app
    if _worker_app is None:
        _worker_app = create_app()
    return _worker_app


def receive_stock_order_job(order_id, admin_id=None):
    """Receive a stock order and tell the admins how it went.

    Idempotency: receiving an already received order is a no-op.
    Distributed lock: two workers never add the same order's units twice.

    Inside an app context (inline run, CLI, tests) the caller's context and
    session are used; an RQ worker gets the worker app's context.
    """
    if has_app_context():
        return _receive_locked(order_id, admin_id)
    with _get_app().app_context():
        return _receive_locked(order_id, admin_id)


def _receive_locked(order_id, admin_id):
    lock = None
    if extensions.redis_client is not None:
        lock = extensions.redis_client.lock(
            f"stock_order:{order_id}", timeout=current_app.config["STOCK_ORDER_LOCK_SECONDS"]
        )
        if not lock.acquire(blocking=False):
            logger.info("Lock held for stock order %s, skipping", order_id)
            return None

    try:
        result = stock_order_service.receive_stock_order(order_id, admin_id=admin_id)
        if not result.ok:
            logger.error("Stock order %s not received: %s", order_id, result.message)
            telegram_service.notify_admins(
                f"Stock order {order_id} could not be received: {result.message}"
            )
        elif result.warnings:
            telegram_service.notify_admins(
                telegram_service.format_warnings(
                    f"Stock order {order_id} received with issues:", result.warnings
                )
            )
        else:
            logger.info("Stock order %s received", order_id)
        return result.ok
    finally:
        if lock is not None:
            try:
                lock.release()
            except LockError:
                logger.warning("Lock for stock order %s expired before release", order_id)


def enqueue_receive(order_id, admin_id=None):
    """Queue the receive job; runs inline when no queue is available."""
    job = extensions.task_queue.enqueue(
        receive_stock_order_job,
        order_id,
        admin_id,
        job_timeout=current_app.config["STOCK_ORDER_JOB_TIMEOUT"],
    )
    if job is None:
        return receive_stock_order_job(order_id, admin_id)
    return job.id
