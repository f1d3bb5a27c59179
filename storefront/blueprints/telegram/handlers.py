"""Telegram message and callback query handlers for stock administration."""
import logging

from flask import current_app

from storefront.services import (
    inventory_service,
    product_service,
    sales_service,
    stock_order_service,
    telegram_service,
)
from storefront.blueprints.telegram.keyboards import option_keyboard, receive_keyboard
from storefront.models.settings import Settings
from storefront.workers.stock_receiving import enqueue_receive

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands:\n"
    "/stock <product_id> — stock per option\n"
    "/sell <product_id> <qty> [option_id] — record a sale\n"
    "/orders — pending stock orders\n"
    "/receive <order_id> — add a stock order to stock\n"
    "/help — this message"
)


# ---------------------------------------------------------------------------
# Message handler
# ---------------------------------------------------------------------------

def handle_message(message):
    """Route incoming Telegram messages to appropriate handler."""
    chat_id = message["chat"]["id"]
    user_id = message["from"]["id"]

    text = message.get("text", "").strip()
    if not text:
        return

    if text.startswith("/stock"):
        _handle_stock(text, chat_id)
    elif text.startswith("/sell"):
        _handle_sell(text, chat_id)
    elif text.startswith("/orders"):
        _handle_orders(chat_id)
    elif text.startswith("/receive"):
        _handle_receive(text, chat_id, user_id)
    elif text.startswith("/help") or text.startswith("/start"):
        telegram_service.send_message(chat_id, HELP_TEXT)
    else:
        telegram_service.send_message(
            chat_id, "Unknown command. Send /help for available commands."
        )


def _int_args(text, count):
    """Parse the first ``count`` integer arguments after the command."""
    parts = text.split()[1:]
    try:
        return [int(p) for p in parts[:count]]
    except ValueError:
        return None


def _handle_stock(text, chat_id):
    args = _int_args(text, 1)
    if not args:
        telegram_service.send_message(chat_id, "Usage: /stock <product_id>")
        return
    product_id = args[0]

    product = product_service.get_product(product_id)
    if not product.ok:
        telegram_service.send_message(chat_id, product.message)
        return
    options = product_service.product_options(product_id)
    if not options.ok:
        telegram_service.send_message(chat_id, options.message)
        return

    low = Settings.get_low_stock_threshold()
    lines = [f"{product.data.name} (#{product_id})", f"Stock: {product.data.stock}"]
    for option in options.data:
        flag = " (low)" if option["available"] <= low else ""
        lines.append(f"  {option['name']}: {option['value']} — {option['available']}{flag}")
    telegram_service.send_message(chat_id, "\n".join(lines))


def _handle_sell(text, chat_id):
    args = _int_args(text, 3)
    if not args or len(args) < 2:
        telegram_service.send_message(chat_id, "Usage: /sell <product_id> <qty> [option_id]")
        return
    product_id, quantity = args[0], args[1]
    attribute_id = args[2] if len(args) > 2 else None

    if attribute_id is None:
        options = product_service.product_options(product_id)
        if not options.ok:
            telegram_service.send_message(chat_id, options.message)
            return
        if options.data:
            telegram_service.send_message(
                chat_id,
                "Which option was sold?",
                reply_markup=option_keyboard(product_id, quantity, options.data),
            )
            return

    telegram_service.send_message(chat_id, _sell(product_id, attribute_id, quantity))


def _sell(product_id, attribute_id, quantity):
    """Record the sale and describe the outcome."""
    result = sales_service.record_sale(product_id, attribute_id, quantity)
    if not result.ok:
        logger.warning("Bot sale of product %s rejected: %s", product_id, result.message)
        return f"Sale not recorded: {result.message}"

    sale = result.data
    reply = f"Sale #{sale.id}: {sale.quantity} units, total {sale.total_price / 100:,.2f}"
    if result.warnings:
        reply += "\n\n" + telegram_service.format_warnings(
            "Stock was not updated:", result.warnings
        )
    elif attribute_id is not None:
        stock = inventory_service.stock_by_attribute(product_id)
        if stock.ok and attribute_id in stock.data:
            reply += f"\nLeft in stock: {stock.data[attribute_id]}"
    return reply


def _handle_orders(chat_id):
    result = stock_order_service.list_stock_orders(status="pending")
    if not result.ok:
        telegram_service.send_message(chat_id, result.message)
        return
    if not result.data:
        telegram_service.send_message(chat_id, "No pending stock orders.")
        return
    for order in result.data[: current_app.config["BOT_ORDERS_LIMIT"]]:
        lines = [f"Stock order #{order.id} ({order.order_date})"]
        for item in order.items:
            option = (
                f" ({item.attribute_name}: {item.attribute_value})"
                if item.attribute_name
                else ""
            )
            lines.append(f"  {item.quantity}x {item.product_name}{option}")
        telegram_service.send_message(
            chat_id, "\n".join(lines), reply_markup=receive_keyboard(order.id)
        )


def _handle_receive(text, chat_id, user_id):
    args = _int_args(text, 1)
    if not args:
        telegram_service.send_message(chat_id, "Usage: /receive <order_id>")
        return
    _receive(args[0], chat_id, user_id)


def _receive(order_id, chat_id, user_id):
    outcome = enqueue_receive(order_id, admin_id=user_id)
    if isinstance(outcome, str):
        telegram_service.send_message(
            chat_id, f"Receiving stock order #{order_id}. You will be notified of any issue."
        )
    elif outcome:
        telegram_service.send_message(chat_id, f"Stock order #{order_id} received.")
    else:
        telegram_service.send_message(chat_id, f"Stock order #{order_id} was not received.")


# ---------------------------------------------------------------------------
# Callback query handler
# ---------------------------------------------------------------------------

def handle_callback_query(callback_query):
    """Route inline keyboard button presses."""
    query_id = callback_query["id"]
    data = callback_query.get("data", "")
    user_id = callback_query["from"]["id"]
    message = callback_query.get("message", {})
    chat_id = message.get("chat", {}).get("id")
    message_id = message.get("message_id")

    action, _, rest = data.partition(":")
    try:
        args = [int(p) for p in rest.split(":")] if rest else []
    except ValueError:
        telegram_service.answer_callback_query(query_id, "Invalid action")
        return

    if action == "sell" and len(args) == 3:
        product_id, attribute_id, quantity = args
        telegram_service.answer_callback_query(query_id)
        telegram_service.edit_message_text(
            chat_id, message_id, _sell(product_id, attribute_id, quantity)
        )
    elif action == "receive" and len(args) == 1:
        telegram_service.answer_callback_query(query_id, "Receiving...")
        _receive(args[0], chat_id, user_id)
    elif action == "cancel_order" and len(args) == 1:
        result = stock_order_service.cancel_stock_order(args[0], admin_id=user_id)
        telegram_service.answer_callback_query(
            query_id, "Cancelled" if result.ok else result.message
        )
        if result.ok:
            telegram_service.edit_message_text(
                chat_id, message_id, f"Stock order #{args[0]} cancelled."
            )
    elif action == "cancel":
        telegram_service.answer_callback_query(query_id, "Cancelled")
        telegram_service.edit_message_text(chat_id, message_id, "Sale cancelled.")
    else:
        telegram_service.answer_callback_query(query_id, "Unknown action")
