import json
import logging
import httpx
from flask import current_app

logger = logging.getLogger(__name__)

BASE_URL = "https://api.telegram.org/bot{token}/{method}"
# Longer texts are rejected by the Bot API
MAX_MESSAGE_LENGTH = 4096


def _url(method):
    return BASE_URL.format(token=current_app.config["TELEGRAM_BOT_TOKEN"], method=method)


def _post(method, **kwargs):
    """Make a POST request to Telegram Bot API."""
    resp = httpx.post(_url(method), timeout=10, **kwargs)
    data = resp.json()
    if not data.get("ok"):
        logger.error("Telegram API error: %s", data)
        raise RuntimeError(f"Telegram API error: {data.get('description', 'unknown')}")
    return data.get("result")


def _clip(text):
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    return text[: MAX_MESSAGE_LENGTH - 1] + "…"


def send_message(chat_id, text, reply_markup=None, parse_mode=None):
    payload = {"chat_id": chat_id, "text": _clip(text)}
    if reply_markup:
        payload["reply_markup"] = json.dumps(reply_markup)
    if parse_mode:
        payload["parse_mode"] = parse_mode
    return _post("sendMessage", data=payload)


def edit_message_text(chat_id, message_id, text, reply_markup=None):
    payload = {
        "chat_id": chat_id,
        "message_id": message_id,
        "text": _clip(text),
    }
    if reply_markup:
        payload["reply_markup"] = json.dumps(reply_markup)
    return _post("editMessageText", data=payload)


def answer_callback_query(callback_query_id, text=None):
    payload = {"callback_query_id": callback_query_id}
    if text:
        payload["text"] = text
    return _post("answerCallbackQuery", data=payload)


def set_webhook(url, secret_token=None):
    """Register the webhook URL with Telegram."""
    payload = {"url": url}
    if secret_token:
        payload["secret_token"] = secret_token
    return _post("setWebhook", data=payload)


def notify_admins(text):
    """Send ``text`` to every admin chat. Delivery failures are only logged."""
    if not current_app.config["TELEGRAM_BOT_TOKEN"]:
        logger.info("Telegram not configured, admin notice dropped: %s", text)
        return 0
    sent = 0
    for admin_id in current_app.config["TELEGRAM_ADMIN_IDS"]:
        try:
            send_message(admin_id, text)
            sent += 1
        except (httpx.HTTPError, RuntimeError, ValueError):
            logger.exception("Failed to notify admin %s", admin_id)
    return sent


def format_warnings(title, warnings):
    lines = [title]
    lines.extend(f"- {w.message}" for w in warnings)
    return "\n".join(lines)
