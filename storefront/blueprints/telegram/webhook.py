import hmac
import logging
from flask import current_app, request
from storefront.blueprints.telegram import telegram_bp
from storefront.blueprints.telegram.handlers import handle_callback_query, handle_message

logger = logging.getLogger(__name__)

UPDATE_HANDLERS = (
    ("message", handle_message),
    ("callback_query", handle_callback_query),
)


def _matches(provided, expected):
    return bool(expected) and hmac.compare_digest(provided or "", expected)


@telegram_bp.route("/webhook/<token>", methods=["POST"])
def webhook(token):
    """Receive bot updates from the shop admins.

    The URL must carry the bot token and, when TELEGRAM_WEBHOOK_SECRET is
    set, the X-Telegram-Bot-Api-Secret-Token header must match it. Updates
    from users outside TELEGRAM_ADMIN_IDS are acknowledged and dropped.
    """
    config = current_app.config
    if not _matches(token, config["TELEGRAM_BOT_TOKEN"]):
        return "", 403
    secret = config["TELEGRAM_WEBHOOK_SECRET"]
    if secret and not _matches(request.headers.get("X-Telegram-Bot-Api-Secret-Token"), secret):
        logger.warning("Webhook call with a bad secret header from %s", request.remote_addr)
        return "", 403

    update = request.get_json(silent=True)
    if not update:
        return "", 400

    for kind, handler in UPDATE_HANDLERS:
        if kind not in update:
            continue
        sender = update[kind].get("from", {}).get("id")
        if sender not in config["TELEGRAM_ADMIN_IDS"]:
            logger.info("Dropped %s from non-admin user %s", kind, sender)
            break
        try:
            handler(update[kind])
        except Exception:
            # Telegram redelivers on non-200, which would repeat a recorded sale
            logger.exception("Failed to handle %s update %s", kind, update.get("update_id"))
        break

    return "", 200
