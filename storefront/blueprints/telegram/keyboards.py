"""Telegram inline keyboard builders."""


def option_keyboard(product_id, quantity, options):
    """One button per product option; tapping it records the sale."""
    rows = []
    for option in options:
        label = f"{option['name']}: {option['value']} ({option['available']} left)"
        rows.append(
            [
                {
                    "text": label,
                    "callback_data": f"sell:{product_id}:{option['id']}:{quantity}",
                }
            ]
        )
    rows.append([{"text": "Cancel", "callback_data": "cancel"}])
    return {"inline_keyboard": rows}


def receive_keyboard(order_id):
    """Confirmation shown before a stock order is received."""
    return {
        "inline_keyboard": [
            [
                {"text": "Mark Received", "callback_data": f"receive:{order_id}"},
                {"text": "Cancel Order", "callback_data": f"cancel_order:{order_id}"},
            ],
        ]
    }
