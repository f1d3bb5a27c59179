"""Plain-dict views of models for JSON responses."""


def _iso(value):
    return value.isoformat() if value is not None else None


def attribute_to_dict(attribute):
    return {
        "id": attribute.id,
        "subcategory_id": attribute.subcategory_id,
        "name": attribute.name,
        "type": attribute.type,
        "value": attribute.value,
        "description": attribute.description,
        "color_hex": attribute.color_hex,
        "sort_order": attribute.sort_order,
        "is_active": attribute.is_active,
        "created_at": _iso(attribute.created_at),
        "updated_at": _iso(attribute.updated_at),
    }


def variant_to_dict(variant):
    return {
        "id": variant.id,
        "product_id": variant.product_id,
        "variant_data": variant.variant_data,
        "quantity": variant.quantity,
        "reserved_quantity": variant.reserved_quantity,
        "is_active": variant.is_active,
        "created_at": _iso(variant.created_at),
        "updated_at": _iso(variant.updated_at),
    }


def product_to_dict(product):
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "attribute_ids": product.attribute_ids or [],
        "category_id": product.category_id,
        "subcategory_id": product.subcategory_id,
        "is_active": product.is_active,
        "is_featured": product.is_featured,
        "is_new": product.is_new,
        "cover_image": product.cover_image,
        "hover_image": product.hover_image,
        "product_images": product.product_images or [],
    }


def sale_to_dict(sale):
    return {
        "id": sale.id,
        "product_id": sale.product_id,
        "quantity": sale.quantity,
        "unit_price": sale.unit_price,
        "total_price": sale.total_price,
        "attribute_id": sale.attribute_id,
        "created_at": _iso(sale.created_at),
    }


def stock_order_to_dict(order):
    return {
        "id": order.id,
        "order_date": _iso(order.order_date),
        "status": order.status,
        "notes": order.notes,
        "received_at": _iso(order.received_at),
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "attribute_id": item.attribute_id,
                "attribute_name": item.attribute_name,
                "attribute_value": item.attribute_value,
            }
            for item in order.items
        ],
    }
