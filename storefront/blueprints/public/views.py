"""Public-facing catalog JSON consumed by the storefront."""
from flask import abort, current_app, request
from storefront.blueprints.public import public_bp
from storefront.models.settings import Settings
from storefront.serializers import product_to_dict
from storefront.services.product_service import (
    build_whatsapp_link,
    get_product,
    list_products,
    product_options,
)


@public_bp.route("/products")
def catalog():
    """Active products, optionally filtered by category or subcategory."""
    result = list_products(
        category_id=request.args.get("category_id", type=int),
        subcategory_id=request.args.get("subcategory_id", type=int),
    )
    if not result.ok:
        return {"error": result.message}, 503
    return {"products": [product_to_dict(p) for p in result.data]}


@public_bp.route("/products/<int:product_id>")
def product_detail(product_id):
    """Product with its options and a WhatsApp link for ordering."""
    product = get_product(product_id)
    if not product.ok or not product.data.is_active:
        abort(404)

    options = product_options(product_id)
    if not options.ok:
        return {"error": options.message}, 503

    option_text = "[selected option]"
    chosen = request.args.get("option", type=int)
    for option in options.data:
        if option["id"] == chosen:
            option_text = f"{option['name']}: {option['value']}"

    app_url = request.host_url.rstrip("/")
    page_url = f"{app_url}/products/{product_id}"
    whatsapp_link = build_whatsapp_link(
        phone=Settings.get_whatsapp_number(),
        store_name=current_app.config["STORE_NAME"],
        product_name=product.data.name,
        option_text=option_text,
        page_url=page_url,
    )

    data = product_to_dict(product.data)
    data["options"] = options.data
    data["whatsapp_link"] = whatsapp_link
    return data
