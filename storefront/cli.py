"""Flask CLI commands for admin operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and seed default settings."""
        from storefront.extensions import db
        from storefront.models.settings import Settings

        db.create_all()
        added = Settings.seed_defaults()
        click.echo(f"Database initialized; seeded settings: {', '.join(added) or 'none'}.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo catalog with options and stock (idempotent)."""
        from storefront.extensions import db
        from storefront.models import Category, Product, Subcategory
        from storefront.services import attribute_service, product_service

        # Only seed if no products exist yet
        if db.session.execute(db.select(Product).limit(1)).first():
            click.echo("Products already exist — skipping demo seed.")
            return

        demo = [
            ("Joyas", "joyas", "Aros", "Color", "color", [
                ("Aros Luna", 1850000, [("Dorado", "#D4AF37", 8), ("Plateado", "#C0C0C0", 5)]),
            ]),
            ("Hogar", "hogar", "Velas", "Aroma", "aroma", [
                ("Vela de Soja", 950000, [("Vainilla", None, 10), ("Lavanda", None, 6)]),
            ]),
        ]
        created = 0
        for cat_name, slug, sub_name, attr_name, attr_type, products in demo:
            category = Category(name=cat_name, slug=slug)
            db.session.add(category)
            db.session.flush()
            subcategory = Subcategory(category_id=category.id, name=sub_name)
            db.session.add(subcategory)
            db.session.commit()

            for product_name, price, options in products:
                product = Product(
                    name=product_name,
                    price=price,
                    category_id=category.id,
                    subcategory_id=subcategory.id,
                    is_new=True,
                )
                db.session.add(product)
                db.session.commit()

                stocks = {}
                for sort_order, (value, color_hex, quantity) in enumerate(options):
                    attribute = attribute_service.create_attribute(
                        {
                            "subcategory_id": subcategory.id,
                            "name": attr_name,
                            "type": attr_type,
                            "value": value,
                            "color_hex": color_hex,
                            "sort_order": sort_order,
                        }
                    ).unwrap()
                    stocks[attribute.id] = quantity
                product_service.set_product_attributes(product.id, stocks).unwrap()
                created += 1
        click.echo(f"Seeded {created} demo products.")

    @app.cli.command("set-webhook")
    def set_webhook():
        """Register Telegram webhook URL."""
        from storefront.services.telegram_service import set_webhook

        token = current_app.config["TELEGRAM_BOT_TOKEN"]
        secret = current_app.config["TELEGRAM_WEBHOOK_SECRET"]
        app_url = current_app.config["APP_URL"].rstrip("/")
        webhook_url = f"{app_url}/telegram/webhook/{token}"

        result = set_webhook(webhook_url, secret_token=secret)
        click.echo(f"Webhook set: {result}")

    @app.cli.command("sync-stock")
    @click.option("--product-id", type=int, default=None)
    def sync_stock(product_id):
        """Recompute cached product stock from the variant ledger."""
        from storefront.services import product_service

        if product_id is not None:
            ids = [product_id]
        else:
            ids = [p.id for p in product_service.list_products(active_only=False).unwrap()]
        for pid in ids:
            result = product_service.sync_aggregate_stock(pid)
            if result.ok:
                click.echo(f"Product {pid}: stock {result.data}")
            else:
                click.echo(f"Product {pid}: {result.message}", err=True)

    @app.cli.command("receive-order")
    @click.argument("order_id", type=int)
    def receive_order(order_id):
        """Mark a stock order received and add its units to stock."""
        from storefront.services import stock_order_service

        result = stock_order_service.receive_stock_order(order_id)
        if not result.ok:
            raise click.ClickException(result.message)
        click.echo(f"Stock order {order_id}: {result.data.status}")
        for warning in result.warnings:
            click.echo(f"  warning: {warning.message}", err=True)

    @app.cli.command("stats")
    def stats():
        """Show catalog and stock statistics."""
        from storefront.services.product_service import get_stats

        s = get_stats().unwrap()
        for key, value in s.items():
            click.echo(f"  {key.replace('_', ' ')}: {value}")
