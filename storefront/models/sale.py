from datetime import datetime, timezone
from storefront.extensions import db


class ProductSale(db.Model):
    """Append-only sale log entry."""

    __tablename__ = "product_sales"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id"), nullable=False, index=True
    )
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)  # in cents, captured at sale time
    total_price = db.Column(db.Integer, nullable=False)  # in cents
    attribute_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def __repr__(self):
        return f"<ProductSale {self.quantity}x product={self.product_id}>"
