from datetime import date, datetime, timezone
from storefront.extensions import db


class StockOrder(db.Model):
    __tablename__ = "stock_orders"

    id = db.Column(db.Integer, primary_key=True)
    order_date = db.Column(db.Date, nullable=False, default=date.today)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    notes = db.Column(db.Text)
    received_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    items = db.relationship(
        "StockOrderItem",
        backref="stock_order",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="StockOrderItem.id",
    )

    STATUSES = {"pending", "received", "cancelled"}

    def __repr__(self):
        return f"<StockOrder {self.id} [{self.status}]>"


class StockOrderItem(db.Model):
    """Line of a stock order; names are snapshots taken at submission time."""

    __tablename__ = "stock_order_items"

    id = db.Column(db.Integer, primary_key=True)
    stock_order_id = db.Column(
        db.Integer,
        db.ForeignKey("stock_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    attribute_id = db.Column(db.Integer, nullable=True)
    attribute_name = db.Column(db.String(100))
    attribute_value = db.Column(db.String(100))

    def __repr__(self):
        return f"<StockOrderItem {self.quantity}x {self.product_name}>"
