from datetime import datetime, timezone
from storefront.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    price = db.Column(db.Integer, nullable=False)  # in cents
    cost = db.Column(db.Integer, nullable=False, default=0)  # in cents
    # Cached sum of active variant quantities; the ledger is the source of truth
    stock = db.Column(db.Integer, nullable=False, default=0)
    attribute_ids = db.Column(db.JSON, default=list)  # [3, 7, 9]
    category_id = db.Column(
        db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True
    )
    subcategory_id = db.Column(
        db.Integer, db.ForeignKey("subcategories.id"), nullable=True, index=True
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    is_new = db.Column(db.Boolean, nullable=False, default=False)
    cover_image = db.Column(db.String(1024))
    hover_image = db.Column(db.String(1024))
    product_images = db.Column(db.JSON, default=list)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    variants = db.relationship(
        "VariantInventory",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
    )

    @property
    def price_display(self):
        """Price in whole currency units for display."""
        return self.price / 100

    @property
    def has_attributes(self):
        return bool(self.attribute_ids)

    def __repr__(self):
        return f"<Product {self.id}: {self.name}>"
