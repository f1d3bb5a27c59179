from datetime import datetime, timezone
from storefront.extensions import db


class VariantInventory(db.Model):
    """Stock ledger row for one (product, attribute) pairing.

    ``variant_data`` holds a copy of the attribute it stands for, see
    :class:`storefront.services.variant_data.VariantData`. The attribute id in
    it is a soft reference: there is no foreign key to ``product_attributes``.
    """

    __tablename__ = "product_variant_inventory"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    variant_data = db.Column(db.JSON, nullable=False, default=dict)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    reserved_quantity = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_variant_quantity_non_negative"),
        db.CheckConstraint(
            "reserved_quantity >= 0", name="ck_variant_reserved_non_negative"
        ),
    )

    def __repr__(self):
        return f"<VariantInventory product={self.product_id} qty={self.quantity}>"
