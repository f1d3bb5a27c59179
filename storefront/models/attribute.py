from datetime import datetime, timezone
from storefront.extensions import db


class Attribute(db.Model):
    """A selectable option value (e.g. Color=Rojo) scoped to a subcategory."""

    __tablename__ = "product_attributes"

    id = db.Column(db.Integer, primary_key=True)
    subcategory_id = db.Column(
        db.Integer,
        db.ForeignKey("subcategories.id"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(100), nullable=False)  # "Color"
    type = db.Column(db.String(20), nullable=False, default="variant")
    value = db.Column(db.String(100), nullable=False)  # "Rojo"
    description = db.Column(db.Text)
    color_hex = db.Column(db.String(9))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.Index(
            "uq_attribute_option",
            "subcategory_id",
            db.func.lower(name),
            db.func.lower(value),
            unique=True,
            postgresql_where=db.text("is_active"),
            sqlite_where=db.text("is_active"),
        ),
    )

    TYPES = {"color", "aroma", "size", "material", "style", "variant"}

    def __repr__(self):
        return f"<Attribute {self.name}: {self.value}>"
