from datetime import datetime, timezone
from storefront.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.BigInteger, nullable=True, index=True)
    action = db.Column(db.String(50), nullable=False)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    ACTIONS = {
        "RECORD_SALE",
        "RECONCILE_STOCK",
        "DELETE_ATTRIBUTE",
        "RECEIVE_STOCK_ORDER",
        "CANCEL_STOCK_ORDER",
    }

    @staticmethod
    def record(action, admin_id=None, product_id=None, payload=None):
        db.session.add(
            AuditLog(
                admin_id=admin_id,
                action=action,
                product_id=product_id,
                payload=payload,
            )
        )
        db.session.commit()

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_id}>"
