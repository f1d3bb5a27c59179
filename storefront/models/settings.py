from datetime import datetime, timezone
from flask import current_app
from storefront.extensions import db


class Settings(db.Model):
    """Key/value shop settings editable without a deploy."""

    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # key -> config entry holding its initial value
    SEEDED_FROM_CONFIG = {
        "whatsapp_number": "DEFAULT_WHATSAPP_NUMBER",
        "low_stock_threshold": "DEFAULT_LOW_STOCK_THRESHOLD",
    }

    @staticmethod
    def get(key, default=None):
        row = db.session.get(Settings, key)
        return row.value if row else default

    @staticmethod
    def set(key, value):
        row = db.session.get(Settings, key)
        if row:
            row.value = str(value)
        else:
            row = Settings(key=key, value=str(value))
            db.session.add(row)
        db.session.commit()
        return row

    @staticmethod
    def seed_defaults():
        """Insert missing seeded keys; returns the keys that were added."""
        added = []
        for key, config_key in Settings.SEEDED_FROM_CONFIG.items():
            if db.session.get(Settings, key) is None:
                db.session.add(Settings(key=key, value=str(current_app.config[config_key])))
                added.append(key)
        db.session.commit()
        return added

    @staticmethod
    def get_whatsapp_number():
        return Settings.get("whatsapp_number", current_app.config["DEFAULT_WHATSAPP_NUMBER"])

    @staticmethod
    def get_low_stock_threshold():
        raw = Settings.get("low_stock_threshold")
        try:
            return int(raw)
        except (TypeError, ValueError):
            return current_app.config["DEFAULT_LOW_STOCK_THRESHOLD"]

    def __repr__(self):
        return f"<Settings {self.key}={self.value}>"
