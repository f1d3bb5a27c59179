"""Payload stored in ``VariantInventory.variant_data``.

``attribute_id`` is the authoritative reference. ``attribute_name``,
``attribute_value`` and ``attribute_type`` are a readable cache of the
attribute at the time the row was written and are never used to decide
which row belongs to an attribute when an id is present.

Rows written by older versions of the shop may instead look like
``{"Color": "Rojo"}`` (attribute name as key, value as value) with no id.
"""
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class VariantData:
    attribute_id: int
    attribute_name: str = ""
    attribute_value: str = ""
    attribute_type: str = ""

    @classmethod
    def for_attribute(cls, attribute):
        return cls(
            attribute_id=attribute.id,
            attribute_name=attribute.name,
            attribute_value=attribute.value,
            attribute_type=attribute.type,
        )

    @classmethod
    def from_payload(cls, payload):
        """Parse a stored payload, or return None for legacy rows without an id."""
        attribute_id = _coerce_id((payload or {}).get("attribute_id"))
        if attribute_id is None:
            return None
        return cls(
            attribute_id=attribute_id,
            attribute_name=payload.get("attribute_name") or "",
            attribute_value=payload.get("attribute_value") or "",
            attribute_type=payload.get("attribute_type") or "",
        )

    def to_payload(self):
        return asdict(self)


def _coerce_id(raw):
    # Ids may have been written as strings by the admin UI
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def payload_attribute_id(payload):
    return _coerce_id((payload or {}).get("attribute_id"))


def matches_by_id(payload, attribute_id):
    return payload_attribute_id(payload) == _coerce_id(attribute_id)


def matches_by_name_value(payload, attribute):
    """Legacy fallback: ``{attribute.name: attribute.value}`` in the payload."""
    if not payload or attribute is None:
        return False
    return payload.get(attribute.name) == attribute.value
