"""Domain errors and the result value returned by core operations.

Expected failures (bad input, duplicates, missing references) are returned
inside a :class:`Result` instead of raised. ``Result.unwrap()`` turns them back
into exceptions for callers that prefer that style.
"""


class StorefrontError(Exception):
    """Base class for failures of the stock-accounting core."""

    default_message = "The operation failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Missing or invalid input. Raised before any store call."""

    default_message = "Invalid input"


class DuplicateError(StorefrontError):
    default_message = "A record with the same values already exists"


class ReferentialError(StorefrontError):
    """A referenced record (subcategory, product, attribute) does not exist."""

    default_message = "A referenced record does not exist"

    def __init__(self, message=None, reference=None):
        self.reference = reference
        super().__init__(message)


class NotFoundError(StorefrontError):
    default_message = "Record not found"

    def __init__(self, entity, record_id):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


class TransportError(StorefrontError):
    """The store was unreachable or answered with something unexpected."""

    default_message = "The data store is unavailable"


class InventoryInconsistencyWarning(UserWarning):
    """Stock bookkeeping could not be applied; the primary effect still stands."""

    def __init__(self, message, product_id=None, attribute_id=None):
        self.message = message
        self.product_id = product_id
        self.attribute_id = attribute_id
        super().__init__(message)


class Result:
    """Outcome of a core operation."""

    __slots__ = ("ok", "data", "error", "warnings")

    def __init__(self, ok, data=None, error=None, warnings=None):
        self.ok = ok
        self.data = data
        self.error = error
        self.warnings = list(warnings or [])

    @classmethod
    def success(cls, data=None, warnings=None):
        return cls(True, data=data, warnings=warnings)

    @classmethod
    def failure(cls, error, warnings=None):
        return cls(False, error=error, warnings=warnings)

    @property
    def message(self):
        if self.error is not None:
            return self.error.message
        return None

    @property
    def warning_messages(self):
        return [w.message for w in self.warnings]

    def unwrap(self):
        """Return the data or raise the carried error."""
        if not self.ok:
            raise self.error
        return self.data

    def __bool__(self):
        return self.ok

    def __repr__(self):
        if self.ok:
            return f"<Result ok data={self.data!r} warnings={len(self.warnings)}>"
        return f"<Result error={self.error!r}>"
