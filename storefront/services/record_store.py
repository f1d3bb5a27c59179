"""Table-oriented record store over the Flask-SQLAlchemy session.

The stock-accounting services talk to storage only through this module:
select/select_one/insert/update/delete by table name, each answering with a
:class:`StoreResult` instead of raising for storage failures.
"""
import logging

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from storefront.errors import (
    DuplicateError,
    NotFoundError,
    ReferentialError,
    StorefrontError,
    TransportError,
)
from storefront.extensions import db
from storefront.models import (
    Attribute,
    Category,
    Product,
    ProductSale,
    StockOrder,
    StockOrderItem,
    Subcategory,
    VariantInventory,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "unique_violation"
FOREIGN_KEY_VIOLATION = "foreign_key_violation"
NOT_FOUND = "not_found"
TRANSPORT = "transport"

TABLES = {
    "categories": Category,
    "subcategories": Subcategory,
    "products": Product,
    "product_attributes": Attribute,
    "product_variant_inventory": VariantInventory,
    "product_sales": ProductSale,
    "stock_orders": StockOrder,
    "stock_order_items": StockOrderItem,
}


class StoreResult:
    __slots__ = ("ok", "data", "error", "code")

    def __init__(self, ok, data=None, error=None, code=None):
        self.ok = ok
        self.data = data
        self.error = error
        self.code = code

    @classmethod
    def success(cls, data=None):
        return cls(True, data=data)

    @classmethod
    def failure(cls, error, code=None):
        return cls(False, error=error, code=code)

    def __repr__(self):
        if self.ok:
            return f"<StoreResult ok data={self.data!r}>"
        return f"<StoreResult {self.code or 'error'}: {self.error}>"


def classify_error(exc):
    """Map a SQLAlchemy exception to a store error code (or None)."""
    if isinstance(exc, IntegrityError):
        orig = exc.orig
        sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        text = str(orig).lower()
        if sqlstate == "23505" or "unique constraint" in text:
            return UNIQUE_VIOLATION
        if sqlstate == "23503" or "foreign key constraint" in text:
            return FOREIGN_KEY_VIOLATION
        return None
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return TRANSPORT
    if isinstance(exc, DBAPIError) and exc.__class__.__name__ in (
        "OperationalError",
        "InterfaceError",
    ):
        return TRANSPORT
    return None


def translate_error(
    result,
    action,
    entity="Record",
    record_id=None,
    duplicate_message=None,
    reference_message=None,
    reference=None,
):
    """Turn a failed StoreResult into a domain error with a readable message."""
    if result.code == UNIQUE_VIOLATION:
        return DuplicateError(duplicate_message)
    if result.code == FOREIGN_KEY_VIOLATION:
        return ReferentialError(reference_message, reference=reference)
    if result.code == NOT_FOUND:
        return NotFoundError(entity, record_id)
    if result.code == TRANSPORT:
        return TransportError()
    return StorefrontError(f"Failed to {action}")


class RecordStore:
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    @staticmethod
    def _model(table):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _fail(self, table, operation, exc):
        self.session.rollback()
        code = classify_error(exc)
        logger.error("Store %s on %s failed (%s): %s", operation, table, code, exc)
        return StoreResult.failure(str(exc), code=code)

    def select(self, table, filters=None, order=None):
        """Rows matching equality ``filters``, sorted by ``order``.

        ``order`` is a list of column names; a leading ``-`` sorts descending.
        """
        model = self._model(table)
        stmt = db.select(model)
        for column, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, column) == value)
        for column in order or []:
            if column.startswith("-"):
                stmt = stmt.order_by(getattr(model, column[1:]).desc())
            else:
                stmt = stmt.order_by(getattr(model, column).asc())
        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            return self._fail(table, "select", e)
        return StoreResult.success(list(rows))

    def select_one(self, table, record_id):
        model = self._model(table)
        try:
            row = self.session.get(model, record_id)
        except SQLAlchemyError as e:
            return self._fail(table, "select_one", e)
        if row is None:
            return StoreResult.failure(f"{table} {record_id} not found", code=NOT_FOUND)
        return StoreResult.success(row)

    def insert(self, table, row):
        model = self._model(table)
        record = model(**row)
        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as e:
            return self._fail(table, "insert", e)
        return StoreResult.success(record)

    def update(self, table, record_id, patch):
        found = self.select_one(table, record_id)
        if not found.ok:
            return found
        record = found.data
        for column, value in patch.items():
            if not hasattr(type(record), column):
                raise ValueError(f"Unknown column {column} on {table}")
            setattr(record, column, value)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            return self._fail(table, "update", e)
        return StoreResult.success(record)

    def delete(self, table, record_id):
        found = self.select_one(table, record_id)
        if not found.ok:
            return found
        try:
            self.session.delete(found.data)
            self.session.commit()
        except SQLAlchemyError as e:
            return self._fail(table, "delete", e)
        return StoreResult.success(True)

    def apply_delta(self, table, record_id, column, delta, floor=0):
        """Add ``delta`` to an integer column in one statement, never below ``floor``.

        Runs as a single conditional UPDATE with no read before the write,
        then re-reads the row.
        """
        model = self._model(table)
        col = getattr(model, column)
        new_value = db.case((col + delta < floor, floor), else_=col + delta)
        stmt = (
            db.update(model)
            .where(model.id == record_id)
            .values({column: new_value})
            .execution_options(synchronize_session=False)
        )
        try:
            updated = self.session.execute(stmt).rowcount
            self.session.commit()
        except SQLAlchemyError as e:
            return self._fail(table, "apply_delta", e)
        if not updated:
            return StoreResult.failure(f"{table} {record_id} not found", code=NOT_FOUND)
        return self.select_one(table, record_id)


store = RecordStore()
