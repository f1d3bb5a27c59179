from storefront.models.catalog import Category, Subcategory
from storefront.models.product import Product
from storefront.models.attribute import Attribute
from storefront.models.variant import VariantInventory
from storefront.models.sale import ProductSale
from storefront.models.stock_order import StockOrder, StockOrderItem
from storefront.models.settings import Settings
from storefront.models.audit_log import AuditLog

__all__ = [
    "Category",
    "Subcategory",
    "Product",
    "Attribute",
    "VariantInventory",
    "ProductSale",
    "StockOrder",
    "StockOrderItem",
    "Settings",
    "AuditLog",
]
