from models.app_config import AppConfig
from models.audit_log import AuditLog
from models.categories import Category
from models.products import Product
from models.clients import Client
from models.suppliers import Supplier
from models.orders import Order
from models.order_items import OrderItem
from models.supplier_orders import SupplierOrder
from models.supplier_order_items import SupplierOrderItem

__all__ = ['AppConfig', 'AuditLog', 'Category', 'Client', 'Order', 'OrderItem', 'Product', 'Supplier', 'SupplierOrder', 'SupplierOrderItem',]
