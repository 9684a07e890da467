# marketplace/models/__init__.py
from .user import User, UserRole, UserStatus
from .customer import Customer
from .vendor import Vendor
from .category import Category
from .shop import Shop
from .product import Product
from .order import Order, OrderStatus, PaymentStatus
from .order_item import OrderItem

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Customer",
    "Vendor",
    "Category",
    "Shop",
    "Product",
    "Order",
    "OrderStatus",
    "PaymentStatus",
    "OrderItem",
]
