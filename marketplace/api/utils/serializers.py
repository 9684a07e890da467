# marketplace/api/utils/serializers.py
from __future__ import annotations

from decimal import Decimal

from marketplace.models import (
    Category,
    Customer,
    Order,
    OrderItem,
    Product,
    Shop,
    User,
    Vendor,
)


def _num(v) -> float | None:
    if v is None:
        return None
    return float(v) if isinstance(v, Decimal) else v


def _iso(dt) -> str | None:
    return dt.isoformat() if dt else None


def user_dict(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "role": u.role,
        "status": u.status,
        "needsPasswordChange": bool(u.needs_password_change),
        "createdAt": _iso(u.created_at),
        "updatedAt": _iso(u.updated_at),
    }


def customer_dict(c: Customer | None) -> dict | None:
    if c is None:
        return None
    return {
        "id": c.id,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "address": c.address,
        "profilePhoto": c.profile_photo,
        "isDeleted": bool(c.is_deleted),
        "createdAt": _iso(c.created_at),
    }


def vendor_dict(v: Vendor | None) -> dict | None:
    if v is None:
        return None
    return {
        "id": v.id,
        "name": v.name,
        "email": v.email,
        "phone": v.phone,
        "address": v.address,
        "logo": v.logo,
        "isDeleted": bool(v.is_deleted),
        "createdAt": _iso(v.created_at),
    }


def category_dict(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "createdAt": _iso(c.created_at),
    }


def shop_dict(s: Shop, with_vendor: bool = False) -> dict:
    data = {
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "logo": s.logo,
        "vendorId": s.vendor_id,
        "isBlacklisted": bool(s.is_blacklisted),
        "createdAt": _iso(s.created_at),
        "updatedAt": _iso(s.updated_at),
    }
    if with_vendor:
        data["vendor"] = vendor_dict(s.vendor)
    return data


def product_dict(p: Product) -> dict:
    images = [x for x in (p.images or "").split(",") if x]
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "price": _num(p.price),
        "discount": _num(p.discount),
        "inventory": p.inventory,
        "images": images,
        "categoryId": p.category_id,
        "shopId": p.shop_id,
        "isDeleted": bool(p.is_deleted),
        "createdAt": _iso(p.created_at),
    }


def order_item_dict(it: OrderItem, with_shop: bool = False) -> dict:
    data = {
        "id": it.id,
        "orderId": it.order_id,
        "shopId": it.shop_id,
        "productId": it.product_id,
        "size": it.size,
        "quantity": it.quantity,
        "price": _num(it.price),
        "discount": _num(it.discount),
        "product": product_dict(it.product) if it.product is not None else None,
    }
    if with_shop:
        data["shop"] = shop_dict(it.shop) if it.shop is not None else None
    return data


def order_dict(o: Order, with_items: bool = True, with_shop: bool = False,
               with_customer: bool = False) -> dict:
    data = {
        "id": o.id,
        "subTotal": _num(o.sub_total),
        "total": _num(o.total),
        "discounts": _num(o.discounts),
        "couponId": o.coupon_id,
        "customerId": o.customer_id,
        "transactionId": o.transaction_id,
        "paymentStatus": o.payment_status,
        "status": o.status,
        "createdAt": _iso(o.created_at),
        "updatedAt": _iso(o.updated_at),
    }
    if with_items:
        data["items"] = [order_item_dict(it, with_shop=with_shop) for it in o.items]
    if with_customer:
        data["customer"] = customer_dict(o.customer)
    return data
