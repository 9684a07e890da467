# marketplace/services/order_service.py
"""
Order use cases: checkout with payment initiation, the three scoped
listings (customer / vendor / admin) and the forward-only status machine.

Route handlers stay thin; everything that touches Order rows goes through
here so the blacklist and ownership rules live in one place.
"""
from __future__ import annotations

import random
import time
from decimal import Decimal, InvalidOperation

from flask import current_app
from sqlalchemy.orm import selectinload

from marketplace.api.utils.email import send_email
from marketplace.api.utils.pagination import PageParams, paginate_query
from marketplace.api.utils.payment_gateway import initiate_payment
from marketplace.api.utils.query_filters import build_equality_filters
from marketplace.api.utils.serializers import order_dict
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import (
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    Shop,
    UserRole,
    Vendor,
)

# DELIVERED maps to itself: advancing a delivered order is a no-op
STATUS_SEQUENCE = {
    OrderStatus.PENDING: OrderStatus.ONGOING,
    OrderStatus.ONGOING: OrderStatus.DELIVERED,
    OrderStatus.DELIVERED: OrderStatus.DELIVERED,
}


def generate_transaction_id() -> str:
    """``TXN-<epoch millis>-<0..99999>``; collision-unlikely, not a secure identifier."""
    timestamp = int(time.time() * 1000)
    return f"TXN-{timestamp}-{random.randint(0, 99999)}"


# ---- payload parsing -------------------------------------------------------

def _to_decimal(val, field: str, default=None) -> Decimal:
    if val is None or val == "":
        if default is None:
            raise ApiError(400, f"Missing '{field}'")
        val = default
    try:
        d = Decimal(str(val))
    except (InvalidOperation, ValueError):
        raise ApiError(400, f"Invalid value for '{field}'")
    if d < 0:
        raise ApiError(400, f"'{field}' must not be negative")
    return d


def _to_int(val, field: str) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ApiError(400, f"Invalid value for '{field}'")


def _parse_items(items_in) -> list[dict]:
    if not isinstance(items_in, list) or not items_in:
        raise ApiError(400, "Order must contain at least one item")

    items = []
    for idx, it in enumerate(items_in):
        if not isinstance(it, dict):
            raise ApiError(400, f"Item #{idx} must be an object")
        quantity = _to_int(it.get("quantity", 1), f"items[{idx}].quantity")
        if quantity < 1:
            raise ApiError(400, f"'items[{idx}].quantity' must be at least 1")
        items.append({
            "shop_id": _to_int(it.get("shopId"), f"items[{idx}].shopId"),
            "product_id": _to_int(it.get("productId"), f"items[{idx}].productId"),
            "size": (str(it.get("size")).strip() or None) if it.get("size") is not None else None,
            "quantity": quantity,
            "price": _to_decimal(it.get("price"), f"items[{idx}].price"),
            "discount": _to_decimal(it.get("discount"), f"items[{idx}].discount", default=0),
        })
    return items


def _parse_order_payload(data: dict) -> dict:
    return {
        "coupon_id": (str(data.get("couponId")).strip() or None) if data.get("couponId") else None,
        "sub_total": _to_decimal(data.get("subTotal"), "subTotal"),
        "total": _to_decimal(data.get("total"), "total"),
        "discounts": _to_decimal(data.get("discounts"), "discounts", default=0),
        "items": _parse_items(data.get("items")),
    }


# ---- access helpers --------------------------------------------------------

def _customer_for(user) -> Customer:
    customer = Customer.query.filter_by(email=user.email).first()
    if not customer:
        raise ApiError(404, "Customer not found")
    return customer


def _vendor_for(user) -> Vendor:
    vendor = Vendor.query.filter_by(email=user.email).first()
    if not vendor:
        raise ApiError(404, "Vendor not found")
    return vendor


def _vendor_scope(vendor_id: int):
    return Order.items.any(OrderItem.shop.has(Shop.vendor_id == vendor_id))


def _order_touches_vendor(order: Order, vendor_id: int) -> bool:
    return any(it.shop is not None and it.shop.vendor_id == vendor_id for it in order.items)


def _check_access(order: Order, user) -> None:
    if user is None or user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.CUSTOMER:
        if order.customer_id != _customer_for(user).id:
            raise ApiError(403, "You do not have access to this order")
    elif user.role == UserRole.VENDOR:
        if not _order_touches_vendor(order, _vendor_for(user).id):
            raise ApiError(403, "You do not have access to this order")


# ---- checkout --------------------------------------------------------------

def _validate_products(items: list[dict]) -> None:
    for it in items:
        product = db.session.get(Product, it["product_id"])
        if not product or product.is_deleted:
            raise ApiError(404, f"Product {it['product_id']} not found")
        if product.shop_id != it["shop_id"]:
            raise ApiError(400, f"Product {product.id} does not belong to shop {it['shop_id']}")


def _send_order_confirmation(order: Order, customer: Customer, pay_link: str) -> None:
    lines = [
        f"Hello {customer.name},",
        "",
        "thank you for your order. Summary:",
        f"Order: #{order.id}",
        f"Transaction: {order.transaction_id}",
        "",
        "Items:",
    ]
    for it in order.items:
        lines.append(f"- product {it.product_id} x {it.quantity} @ {it.price:.2f}")
    lines += [
        "",
        f"Subtotal: {order.sub_total:.2f}",
        f"Discounts: {order.discounts:.2f}",
        f"Total: {order.total:.2f}",
        "",
        f"Complete your payment here: {pay_link}",
    ]
    try:
        send_email(
            subject=f"Order #{order.id} received",
            recipients=[customer.email],
            body="\n".join(lines),
        )
    except Exception:
        current_app.logger.exception("[ORDER] confirmation e-mail failed order=%s", order.id)

    owner = current_app.config.get("ORDER_NOTIFY_EMAIL")
    if owner:
        try:
            send_email(
                subject=f"New order #{order.id} ({order.transaction_id})",
                recipients=[owner],
                body=f"Order #{order.id}\nCustomer: {customer.name} <{customer.email}>\nTotal: {order.total:.2f}",
            )
        except Exception:
            current_app.logger.exception("[ORDER] owner notification failed order=%s", order.id)


def create_order(payload: dict, user) -> dict:
    """
    Place an order for the requesting customer and open a payment session.

    The whole order is rejected when any item points at a blacklisted shop.
    Order and items are inserted in one commit; the blacklist lookup runs
    before it, outside that transaction. Gateway errors propagate to the
    caller after the order is stored (payment stays PENDING).
    """
    customer = Customer.query.filter_by(email=user.email).first()
    if not customer:
        raise ApiError(404, "Customer not found for payment")

    info = _parse_order_payload(payload)

    blacklisted_ids = {
        shop_id for (shop_id,) in db.session.query(Shop.id).filter(Shop.is_blacklisted.is_(True))
    }
    offending = next((it for it in info["items"] if it["shop_id"] in blacklisted_ids), None)
    if offending:
        current_app.logger.info("[ORDER] rejected: shop %s blacklisted (customer=%s)", offending["shop_id"], customer.id)
        raise ApiError(400, f"Order cannot be placed as shop {offending['shop_id']} is blacklisted.")

    _validate_products(info["items"])

    order = Order(
        coupon_id=info["coupon_id"],
        sub_total=info["sub_total"],
        total=info["total"],
        discounts=info["discounts"],
        customer_id=customer.id,
        transaction_id=generate_transaction_id(),
        payment_status=PaymentStatus.PENDING,
        status=OrderStatus.PENDING,
        items=[OrderItem(**it) for it in info["items"]],
    )
    db.session.add(order)
    db.session.commit()
    current_app.logger.info("[ORDER] created order=%s txn=%s items=%s", order.id, order.transaction_id, len(order.items))

    payment_info = initiate_payment(
        amount=order.sub_total,
        transaction_id=order.transaction_id,
        customer=customer,
        order_id=order.id,
    )
    pay_link = payment_info["payment_url"]

    _send_order_confirmation(order, customer, pay_link)

    data = order_dict(order)
    data["payLink"] = pay_link
    return data


# ---- listings --------------------------------------------------------------

def _list_orders(params: PageParams, filters: dict, scope=None, pending: bool = False,
                 with_customer: bool = False, with_shop: bool = False) -> dict:
    conditions = build_equality_filters(Order, filters)
    if scope is not None:
        conditions.append(scope)
    if pending:
        conditions.append(Order.status != OrderStatus.DELIVERED)

    query = Order.query.options(
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.items).selectinload(OrderItem.shop),
    ).filter(*conditions)

    rows, total = paginate_query(query, Order, params)
    return {
        "meta": params.meta(total),
        "data": [
            order_dict(o, with_shop=with_shop, with_customer=with_customer) for o in rows
        ],
    }


def list_customer_orders(user, params: PageParams, filters: dict, pending: bool = False) -> dict:
    customer = _customer_for(user)
    return _list_orders(params, filters, scope=Order.customer_id == customer.id, pending=pending)


def list_vendor_orders(user, params: PageParams, filters: dict, pending: bool = False) -> dict:
    vendor = _vendor_for(user)
    return _list_orders(
        params, filters, scope=_vendor_scope(vendor.id), pending=pending, with_customer=True
    )


def list_all_orders(params: PageParams, filters: dict, pending: bool = False) -> dict:
    return _list_orders(params, filters, pending=pending, with_customer=True, with_shop=True)


def list_pending_orders(params: PageParams, filters: dict) -> dict:
    return list_all_orders(params, filters, pending=True)


def get_order(order_id: int, user=None) -> dict:
    order = db.session.get(Order, order_id)
    if not order:
        raise ApiError(404, f"Order with ID {order_id} not found")
    _check_access(order, user)
    return order_dict(order, with_shop=True, with_customer=True)


# ---- status ----------------------------------------------------------------

def advance_order_status(order_id: int, user=None) -> dict:
    order = db.session.get(Order, order_id)
    if not order:
        raise ApiError(404, f"Order with ID {order_id} not found")
    if user is not None and user.role == UserRole.VENDOR:
        _check_access(order, user)

    current_status = order.status
    next_status = STATUS_SEQUENCE.get(current_status)
    if not next_status:
        raise ApiError(400, f"Invalid current status: {current_status}")

    order.status = next_status
    db.session.commit()
    current_app.logger.info("[ORDER] order=%s status %s -> %s", order.id, current_status, next_status)
    return order_dict(order)
