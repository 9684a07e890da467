from flask import Blueprint, request
from flask_login import current_user

from marketplace.api.utils.pagination import calculate_pagination
from marketplace.api.utils.query_filters import split_params
from marketplace.api.utils.responses import get_payload, send_response
from marketplace.auth.guards import auth_required
from marketplace.models import UserRole
from marketplace.services import order_service

order_bp = Blueprint("order_bp", __name__, url_prefix="/api/order")


def _list_args():
    params = calculate_pagination(request.args)
    _, filters = split_params(request.args, extra_reserved=("pending",))
    pending = (request.args.get("pending") or "").strip().lower() in ("1", "true", "yes")
    return params, filters, pending


@order_bp.post("/")
@auth_required(UserRole.CUSTOMER)
def create_order():
    data = order_service.create_order(get_payload(), current_user)
    return send_response(data, "Order created", 201)


@order_bp.get("/my-orders")
@auth_required(UserRole.CUSTOMER)
def my_orders():
    params, filters, pending = _list_args()
    result = order_service.list_customer_orders(current_user, params, filters, pending=pending)
    return send_response(result["data"], "Orders retrieved", meta=result["meta"])


@order_bp.get("/shop-orders")
@auth_required(UserRole.VENDOR)
def shop_orders():
    params, filters, pending = _list_args()
    result = order_service.list_vendor_orders(current_user, params, filters, pending=pending)
    return send_response(result["data"], "Orders retrieved", meta=result["meta"])


@order_bp.get("/")
@auth_required(UserRole.ADMIN)
def all_orders():
    params, filters, pending = _list_args()
    result = order_service.list_all_orders(params, filters, pending=pending)
    return send_response(result["data"], "Orders retrieved", meta=result["meta"])


@order_bp.get("/pending")
@auth_required(UserRole.ADMIN)
def pending_orders():
    params, filters, _ = _list_args()
    result = order_service.list_pending_orders(params, filters)
    return send_response(result["data"], "Pending orders retrieved", meta=result["meta"])


@order_bp.get("/<int:order_id>")
@auth_required()
def get_order(order_id: int):
    return send_response(order_service.get_order(order_id, current_user), "Order retrieved")


@order_bp.patch("/<int:order_id>/status")
@auth_required(UserRole.ADMIN, UserRole.VENDOR)
def advance_status(order_id: int):
    return send_response(order_service.advance_order_status(order_id, current_user), "Order status updated")
