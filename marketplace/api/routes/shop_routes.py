from __future__ import annotations

from flask import Blueprint, request, current_app
from flask_login import current_user

from marketplace.api.utils.pagination import calculate_pagination, paginate_query
from marketplace.api.utils.query_filters import build_equality_filters, search_condition, split_params
from marketplace.api.utils.responses import get_payload, payload_str, send_response
from marketplace.api.utils.serializers import product_dict, shop_dict
from marketplace.auth.guards import auth_required
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import Product, Shop, UserRole, Vendor

api_shops = Blueprint("api_shops", __name__, url_prefix="/api/shop")

SHOP_SEARCH_FIELDS = ("name", "description")


def current_vendor() -> Vendor:
    vendor = Vendor.query.filter_by(email=current_user.email, is_deleted=False).first()
    if not vendor:
        raise ApiError(404, "Vendor not found")
    return vendor


def get_shop(shop_id: int) -> Shop:
    s = db.session.get(Shop, shop_id)
    if not s:
        raise ApiError(404, "Shop not found")
    return s


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in ("1", "true", "t", "yes", "y", "on"):
        return True
    if s in ("0", "false", "f", "no", "n", "off"):
        return False
    raise ApiError(400, "Invalid 'isBlacklisted'")


@api_shops.post("/")
@auth_required(UserRole.VENDOR)
def create_shop():
    vendor = current_vendor()
    data = get_payload()
    name = payload_str(data, "name")
    if not name:
        raise ApiError(400, "Missing 'name'")

    s = Shop(
        name=name,
        description=payload_str(data, "description") or None,
        logo=payload_str(data, "logo") or None,
        vendor_id=vendor.id,
    )
    db.session.add(s)
    db.session.commit()
    current_app.logger.info("[SHOP] created shop=%s vendor=%s", s.id, vendor.id)
    return send_response(shop_dict(s), "Shop created", 201)


@api_shops.get("/")
def list_shops():
    params = calculate_pagination(request.args)
    search_term, filters = split_params(request.args)

    conditions = build_equality_filters(Shop, filters)
    search = search_condition(Shop, search_term, SHOP_SEARCH_FIELDS)
    if search is not None:
        conditions.append(search)

    rows, total = paginate_query(Shop.query.filter(*conditions), Shop, params)
    return send_response([shop_dict(s, with_vendor=True) for s in rows], "Shops retrieved", meta=params.meta(total))


@api_shops.get("/my-shops")
@auth_required(UserRole.VENDOR)
def my_shops():
    vendor = current_vendor()
    shops = Shop.query.filter_by(vendor_id=vendor.id).order_by(Shop.created_at.desc(), Shop.id.desc()).all()
    return send_response([shop_dict(s) for s in shops], "Shops retrieved")


@api_shops.get("/<int:shop_id>")
def get_shop_detail(shop_id: int):
    s = get_shop(shop_id)
    products = (
        Product.query.filter_by(shop_id=s.id, is_deleted=False)
        .order_by(Product.id.desc())
        .all()
    )
    data = shop_dict(s, with_vendor=True)
    data["products"] = [product_dict(p) for p in products]
    return send_response(data, "Shop retrieved")


@api_shops.patch("/<int:shop_id>")
@auth_required(UserRole.VENDOR)
def update_shop(shop_id: int):
    s = get_shop(shop_id)
    if s.vendor_id != current_vendor().id:
        raise ApiError(403, "You do not own this shop")

    data = get_payload()
    if "name" in data:
        name = payload_str(data, "name")
        if not name:
            raise ApiError(400, "Invalid 'name'")
        s.name = name
    if "description" in data:
        s.description = payload_str(data, "description") or None
    if "logo" in data:
        s.logo = payload_str(data, "logo") or None

    db.session.commit()
    return send_response(shop_dict(s), "Shop updated")


@api_shops.patch("/<int:shop_id>/blacklist")
@auth_required(UserRole.ADMIN)
def blacklist_shop(shop_id: int):
    s = get_shop(shop_id)
    data = get_payload()
    if "isBlacklisted" not in data:
        raise ApiError(400, "Missing 'isBlacklisted'")

    s.is_blacklisted = _to_bool(data.get("isBlacklisted"))
    db.session.commit()
    current_app.logger.info("[SHOP] shop=%s blacklisted=%s", s.id, s.is_blacklisted)
    return send_response(shop_dict(s), "Shop blacklist flag updated")
