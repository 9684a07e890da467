from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import Blueprint, request, current_app
from flask_login import current_user

from marketplace.api.routes.shop_routes import current_vendor, get_shop
from marketplace.api.utils.pagination import calculate_pagination, paginate_query
from marketplace.api.utils.query_filters import build_equality_filters, search_condition, split_params
from marketplace.api.utils.responses import get_payload, payload_str, send_response
from marketplace.api.utils.serializers import category_dict, product_dict, shop_dict
from marketplace.auth.guards import auth_required
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import Category, Product, Shop, UserRole

api_products = Blueprint("api_products", __name__, url_prefix="/api/product")

PRODUCT_SEARCH_FIELDS = ("name", "description")


def _to_decimal(val, field: str) -> Decimal:
    try:
        d = Decimal(str(val))
    except (InvalidOperation, ValueError):
        raise ApiError(400, f"Invalid value for '{field}'")
    if d < 0:
        raise ApiError(400, f"'{field}' must not be negative")
    return d


def _to_int(val, field: str) -> int:
    try:
        v = int(val)
    except (TypeError, ValueError):
        raise ApiError(400, f"Invalid value for '{field}'")
    if v < 0:
        raise ApiError(400, f"'{field}' must not be negative")
    return v


def _images(val) -> str | None:
    if isinstance(val, list):
        return ",".join(str(x).strip() for x in val if str(x).strip()) or None
    return (str(val).strip() or None) if val else None


def _get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if not p or p.is_deleted:
        raise ApiError(404, "Product not found")
    return p


def _ensure_owner(p: Product):
    if p.shop.vendor_id != current_vendor().id:
        raise ApiError(403, "You do not own this product")


@api_products.post("/")
@auth_required(UserRole.VENDOR)
def create_product():
    data = get_payload()
    name = payload_str(data, "name")
    if not name:
        raise ApiError(400, "Missing 'name'")
    if data.get("price") is None:
        raise ApiError(400, "Missing 'price'")

    shop = get_shop(_to_int(data.get("shopId"), "shopId"))
    if shop.vendor_id != current_vendor().id:
        raise ApiError(403, "You do not own this shop")
    if shop.is_blacklisted:
        raise ApiError(400, f"Shop {shop.id} is blacklisted")

    category_id = _to_int(data.get("categoryId"), "categoryId")
    if not db.session.get(Category, category_id):
        raise ApiError(404, "Category not found")

    p = Product(
        name=name,
        description=payload_str(data, "description") or None,
        price=_to_decimal(data.get("price"), "price"),
        discount=_to_decimal(data.get("discount") or 0, "discount"),
        inventory=_to_int(data.get("inventory") or 0, "inventory"),
        images=_images(data.get("images")),
        category_id=category_id,
        shop_id=shop.id,
    )
    db.session.add(p)
    db.session.commit()
    current_app.logger.info("[PRODUCT] created product=%s shop=%s", p.id, shop.id)
    return send_response(product_dict(p), "Product created", 201)


@api_products.get("/")
def list_products():
    params = calculate_pagination(request.args)
    search_term, filters = split_params(request.args)

    conditions = build_equality_filters(Product, filters)
    search = search_condition(Product, search_term, PRODUCT_SEARCH_FIELDS)
    if search is not None:
        conditions.append(search)

    q = (
        Product.query.join(Shop, Shop.id == Product.shop_id)
        .filter(Product.is_deleted.is_(False), Shop.is_blacklisted.is_(False))
        .filter(*conditions)
    )
    rows, total = paginate_query(q, Product, params)
    return send_response([product_dict(p) for p in rows], "Products retrieved", meta=params.meta(total))


@api_products.get("/<int:product_id>")
def get_product(product_id: int):
    p = _get_product(product_id)
    data = product_dict(p)
    data["shop"] = shop_dict(p.shop)
    data["category"] = category_dict(p.category)
    return send_response(data, "Product retrieved")


@api_products.patch("/<int:product_id>")
@auth_required(UserRole.VENDOR)
def update_product(product_id: int):
    p = _get_product(product_id)
    _ensure_owner(p)
    data = get_payload()

    if "name" in data:
        name = payload_str(data, "name")
        if not name:
            raise ApiError(400, "Invalid 'name'")
        p.name = name
    if "description" in data:
        p.description = payload_str(data, "description") or None
    if "price" in data:
        p.price = _to_decimal(data.get("price"), "price")
    if "discount" in data:
        p.discount = _to_decimal(data.get("discount") or 0, "discount")
    if "inventory" in data:
        p.inventory = _to_int(data.get("inventory"), "inventory")
    if "images" in data:
        p.images = _images(data.get("images"))
    if "categoryId" in data:
        category_id = _to_int(data.get("categoryId"), "categoryId")
        if not db.session.get(Category, category_id):
            raise ApiError(404, "Category not found")
        p.category_id = category_id

    db.session.commit()
    return send_response(product_dict(p), "Product updated")


@api_products.delete("/<int:product_id>")
@auth_required(UserRole.VENDOR, UserRole.ADMIN)
def delete_product(product_id: int):
    p = _get_product(product_id)
    if current_user.role == UserRole.VENDOR:
        _ensure_owner(p)
    p.is_deleted = True
    db.session.commit()
    return send_response(product_dict(p), "Product deleted")
