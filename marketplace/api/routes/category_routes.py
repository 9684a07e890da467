from __future__ import annotations

from flask import Blueprint, request

from marketplace.api.utils.pagination import calculate_pagination, paginate_query
from marketplace.api.utils.query_filters import build_equality_filters, search_condition, split_params
from marketplace.api.utils.responses import get_payload, payload_str, send_response
from marketplace.api.utils.serializers import category_dict
from marketplace.auth.guards import auth_required
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import Category, Product, UserRole

api_categories = Blueprint("api_categories", __name__, url_prefix="/api/category")

CATEGORY_SEARCH_FIELDS = ("name", "description")


def _get_category(category_id: int) -> Category:
    c = db.session.get(Category, category_id)
    if not c:
        raise ApiError(404, "Category not found")
    return c


def _name_taken(name: str, exclude_id: int | None = None) -> bool:
    q = Category.query.filter(db.func.lower(Category.name) == name.lower())
    if exclude_id:
        q = q.filter(Category.id != exclude_id)
    return q.first() is not None


@api_categories.post("/")
@auth_required(UserRole.ADMIN)
def create_category():
    data = get_payload()
    name = payload_str(data, "name")
    description = payload_str(data, "description") or None

    if not name:
        raise ApiError(400, "Missing 'name'")
    if _name_taken(name):
        raise ApiError(409, f"Category '{name}' already exists")

    c = Category(name=name, description=description)
    db.session.add(c)
    db.session.commit()
    return send_response(category_dict(c), "Category created", 201)


@api_categories.get("/")
def list_categories():
    params = calculate_pagination(request.args)
    search_term, filters = split_params(request.args)

    conditions = build_equality_filters(Category, filters)
    search = search_condition(Category, search_term, CATEGORY_SEARCH_FIELDS)
    if search is not None:
        conditions.append(search)

    rows, total = paginate_query(Category.query.filter(*conditions), Category, params)
    return send_response([category_dict(c) for c in rows], "Categories retrieved", meta=params.meta(total))


@api_categories.get("/<int:category_id>")
def get_category(category_id: int):
    return send_response(category_dict(_get_category(category_id)), "Category retrieved")


@api_categories.patch("/<int:category_id>")
@auth_required(UserRole.ADMIN)
def update_category(category_id: int):
    c = _get_category(category_id)
    data = get_payload()

    if "name" in data:
        name = payload_str(data, "name")
        if not name:
            raise ApiError(400, "Invalid 'name'")
        if _name_taken(name, exclude_id=c.id):
            raise ApiError(409, f"Category '{name}' already exists")
        c.name = name

    if "description" in data:
        c.description = payload_str(data, "description") or None

    db.session.commit()
    return send_response(category_dict(c), "Category updated")


@api_categories.delete("/<int:category_id>")
@auth_required(UserRole.ADMIN)
def delete_category(category_id: int):
    c = _get_category(category_id)
    if Product.query.filter_by(category_id=c.id).first():
        raise ApiError(409, "Category still has products")
    db.session.delete(c)
    db.session.commit()
    return send_response(category_dict(c), "Category deleted")
