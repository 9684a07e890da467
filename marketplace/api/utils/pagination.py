"""Offset/limit pagination and ``field-direction`` sort parsing for list endpoints."""
from __future__ import annotations

import re
from dataclasses import dataclass
from math import ceil

from flask import current_app
from sqlalchemy import inspect

from marketplace.errors import ApiError

DEFAULT_SORT = "createdAt-desc"
SORT_DIRECTIONS = ("asc", "desc")

# "paymentStatus" splits at lower->Upper, "HTTPStatus" at acronym->Word; "ID" stays one word
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")


def to_snake(name: str) -> str:
    """``paymentStatus`` -> ``payment_status``, ``ID`` -> ``id``; snake_case passes through."""
    s = _ACRONYM_WORD.sub(r"\1_\2", (name or "").strip())
    return _LOWER_UPPER.sub(r"\1_\2", s).lower()


def resolve_column(model, field: str):
    """Map an API field name (camelCase or snake_case) to a mapped column attribute."""
    key = to_snake(field)
    columns = inspect(model).columns
    if key not in columns:
        raise ApiError(400, f"Unknown field '{field}' for {model.__name__}")
    return getattr(model, key)


def _positive_int(value, default: int) -> int:
    try:
        v = int(value)
        return v if v >= 1 else default
    except (TypeError, ValueError):
        return default


@dataclass
class PageParams:
    page: int
    limit: int
    skip: int
    sort_field: str
    sort_direction: str

    def meta(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "totalPage": ceil(total / self.limit) if self.limit else 0,
        }


def parse_sort(raw: str | None) -> tuple[str, str]:
    """``"price-asc"`` -> ``("price", "asc")``. A bare field sorts descending."""
    value = (raw or "").strip() or DEFAULT_SORT
    field, _, direction = value.partition("-")
    field = field.strip()
    direction = (direction.strip() or "desc").lower()
    if not field:
        raise ApiError(400, f"Invalid sort '{value}'")
    if direction not in SORT_DIRECTIONS:
        raise ApiError(400, f"Invalid sort direction '{direction}' (use asc or desc)")
    return field, direction


def calculate_pagination(args) -> PageParams:
    default_limit = current_app.config.get("DEFAULT_PAGE_LIMIT", 10)
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 100)

    page = _positive_int(args.get("page"), 1)
    limit = min(_positive_int(args.get("limit"), default_limit), max_limit)
    sort_field, sort_direction = parse_sort(args.get("sort"))

    return PageParams(
        page=page,
        limit=limit,
        skip=(page - 1) * limit,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


def order_by_clause(model, params: PageParams):
    column = resolve_column(model, params.sort_field)
    return column.asc() if params.sort_direction == "asc" else column.desc()


def paginate_query(query, model, params: PageParams):
    """Apply sort + offset/limit; returns (rows, total) where total counts the filtered set."""
    total = query.order_by(None).count()
    rows = (
        query.order_by(order_by_clause(model, params), model.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return rows, total
