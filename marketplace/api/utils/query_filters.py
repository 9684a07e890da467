from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy import or_

from marketplace.api.utils.pagination import resolve_column
from marketplace.errors import ApiError

RESERVED_PARAMS = ("page", "limit", "sort", "searchTerm")

_TRUE = ("1", "true", "t", "yes", "y", "on")
_FALSE = ("0", "false", "f", "no", "n", "off")


def split_params(args, extra_reserved=()) -> tuple[str, dict]:
    """Separate ``searchTerm`` and the free-form equality filters from the pagination keys."""
    reserved = set(RESERVED_PARAMS) | set(extra_reserved)
    search_term = (args.get("searchTerm") or "").strip()
    filters = {k: args.get(k) for k in args.keys() if k not in reserved}
    return search_term, filters


def _parse_datetime(s: str) -> datetime:
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    value = datetime.fromisoformat(s)
    if value.tzinfo is not None:
        # stored timestamps are naive UTC
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _coerce(column, field: str, raw):
    try:
        py_type = column.type.python_type
    except NotImplementedError:
        return raw

    if not isinstance(raw, str) and isinstance(raw, py_type):
        return raw
    s = str(raw).strip()
    try:
        if py_type is bool:
            if s.lower() in _TRUE:
                return True
            if s.lower() in _FALSE:
                return False
            raise ValueError(s)
        if py_type is int:
            return int(s)
        if py_type is datetime:
            return _parse_datetime(s)
        if py_type is date:
            return date.fromisoformat(s)
        if py_type is Decimal:
            return Decimal(s)
    except (ValueError, InvalidOperation):
        raise ApiError(400, f"Invalid value '{raw}' for filter '{field}'")
    return s


def build_equality_filters(model, filters: dict) -> list:
    """One ``column == value`` per non-empty filter; the caller ANDs them together."""
    conditions = []
    for field, raw in filters.items():
        if not raw:
            continue
        column = resolve_column(model, field)
        conditions.append(column == _coerce(column, field, raw))
    return conditions


def search_condition(model, term: str, fields):
    if not term:
        return None
    like = f"%{term}%"
    return or_(*(getattr(model, f).ilike(like) for f in fields))
