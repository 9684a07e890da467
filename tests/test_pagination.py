import pytest

from marketplace.api.utils.pagination import (
    PageParams,
    calculate_pagination,
    parse_sort,
    resolve_column,
    to_snake,
)
from marketplace.errors import ApiError
from marketplace.models import Order


class TestCalculatePagination:
    def test_defaults(self, app_ctx):
        p = calculate_pagination({})
        assert (p.page, p.limit, p.skip) == (1, 10, 0)
        assert (p.sort_field, p.sort_direction) == ("createdAt", "desc")

    def test_skip_follows_page_and_limit(self, app_ctx):
        p = calculate_pagination({"page": "3", "limit": "20"})
        assert (p.page, p.limit, p.skip) == (3, 20, 40)

    @pytest.mark.parametrize("page, limit", [("0", "-5"), ("abc", ""), (None, None)])
    def test_invalid_values_fall_back_to_defaults(self, app_ctx, page, limit):
        p = calculate_pagination({"page": page, "limit": limit})
        assert (p.page, p.limit, p.skip) == (1, 10, 0)

    def test_limit_is_capped(self, app, app_ctx):
        app.config["MAX_PAGE_LIMIT"] = 50
        assert calculate_pagination({"limit": "1000"}).limit == 50


class TestSort:
    def test_field_and_direction(self):
        assert parse_sort("total-asc") == ("total", "asc")

    def test_direction_is_case_insensitive(self):
        assert parse_sort("total-DESC") == ("total", "desc")

    def test_bare_field_sorts_descending(self):
        assert parse_sort("total") == ("total", "desc")

    def test_empty_uses_default(self):
        assert parse_sort("") == ("createdAt", "desc")

    def test_bad_direction_rejected(self):
        with pytest.raises(ApiError) as exc:
            parse_sort("total-sideways")
        assert exc.value.status_code == 400


class TestMeta:
    @pytest.mark.parametrize("total, limit, pages", [(0, 10, 0), (10, 10, 1), (11, 10, 2), (25, 5, 5)])
    def test_total_pages_rounds_up(self, total, limit, pages):
        params = PageParams(page=1, limit=limit, skip=0, sort_field="createdAt", sort_direction="desc")
        meta = params.meta(total)
        assert meta == {"page": 1, "limit": limit, "total": total, "totalPage": pages}


class TestColumns:
    def test_to_snake(self):
        assert to_snake("paymentStatus") == "payment_status"
        assert to_snake("created_at") == "created_at"

    def test_to_snake_acronyms(self):
        assert to_snake("ID") == "id"
        assert to_snake("customerID") == "customer_id"
        assert to_snake("HTTPStatus") == "http_status"

    def test_resolve_upper_case_id(self):
        assert resolve_column(Order, "ID") is Order.id

    def test_resolve_camel_case(self):
        assert resolve_column(Order, "subTotal") is Order.sub_total

    def test_unknown_column(self):
        with pytest.raises(ApiError) as exc:
            resolve_column(Order, "password")
        assert exc.value.status_code == 400
