# tests/unit/pagination/test_pagination_schemas.py

import pytest
from pydantic import ValidationError

from doc_paginate.pagination.schemas import (
    Page,
    PagePosition,
    PaginationOptions,
    page_count,
)


class TestPaginationOptions:
    def test_defaults(self):
        options = PaginationOptions()
        assert options.limit == 10
        assert options.lean is False
        assert options.lean_with_id is True
        assert options.populate_items == []

    def test_camel_case_alias(self):
        options = PaginationOptions.model_validate({"leanWithId": False})
        assert options.lean_with_id is False

    @pytest.mark.parametrize(
        "values, expected",
        [
            ({}, PagePosition(skip=0, offset=0)),
            ({"offset": 5}, PagePosition(skip=5, offset=5)),
            ({"page": 3, "limit": 20}, PagePosition(skip=40, page=3)),
            ({"page": 2, "offset": 7}, PagePosition(skip=7, offset=7)),
        ],
    )
    def test_position_precedence(self, values, expected):
        assert PaginationOptions(**values).position() == expected

    def test_populate_items_wraps_single_item(self):
        assert PaginationOptions(populate="author").populate_items == ["author"]
        assert PaginationOptions(populate=("a", "b")).populate_items == ["a", "b"]

    def test_merge_keeps_unset_defaults(self):
        defaults = PaginationOptions(limit=25, sort="-id", leanWithId=False)
        merged = PaginationOptions(page=2, sort="title").merged_over(defaults)

        assert merged.limit == 25
        assert merged.sort == "title"
        assert merged.page == 2
        assert merged.lean_with_id is False

    def test_merge_lets_explicit_defaults_through(self):
        defaults = PaginationOptions(limit=25)
        merged = PaginationOptions(limit=10).merged_over(defaults)
        assert merged.limit == 10

    @pytest.mark.parametrize("limit, expected", [(None, 0), (0, 0), (25, 25)])
    def test_effective_limit(self, limit, expected):
        assert PaginationOptions(limit=limit).effective_limit == expected

    def test_null_lean_is_off(self):
        assert PaginationOptions(lean=None).is_lean is False

    def test_null_limit_in_page_mode(self):
        assert PaginationOptions(limit=None, page=3).position() == PagePosition(
            skip=0, page=3
        )

    def test_options_are_immutable(self):
        options = PaginationOptions()
        with pytest.raises(ValidationError):
            options.limit = 50


class TestPage:
    def test_assemble_offset_mode(self):
        page = Page.assemble([1, 2], 12, 2, PagePosition(skip=4, offset=4))
        assert page.envelope() == {"docs": [1, 2], "total": 12, "limit": 2, "offset": 4}

    def test_assemble_page_mode(self):
        page = Page.assemble([1, 2], 11, 2, PagePosition(skip=2, page=2))
        assert page.envelope() == {
            "docs": [1, 2],
            "total": 11,
            "limit": 2,
            "page": 2,
            "pages": 6,
        }

    def test_rejects_both_positions(self):
        with pytest.raises(ValidationError):
            Page(docs=[], total=0, limit=10, offset=0, page=1, pages=1)

    def test_rejects_missing_position(self):
        with pytest.raises(ValidationError):
            Page(docs=[], total=0, limit=10)

    def test_rejects_page_without_pages(self):
        with pytest.raises(ValidationError):
            Page(docs=[], total=0, limit=10, page=1)

    @pytest.mark.parametrize(
        "total, limit, expected",
        [(0, 10, 1), (1, 10, 1), (10, 10, 1), (11, 10, 2), (95, 10, 10), (5, 0, 1)],
    )
    def test_page_count(self, total, limit, expected):
        assert page_count(total, limit) == expected
