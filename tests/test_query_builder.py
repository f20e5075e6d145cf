"""Tests for search parameter parsing."""

import pytest

from recipe_share.models.enums import Difficulty, RecipeType
from recipe_share.services.errors import ValidationError
from recipe_share.services.query_builder import (
    MAX_PAGE,
    SearchFilters,
    parse_range,
    parse_search_params,
    parse_sort,
)


class TestParseRange:
    """Tests for the min:max range token grammar."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("2:4", (2, 4)),
            ("2:", (2, None)),
            (":4", (None, 4)),
            (" 2 : 4 ", (2, 4)),
            ("3", (3, 3)),
            (":", (None, None)),
        ],
    )
    def test_valid_tokens(self, token, expected):
        assert parse_range(token) == expected

    @pytest.mark.parametrize(
        "token",
        ["a:b", "2:b", "a:4", "1:2:3", "", "2.5:4", "1" + "0" * 20 + ":", ":-9" + "9" * 19],
    )
    def test_invalid_tokens(self, token):
        with pytest.raises(ValueError):
            parse_range(token)


class TestParseSort:
    """Tests for the sortBy token list."""

    def test_direction_defaults_to_ascending(self):
        assert parse_sort("name") == [("name", False)]

    def test_multiple_pairs(self):
        assert parse_sort("rations:desc, name:ASC") == [("rations", True), ("name", False)]

    @pytest.mark.parametrize("token", ["calories", "name:up", "name:desc:extra"])
    def test_invalid_tokens(self, token):
        with pytest.raises(ValueError):
            parse_sort(token)


class TestParseSearchParams:
    """Tests for building SearchFilters from query-string values."""

    def test_empty_params_are_unfiltered(self):
        filters = parse_search_params({})
        assert filters == SearchFilters()
        assert filters.is_unfiltered
        assert filters.page == 0

    def test_page_alone_is_unfiltered(self):
        filters = parse_search_params({"page": "3"})
        assert filters.is_unfiltered
        assert filters.page == 3

    def test_blank_values_are_ignored(self):
        assert parse_search_params({"name": "  ", "kitchen": ""}).is_unfiltered

    def test_all_filters(self):
        filters = parse_search_params(
            {
                "name": "paella",
                "description": "rice",
                "difficulty": "hard",
                "userId": "12",
                "kitchen": "Spanish",
                "rations": "2:4",
                "time": ":60",
                "type": "main",
                "ingredient": "saffron",
                "tag": "seafood",
                "sortBy": "time:desc",
                "page": "1",
            }
        )
        assert filters.name == "paella"
        assert filters.difficulty == Difficulty.HARD
        assert filters.user_id == 12
        assert filters.rations == (2, 4)
        assert filters.time == (None, 60)
        assert filters.type == RecipeType.MAIN
        assert filters.sort_by == [("time", True)]
        assert filters.page == 1
        assert not filters.is_unfiltered

    def test_sort_alone_is_filtered(self):
        assert not parse_search_params({"sortBy": "name"}).is_unfiltered

    def test_reports_every_bad_parameter(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_params({"rations": "a:b", "time": "1:x", "sortBy": "nope", "page": "-2"})

        assert set(exc_info.value.errors) == {"rations", "time", "sortBy", "page"}
        assert exc_info.value.status_code == 400

    def test_oversized_numbers_are_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_params(
                {"rations": "1" + "0" * 20 + ":", "userId": "9" * 20, "page": "9" * 19}
            )

        assert set(exc_info.value.errors) == {"rations", "userId", "page"}

    def test_largest_page_is_accepted(self):
        assert parse_search_params({"page": str(MAX_PAGE)}).page == MAX_PAGE

    def test_messages_are_localized(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_params({"rations": "a:b"}, locale="es")

        assert exc_info.value.errors["rations"].startswith("Se esperaba")
