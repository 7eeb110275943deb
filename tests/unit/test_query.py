"""Unit tests for core.query: predicates, sort, projection and ids."""

from datetime import datetime, timezone

import pytest

from core.collection import TEXT_SEARCH_KEY, AnyOf, Contains, Equals, Range, TextSearch
from core.query import (
    FilterRequest,
    build_projection,
    build_query,
    build_sort,
    contains_filter,
    is_valid_id,
    new_id,
    split_tags,
    year_range,
)

SEARCHABLE = ("title", "description")


def test_empty_filters_build_empty_predicate():
    assert build_query(FilterRequest(), SEARCHABLE) == {}


def test_text_query_becomes_any_term_search():
    predicate = build_query(FilterRequest(text_query="  FastAPI  Postgres "), SEARCHABLE)
    assert predicate == {TEXT_SEARCH_KEY: TextSearch(terms=("fastapi", "postgres"))}


def test_text_query_ignored_without_searchable_fields():
    assert build_query(FilterRequest(text_query="anything"), ()) == {}


def test_punctuation_only_text_query_is_dropped():
    assert build_query(FilterRequest(text_query="!!! ..."), SEARCHABLE) == {}


def test_tags_are_split_trimmed_lowercased_and_deduplicated():
    assert split_tags(" Python, ,ML,python ,  ") == ("python", "ml")


def test_tags_filter_matches_any_tag():
    predicate = build_query(FilterRequest(tags="python,ml"), SEARCHABLE)
    assert predicate == {"tags": AnyOf(("python", "ml"))}
    assert predicate["tags"].matches(["ml", "go"])
    assert not predicate["tags"].matches(["go"])


def test_tags_of_only_commas_add_nothing():
    assert build_query(FilterRequest(tags=",,,"), SEARCHABLE) == {}


def test_status_is_exact_match():
    predicate = build_query(FilterRequest(status="completed"), SEARCHABLE)
    assert predicate == {"status": Equals("completed")}


def test_date_bounds_apply_to_created_at():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 6, 30, tzinfo=timezone.utc)

    predicate = build_query(FilterRequest(start_date=start, end_date=end), SEARCHABLE)
    assert predicate == {"createdAt": Range(gte=start, lte=end)}

    only_start = build_query(FilterRequest(start_date=start), SEARCHABLE)
    assert only_start["createdAt"] == Range(gte=start)


def test_filters_combine():
    predicate = build_query(
        FilterRequest(text_query="api", tags="web", status="idea"),
        SEARCHABLE,
    )
    assert set(predicate) == {TEXT_SEARCH_KEY, "tags", "status"}


def test_contains_filter_is_literal_and_case_insensitive():
    condition = contains_filter("a.b (c)")
    assert condition == Contains("a.b (c)")
    assert condition.matches("Paper on A.B (C) systems")
    assert not condition.matches("axb c")
    assert contains_filter("   ") is None
    assert contains_filter(None) is None


def test_year_range_is_half_open_utc_calendar_year():
    condition = year_range(2023)
    assert condition.matches("2023-01-01T00:00:00+00:00")
    assert condition.matches("2023-12-31T23:59:59+00:00")
    assert not condition.matches("2024-01-01T00:00:00+00:00")
    assert not condition.matches("2022-12-31T23:59:59+00:00")


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("-createdAt", {"createdAt": -1}),
        ("title", {"title": 1}),
        (None, {"createdAt": -1}),
        ("", {"createdAt": -1}),
        ("-", {"createdAt": -1}),
    ],
)
def test_build_sort(token, expected):
    assert build_sort(token) == expected


def test_build_sort_uses_resource_default():
    assert build_sort(None, "-publishedDate") == {"publishedDate": -1}


def test_build_projection():
    assert build_projection("title, tags,,") == frozenset({"title", "tags"})
    assert build_projection(None) == frozenset()
    assert build_projection(" , ") == frozenset()


@pytest.mark.parametrize(
    ("value", "valid"),
    [
        ("507f1f77bcf86cd799439011", True),
        ("507F1F77BCF86CD799439011", True),
        ("507f1f77bcf86cd79943901", False),
        ("507f1f77bcf86cd7994390111", False),
        ("507f1f77bcf86cd79943901z", False),
        ("507f1f77bcf86cd799439011\n", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_id(value, valid):
    assert is_valid_id(value) is valid


def test_new_id_is_valid_and_unique():
    ids = {new_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(is_valid_id(value) for value in ids)
