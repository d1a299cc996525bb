"""Unit tests for the Search service."""

import logging

import pytest

from supplejack.application.resources import Record
from supplejack.application.services import Search
from supplejack.domain.exceptions import (
    ApiNotAvailable,
    ReadTimeout,
    RequestTimeout,
    ServiceUnavailable,
    TransportError,
    UnknownAttributeError,
)
from supplejack.domain.facet import Facet
from supplejack.domain.paginated_collection import PaginatedCollection
from supplejack.domain.url_formats import CanonicalQuery


# ── Helpers ──


def _search_response(
    results: list | None = None,
    result_count: int = 42,
    facets: dict | None = None,
    **extra,
) -> dict:
    return {
        "search": {
            "results": results if results is not None else [{"id": 1, "title": "Kiwi"}, {"id": 2}],
            "result_count": result_count,
            "facets": facets or {},
            **extra,
        }
    }


# ── Construction ──


def test_construction_does_not_call_the_api(context, transport):
    Search({"text": "dog"}, context)
    assert transport.calls == []


def test_api_params_include_defaults(make_context):
    context = make_context(facets=["category", "year"], facets_per_page=5)
    search = Search({"text": "dog", "i": {"category": "Images"}}, context)

    assert search.api_params == {
        "text": "dog",
        "record_type": 0,
        "page": 1,
        "per_page": 20,
        "and": {"category": "Images"},
        "facets": "category,year",
        "facets_per_page": 5,
        "fields": "default",
        "exclude_filters_from_facets": False,
    }


def test_routing_params_are_dropped(context):
    search = Search({"controller": "records", "action": "index", "text": "dog"}, context)
    assert "controller" not in search.params
    assert "action" not in search.params


def test_page_and_record_type_are_coerced(context):
    search = Search({"page": "0", "record_type": "1", "per_page": "5"}, context)
    assert search.page == 1
    assert search.record_type == 1
    assert search.per_page == 5
    assert not search.is_record()
    assert Search({}, context).is_record()


def test_construction_decodes_the_canonical_query(context):
    search = Search(
        {"text": "dog", "i": {"category": "Images", "-year": "1900"}, "page": "3", "sort": "date"},
        context,
    )

    assert isinstance(search.query, CanonicalQuery)
    assert search.query.and_ == {"category": "Images"}
    assert search.query.without == {"year": "1900"}
    assert search.query.text == "dog"
    assert search.query.page == search.page == 3
    assert search.query.sort == "date"
    assert search.query.direction == "asc"


# ── Execution ──


def test_results_builds_records_and_paginates(context, transport):
    transport.respond("GET", "/records", _search_response())
    search = Search({"text": "kiwi"}, context)

    results = search.results()

    assert isinstance(results, PaginatedCollection)
    assert [record.id for record in results] == [1, 2]
    assert isinstance(results[0], Record)
    assert results[0].title == "Kiwi"
    assert results[1].title == "Untitled"
    assert results.total_count == 42
    assert results.total_pages == 3
    assert transport.calls[0].params["text"] == "kiwi"


def test_request_runs_once_per_search(context, transport):
    transport.respond("GET", "/records", _search_response())
    search = Search({}, context)

    search.results()
    search.total()
    search.facets()
    search.facet_pivots()

    assert len(transport.calls) == 1


def test_pagination_limit_caps_total(make_context, transport):
    transport.respond("GET", "/records", _search_response(result_count=42))
    assert Search({"pagination_limit": 10}, make_context()).results().total_count == 10
    assert Search({}, make_context(pagination_limit=100)).results().total_count == 42


def test_generic_failure_returns_empty_results(context, transport, caplog):
    transport.respond("GET", "/records", TransportError(500, "boom"))
    search = Search({}, context)

    with caplog.at_level(logging.WARNING):
        results = search.results()

    assert list(results) == []
    assert search.total() == 0
    assert search.facets() == []
    assert "boom" in caplog.text


def test_service_unavailable_raises_and_can_be_retried(context, transport):
    transport.respond("GET", "/records", ServiceUnavailable(503, "down"), _search_response())
    search = Search({}, context)

    with pytest.raises(ApiNotAvailable):
        search.results()
    assert len(search.results()) == 2


def test_timeout_raises_request_timeout(context, transport):
    transport.respond("GET", "/records", ReadTimeout(0, "slow"))
    with pytest.raises(RequestTimeout):
        Search({}, context).total()


def test_custom_record_factory(context, transport):
    transport.respond("GET", "/records", _search_response())
    search = Search({}, context, record_factory=lambda attributes, ctx: attributes["id"])
    assert list(search.results()) == [1, 2]


def test_extra_filters_are_merged_into_request(context, transport):
    transport.respond("GET", "/records", _search_response())
    search = Search({"i": {"category": "Images"}}, context)
    search.and_ = {"creator": "Smith"}
    search.or_ = {"year": ["1900", "1901"]}
    search.without = {"category": "Videos"}

    search.results()

    params = transport.calls[0].params
    assert params["and"] == {"category": "Images", "creator": "Smith"}
    assert params["or"] == {"year": ["1900", "1901"]}
    assert params["without"] == {"category": "Videos"}


# ── Caching ──


def test_cacheable_only_without_text_on_first_page(context):
    assert Search({}, context).cacheable()
    assert not Search({"text": "dog"}, context).cacheable()
    assert not Search({"page": 2}, context).cacheable()


def test_cacheable_searches_share_a_response(make_context, transport, cache):
    context = make_context(enable_caching=True)
    transport.respond("GET", "/records", _search_response())

    Search({"i": {"category": "Images"}}, context).results()
    Search({"i": {"category": "Images"}}, context).results()

    assert len(transport.calls) == 1
    assert len(cache.entries) == 1


def test_text_searches_are_not_cached(make_context, transport, cache):
    context = make_context(enable_caching=True)
    transport.respond("GET", "/records", _search_response())

    Search({"text": "dog"}, context).results()
    Search({"text": "dog"}, context).results()

    assert len(transport.calls) == 2
    assert cache.entries == {}


def test_cache_unused_when_caching_disabled(context, transport, cache):
    transport.respond("GET", "/records", _search_response())
    Search({}, context).results()
    Search({}, context).results()
    assert len(transport.calls) == 2
    assert cache.entries == {}


# ── Facets ──


def test_facets_are_ordered_by_settings(make_context, transport):
    context = make_context(facets=["category", "year"])
    transport.respond(
        "GET",
        "/records",
        _search_response(facets={"zzz": {"a": 1}, "year": {"1900": 3}, "category": {"Images": 5}}),
    )
    search = Search({}, context)

    facets = search.facets()

    assert [facet.name for facet in facets] == ["category", "year", "zzz"]
    assert facets[0].values() == {"Images": 5}
    assert search.facets() is facets
    assert search.facet("year").values() == {"1900": 3}
    assert search.facet("missing") is None
    assert search.facet(None) is None


def test_facets_use_default_sort(make_context, transport):
    context = make_context(facets_sort="index")
    transport.respond("GET", "/records", _search_response(facets={"category": {"b": 1, "a": 2}}))
    assert list(Search({}, context).facets()[0].values()) == ["a", "b"]


def test_facet_pivots_are_ordered_by_settings(make_context, transport):
    context = make_context(facet_pivots=["a", "b"])
    transport.respond(
        "GET",
        "/records",
        _search_response(facet_pivots={"b": [{"value": "x"}], "a": [{"value": "y"}]}),
    )
    pivots = Search({}, context).facet_pivots()
    assert [pivot.name for pivot in pivots] == ["a", "b"]
    assert pivots[0].pivots == [{"value": "y"}]


# ── Search attributes & filters ──


def test_search_attributes(context):
    search = Search({"i": {"location": "Wellington"}}, context)

    assert search.get_attribute("location") == "Wellington"
    assert search.has_filter_and_value("location", "Wellington")
    assert not search.has_filter_and_value("location", "Auckland")

    search.set_attribute("location", ["Auckland", "Nelson"])
    assert search.has_filter_and_value("location", "Nelson")


def test_search_attribute_all_reads_as_none(context):
    assert Search({"i": {"location": "all"}}, context).get_attribute("location") is None


def test_unknown_search_attribute_raises(context):
    search = Search({}, context)
    with pytest.raises(UnknownAttributeError):
        search.get_attribute("colour")
    with pytest.raises(AttributeError):
        search.set_attribute("colour", "red")


def test_filters_as_pairs_and_hash(context):
    search = Search({"i": {"category": ["Images", "Videos"]}, "il": {"year": "1900"}}, context)

    assert search.filters() == [("category", "Images"), ("category", "Videos"), ("year", "1900")]
    assert search.filters(exclude=["year"]) == [("category", "Images"), ("category", "Videos")]
    assert search.filters(format="hash") == {"category": ["Images", "Videos"], "year": "1900"}


def test_options_follow_changes_on_the_search(context):
    search = Search({"i": {"category": "Images"}, "text": "dog"}, context)
    search.text = "cat"
    search.page = 3
    assert search.options() == {"i": {"category": "Images"}, "text": "cat", "page": 3}


# ── Counts ──


def test_counts_params_carry_the_current_filters(context):
    search = Search({"i": {"category": "Images", "-year": "1900"}, "text": "dog"}, context)

    params = search.counts_params(
        {"photos": {"large_thumbnail_url": "all"}, "people": {"record_type": 1}}
    )

    assert params == {
        "facet_query": {
            "photos": {"category": "Images", "-year": "1900", "large_thumbnail_url": "all"},
            "people": {"record_type": 1},
        },
        "record_type": "all",
        "text": "dog",
    }


def test_counts_fill_missing_queries_with_zero(context, transport):
    transport.respond("GET", "/records", {"search": {"facets": {"counts": {"photos": 12}}}})
    counts = Search({}, context).counts({"photos": {"category": "Images"}, "videos": {"category": "Videos"}})
    assert counts == {"photos": 12, "videos": 0}


def test_counts_failure_returns_zeros(context, transport):
    transport.respond("GET", "/records", TransportError(500, "boom"))
    assert Search({}, context).counts({"photos": {}}) == {"photos": 0}


def test_counts_are_cached(make_context, transport):
    context = make_context(enable_caching=True)
    transport.respond("GET", "/records", {"search": {"facets": {"counts": {"photos": 12}}}})

    Search({}, context).counts({"photos": {"category": "Images"}})
    Search({}, context).counts({"photos": {"category": "Images"}})

    assert len(transport.calls) == 1


# ── Facet values ──


def _facet_values_response(result_count: int | None = 50) -> dict:
    search = {"facets": {"category": {"Images": 30, "Videos": 20}}}
    if result_count is not None:
        search["result_count"] = result_count
    return {"search": search}


def test_facet_values_drop_the_facets_own_filter(context, transport):
    transport.respond("GET", "/records", _facet_values_response())
    search = Search({"i": {"category": "Images", "year": "1900"}}, context)

    values = search.facet_values("category")

    assert values == {"Images": 30, "Videos": 20, "All": 50}
    params = transport.calls[0].params
    assert params["and"] == {"year": "1900"}
    assert params["facets"] == "category"
    assert params["per_page"] == 0


def test_facet_values_options(context, transport):
    transport.respond("GET", "/records", _facet_values_response())

    assert Search({}, context).facet_values("category", {"all": False}) == {"Images": 30, "Videos": 20}
    assert list(Search({}, context).facet_values("category", {"sort": "index"})) == ["All", "Images", "Videos"]
    assert list(Search({}, context).facet_values("category", {"sort": "count"})) == ["All", "Images", "Videos"]

    Search({}, context).facet_values("category", {"facets_per_page": 3})
    assert transport.calls[-1].params["facets_per_page"] == 3


def test_facet_values_all_sums_the_value_counts(context, transport):
    transport.respond("GET", "/records", _facet_values_response(result_count=40))
    assert Search({}, context).facet_values("category")["All"] == 50


def test_facet_values_are_memoised_per_search(context, transport):
    transport.respond("GET", "/records", _facet_values_response())
    search = Search({}, context)

    search.facet_values("category")
    search.facet_values("category")
    search.categories()

    assert len(transport.calls) == 1


def test_facet_values_are_cached_across_searches(make_context, transport):
    context = make_context(enable_caching=True)
    transport.respond("GET", "/records", _facet_values_response())

    Search({}, context).facet_values("category")
    Search({}, context).facet_values("category")

    assert len(transport.calls) == 1


def test_facet_values_failure_returns_zero_total(context, transport):
    transport.respond("GET", "/records", TransportError(500, "boom"))
    assert Search({}, context).facet_values("category") == {"All": 0}


def test_facet_values_sorted_through_facet(context, transport):
    transport.respond("GET", "/records", _facet_values_response())
    expected = Facet("category", {"Images": 30, "Videos": 20, "All": 50}).values("count")
    assert Search({}, context).facet_values("category", {"sort": "count"}) == expected
