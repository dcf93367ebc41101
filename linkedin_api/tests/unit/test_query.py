import pytest
from bson import ObjectId

from linkedin_api.domain import exceptions
from linkedin_api.service_layer.query import parse_query

USER_ID = "64b7f0c2a1b2c3d4e5f60719"


def test_empty_query_uses_default_window():
    query = parse_query("", default_limit=10, max_limit=100)

    assert query.criteria == {}
    assert query.projection is None
    assert (query.skip, query.limit) == (0, 10)
    assert query.sort == [("_id", 1)]


def test_controls_are_not_filters():
    query = parse_query("limit=5&offset=15&sort=-createdAt,text&fields=text,user", 10, 100)

    assert query.criteria == {}
    assert (query.skip, query.limit) == (15, 5)
    assert query.sort == [("createdAt", -1), ("text", 1), ("_id", 1)]
    assert query.projection == {"text": 1, "user": 1}


def test_limit_is_capped():
    assert parse_query("limit=1000", 10, 100).limit == 100


@pytest.mark.parametrize(
    "query_string",
    [
        "limit=0",
        "limit=-1",
        "skip=abc",
        "fields=text,-user",
        "$where=sleep(5000)",
        "$expr=x",
        "meta.$where=x",
        "%20=x",
        "sort=$natural",
        "fields=$text",
        "text=/(/",
        "text=/[a-/i",
    ],
)
def test_invalid_controls_are_rejected(query_string):
    with pytest.raises(exceptions.BadRequest):
        parse_query(query_string, 10, 100)


@pytest.mark.parametrize(
    "query_string, criteria",
    [
        ("text=hello", {"text": "hello"}),
        ("text=hello%20world", {"text": "hello world"}),
        ("n=3", {"n": 3}),
        ("ratio=0.5", {"ratio": 0.5}),
        ("draft=false", {"draft": False}),
        ("image=null", {"image": None}),
        ("tag=a,b", {"tag": {"$in": ["a", "b"]}}),
        ("tag!=a", {"tag": {"$ne": "a"}}),
        ("tag!=a,b", {"tag": {"$nin": ["a", "b"]}}),
        ("image", {"image": {"$exists": True}}),
        ("!image", {"image": {"$exists": False}}),
        ("text=/^hel/i", {"text": {"$regex": "^hel", "$options": "i"}}),
        ("n>1&n<=5", {"n": {"$gt": 1, "$lte": 5}}),
    ],
)
def test_filters(query_string, criteria):
    assert parse_query(query_string, 10, 100).criteria == criteria


def test_reference_keys_match_as_ids():
    query = parse_query(f"user={USER_ID}&text={USER_ID}", 10, 100)

    assert query.criteria["user"] == ObjectId(USER_ID)
    assert query.criteria["text"] == USER_ID


def test_links_walk_the_result_set():
    base = "http://testserver/posts"

    first_page = parse_query("text=hi&limit=2", 10, 100)
    assert first_page.number_of_pages(5) == 3
    assert first_page.links(base, 5) == {
        "next": f"{base}?text=hi&limit=2&skip=2",
        "last": f"{base}?text=hi&limit=2&skip=4",
    }

    middle = parse_query("text=hi&limit=2&skip=2", 10, 100)
    assert middle.links(base, 5) == {
        "first": f"{base}?text=hi&limit=2&skip=0",
        "prev": f"{base}?text=hi&limit=2&skip=0",
        "next": f"{base}?text=hi&limit=2&skip=4",
        "last": f"{base}?text=hi&limit=2&skip=4",
    }

    last = parse_query("text=hi&limit=2&skip=4", 10, 100)
    assert set(last.links(base, 5)) == {"first", "prev"}


def test_no_links_for_empty_results():
    assert parse_query("", 10, 100).links("http://testserver/posts", 0) == {}


def test_sort_always_ends_with_id():
    assert parse_query("sort=text&limit=2&skip=2", 10, 100).sort == [("text", 1), ("_id", 1)]
    assert parse_query("sort=-_id,text", 10, 100).sort == [("_id", -1), ("text", 1)]
