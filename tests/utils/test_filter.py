import pytest

from json2db.store import InvalidFilterError
from json2db.utils import matches


DOCUMENT = {
    "status": "open",
    "priority": 2,
    "tags": ["urgent", "backend"],
    "owner": {"name": "ana", "team": {"id": 7}},
    "items": [{"sku": "x"}, {"sku": "y"}],
}


@pytest.mark.parametrize("flt", [None, {}])
def test_empty_filter_matches_everything(flt):
    assert matches(DOCUMENT, flt)
    assert matches("raw text", flt)


def test_raw_text_does_not_match_a_real_filter():
    assert not matches("status: open", {"status": "open"})


@pytest.mark.parametrize(
    "flt,expected",
    [
        ({"status": "open"}, True),
        ({"status": "closed"}, False),
        ({"owner.name": "ana"}, True),
        ({"owner.team.id": 7}, True),
        ({"owner": {"name": "ana"}}, True),
        ({"owner": {"name": "bob"}}, False),
        ({"items.1.sku": "y"}, True),
        ({"tags": "urgent"}, True),
        ({"tags": ["urgent", "backend"]}, True),
        ({"missing": None}, False),
        ({"status": "open", "priority": 3}, False),
    ],
)
def test_literal_matching(flt, expected):
    assert matches(DOCUMENT, flt) is expected


@pytest.mark.parametrize(
    "flt,expected",
    [
        ({"priority": {"$gt": 1}}, True),
        ({"priority": {"$gte": 2, "$lt": 3}}, True),
        ({"priority": {"$lte": 1}}, False),
        ({"priority": {"$ne": 2}}, False),
        ({"status": {"$in": ["open", "new"]}}, True),
        ({"tags": {"$in": ["backend"]}}, True),
        ({"status": {"$nin": ["open"]}}, False),
        ({"missing": {"$exists": False}}, True),
        ({"owner.name": {"$exists": True}}, True),
        ({"owner.name": {"$regex": "^a"}}, True),
        ({"tags": {"$contains": "urgent"}}, True),
        ({"priority": {"$not": {"$gt": 5}}}, True),
        ({"missing": {"$gt": 1}}, False),
        ({"status": {"$gt": 1}}, False),
    ],
)
def test_operators(flt, expected):
    assert matches(DOCUMENT, flt) is expected


def test_logical_operators():
    assert matches(DOCUMENT, {"$or": [{"status": "closed"}, {"priority": 2}]})
    assert not matches(DOCUMENT, {"$and": [{"status": "open"}, {"priority": 3}]})
    assert matches(DOCUMENT, {"$not": {"status": "closed"}})


def test_unknown_operator_is_rejected():
    with pytest.raises(InvalidFilterError, match=r"\$like"):
        matches(DOCUMENT, {"status": {"$like": "op"}})


@pytest.mark.parametrize(
    "flt",
    [
        {"status": {"$regex": "("}},
        {"priority": {"$regex": 5}},
        {"$or": {"status": "open"}},
        {"$and": ["status"]},
        {"status": {"$in": 5}},
    ],
)
def test_malformed_filters_are_rejected(flt):
    with pytest.raises(InvalidFilterError):
        matches(DOCUMENT, flt)


def test_invalid_filter_is_a_value_error():
    with pytest.raises(ValueError):
        matches(DOCUMENT, {"status": {"$like": "op"}})
