"""Predicate matching used to search documents.

A filter is a dict whose keys are field names (dotted for nested
fields) and whose values are either literals to compare against, nested
filters, or operator dicts::

    {"status": "open"}
    {"owner.name": "ana", "age": {"$gte": 18, "$lt": 65}}
    {"tags": "urgent"}                       # list membership
    {"$or": [{"status": "open"}, {"priority": {"$in": [1, 2]}}]}

Supported operators: ``$eq $ne $gt $gte $lt $lte $in $nin $exists
$regex $contains`` and the logical ``$and $or $not``.
"""

import operator
import re
from typing import Any, Callable

from json2db.store.exceptions import InvalidFilterError


_MISSING = object()


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def apply(value: Any, expected: Any) -> bool:
        if value is _MISSING or value is None:
            return False
        try:
            return op(value, expected)
        except TypeError:
            return False

    return apply


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _in(value: Any, expected: Any) -> bool:
    if isinstance(value, list):
        return any(item in expected for item in value)
    return value in expected


def _contains(value: Any, expected: Any) -> bool:
    if isinstance(value, (str, list, dict)):
        return expected in value
    return False


def _regex(value: Any, expected: Any) -> bool:
    try:
        pattern = re.compile(expected)
    except (re.error, TypeError) as e:
        raise InvalidFilterError(f"Invalid $regex {expected!r}: {e}") from e
    return isinstance(value, str) and pattern.search(value) is not None


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$eq": lambda value, expected: value is not _MISSING and _equals(value, expected),
    "$ne": lambda value, expected: value is _MISSING or not _equals(value, expected),
    "$gt": _compare(operator.gt),
    "$gte": _compare(operator.ge),
    "$lt": _compare(operator.lt),
    "$lte": _compare(operator.le),
    "$in": lambda value, expected: value is not _MISSING and _in(value, expected),
    "$nin": lambda value, expected: value is _MISSING or not _in(value, expected),
    "$exists": lambda value, expected: (value is not _MISSING) == bool(expected),
    "$regex": _regex,
    "$contains": _contains,
}


def _resolve(document: Any, key: str) -> Any:
    value = document
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return _MISSING
    return value


def _is_operator_dict(condition: Any) -> bool:
    return (
        isinstance(condition, dict)
        and bool(condition)
        and all(key.startswith("$") for key in condition)
    )


def _match_condition(value: Any, condition: Any) -> bool:
    if _is_operator_dict(condition):
        for name, expected in condition.items():
            if name == "$not":
                if _match_condition(value, expected):
                    return False
                continue
            op = _OPERATORS.get(name)
            if op is None:
                raise InvalidFilterError(f"Unknown filter operator: {name}")
            if not op(value, expected):
                return False
        return True
    if isinstance(condition, dict):
        return isinstance(value, dict) and _matches(value, condition)
    return value is not _MISSING and _equals(value, condition)


def _clauses(key: str, condition: Any) -> list[dict[str, Any]]:
    if not isinstance(condition, list) or not all(
        isinstance(clause, dict) for clause in condition
    ):
        raise InvalidFilterError(f"{key} needs a list of filters")
    return condition


def _matches(document: Any, filter: dict[str, Any] | None) -> bool:
    if not filter:
        return True
    if not isinstance(filter, dict):
        raise InvalidFilterError(f"Filter must be an object, got {filter!r}")
    if not isinstance(document, dict):
        return False
    for key, condition in filter.items():
        if key == "$and":
            if not all(_matches(document, c) for c in _clauses(key, condition)):
                return False
        elif key == "$or":
            if not any(_matches(document, c) for c in _clauses(key, condition)):
                return False
        elif key == "$not":
            if _matches(document, condition):
                return False
        elif not _match_condition(_resolve(document, key), condition):
            return False
    return True


def matches(document: Any, filter: dict[str, Any] | None) -> bool:
    """Return True when ``document`` satisfies every clause of ``filter``.

    An empty or missing filter matches everything. Non-dict documents
    (raw text) only match an empty filter.

    Raises:
        InvalidFilterError: If the filter is malformed, e.g. an unknown
            operator, a bad ``$regex`` or an operand of the wrong type.
    """
    try:
        return _matches(document, filter)
    except TypeError as e:
        raise InvalidFilterError(f"Invalid filter {filter!r}: {e}") from e
