import copy
from typing import Any


def deep_merge(original: Any, update: Any) -> Any:
    """Recursively merge ``update`` into ``original`` and return the result.

    Nested dicts are merged key by key; any other value in ``update``
    (lists included) replaces what was there. When either side is not a
    dict, ``update`` wins outright. ``original`` is not mutated.
    """
    if not isinstance(original, dict) or not isinstance(update, dict):
        return copy.deepcopy(update)
    merged = copy.deepcopy(original)
    stack = [(merged, update)]
    while stack:
        target, source = stack.pop()
        for key, value in source.items():
            if isinstance(target.get(key), dict) and isinstance(value, dict):
                stack.append((target[key], value))
            else:
                target[key] = copy.deepcopy(value)
    return merged
