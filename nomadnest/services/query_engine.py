"""
Evaluation of MongoDB-style filter and update documents against plain dicts.
"""
from __future__ import annotations

import copy
import re
from typing import Any, Iterable, Optional, Sequence, Tuple

from ..exceptions import InvalidQueryError

IMMUTABLE_FIELDS = ("id", "_id", "createdAt")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def get_path(doc: Any, path: str) -> Any:
    """Resolve a dotted path through dicts and list indexes."""
    current = doc
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def _compare(value: Any, other: Any, op) -> bool:
    if value is MISSING or value is None or other is None:
        return False
    try:
        return op(value, other)
    except TypeError:
        return False


def _equals(value: Any, expected: Any) -> bool:
    if value is MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _regex_match(value: Any, pattern: Any, options: str = "") -> bool:
    flags = re.IGNORECASE if "i" in (options or "") else 0
    try:
        compiled = re.compile(pattern, flags)
    except (re.error, TypeError):
        raise InvalidQueryError(f"Invalid $regex pattern: {pattern!r}")
    if isinstance(value, list):
        return any(isinstance(v, str) and compiled.search(v) for v in value)
    return isinstance(value, str) and compiled.search(value) is not None


def _match_operators(value: Any, condition: dict) -> bool:
    for op, operand in condition.items():
        if op == "$eq":
            ok = _equals(value, operand)
        elif op == "$ne":
            ok = not _equals(value, operand)
        elif op == "$gt":
            ok = _compare(value, operand, lambda a, b: a > b)
        elif op == "$gte":
            ok = _compare(value, operand, lambda a, b: a >= b)
        elif op == "$lt":
            ok = _compare(value, operand, lambda a, b: a < b)
        elif op == "$lte":
            ok = _compare(value, operand, lambda a, b: a <= b)
        elif op == "$in":
            if not isinstance(operand, (list, tuple, set)):
                raise InvalidQueryError("$in requires a list")
            ok = any(_equals(value, candidate) for candidate in operand)
        elif op == "$nin":
            if not isinstance(operand, (list, tuple, set)):
                raise InvalidQueryError("$nin requires a list")
            ok = not any(_equals(value, candidate) for candidate in operand)
        elif op == "$exists":
            ok = (value is not MISSING) == bool(operand)
        elif op == "$regex":
            ok = _regex_match(value, operand, condition.get("$options", ""))
        elif op == "$options":
            continue
        elif op == "$size":
            ok = isinstance(value, list) and len(value) == operand
        elif op == "$all":
            ok = isinstance(value, list) and all(item in value for item in operand)
        else:
            raise InvalidQueryError(f"Unknown query operator: {op}")
        if not ok:
            return False
    return True


def _is_operator_dict(condition: Any) -> bool:
    return (
        isinstance(condition, dict)
        and bool(condition)
        and all(isinstance(k, str) and k.startswith("$") for k in condition)
    )


def matches(doc: dict, query: Optional[dict]) -> bool:
    """Return True if `doc` satisfies the filter `query`."""
    if not query:
        return True

    for key, condition in query.items():
        if key == "$and":
            if not all(matches(doc, sub) for sub in condition):
                return False
            continue
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
            continue
        if key == "$nor":
            if any(matches(doc, sub) for sub in condition):
                return False
            continue
        if key.startswith("$"):
            raise InvalidQueryError(f"Unknown query operator: {key}")

        if key in ("id", "_id") and not _is_operator_dict(condition):
            if doc.get("id") != condition and doc.get("_id") != condition:
                return False
            continue

        value = get_path(doc, key)
        if _is_operator_dict(condition):
            if not _match_operators(value, condition):
                return False
        elif not _equals(value, condition):
            return False

    return True


def _set_path(doc: dict, path: str, value: Any) -> None:
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def _unset_path(doc: dict, path: str) -> None:
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        current = current.get(part)
        if not isinstance(current, dict):
            return
    current.pop(parts[-1], None)


def _list_at(doc: dict, path: str) -> list:
    current = get_path(doc, path)
    if current is MISSING or current is None:
        current = []
        _set_path(doc, path, current)
    if not isinstance(current, list):
        raise InvalidQueryError(f"Field {path} is not an array")
    return current


def _check_mutable(path: str) -> None:
    if path.split(".")[0] in IMMUTABLE_FIELDS:
        raise InvalidQueryError(f"Field {path} cannot be updated")


def apply_update(doc: dict, update: dict) -> dict:
    """Return a new document with `update` applied.

    An update without any ``$`` operator is a shallow merge. Identity fields are
    never rewritten; plain merges drop them silently, operator updates reject them.
    """
    result = copy.deepcopy(doc)
    if not update:
        return result

    if not any(isinstance(k, str) and k.startswith("$") for k in update):
        for key, value in update.items():
            if key in IMMUTABLE_FIELDS:
                continue
            result[key] = copy.deepcopy(value)
        return result

    for op, fields in update.items():
        if not isinstance(fields, dict):
            raise InvalidQueryError(f"{op} requires an object")
        for path, value in fields.items():
            _check_mutable(path)
            if op == "$set":
                _set_path(result, path, copy.deepcopy(value))
            elif op == "$unset":
                _unset_path(result, path)
            elif op == "$inc":
                current = get_path(result, path)
                if current is MISSING or current is None:
                    current = 0
                if not isinstance(current, (int, float)) or not isinstance(value, (int, float)):
                    raise InvalidQueryError(f"$inc requires numeric values for {path}")
                _set_path(result, path, current + value)
            elif op == "$push":
                _list_at(result, path).append(copy.deepcopy(value))
            elif op == "$addToSet":
                target = _list_at(result, path)
                if value not in target:
                    target.append(copy.deepcopy(value))
            elif op == "$pull":
                target = _list_at(result, path)
                if isinstance(value, dict):
                    kept = [item for item in target if not (
                        isinstance(item, dict) and matches(item, value))]
                else:
                    kept = [item for item in target if item != value]
                _set_path(result, path, kept)
            else:
                raise InvalidQueryError(f"Unknown update operator: {op}")
    return result


def _is_blank(value: Any) -> bool:
    return value is MISSING or value is None


def _sort_key(value: Any) -> Tuple[int, Any]:
    # numbers order before strings so mixed fields never raise
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value))


def sort_documents(docs: Iterable[dict], sort: Optional[Sequence[Tuple[str, int]]]) -> list[dict]:
    """Stable multi-key sort; missing values always sort last."""
    ordered = list(docs)
    if not sort:
        return ordered
    for key, direction in reversed(list(sort)):
        present = [d for d in ordered if not _is_blank(get_path(d, key))]
        absent = [d for d in ordered if _is_blank(get_path(d, key))]
        present.sort(key=lambda d: _sort_key(get_path(d, key)), reverse=direction < 0)
        ordered = present + absent
    return ordered
