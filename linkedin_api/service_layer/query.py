"""
Translate a list-endpoint query string into document store criteria,
projection, window and ordering, plus pagination links.

    GET /posts?user=64b...&likes>=1&sort=-createdAt&fields=text,user&limit=10&skip=20

Keys other than ``limit``, ``skip``/``offset``, ``sort`` and ``fields`` are
filters. Supported forms: ``key=v``, ``key=a,b`` ($in), ``key!=v``,
``key!=a,b`` ($nin), ``key>v``, ``key>=v``, ``key<v``, ``key<=v``, ``key``
($exists), ``!key`` (not $exists) and ``key=/regex/flags``.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote_plus

from bson import ObjectId

from linkedin_api.domain import exceptions

CONTROL_KEYS = frozenset({"limit", "skip", "offset", "sort", "fields"})

# Keys holding ObjectId references; hex values on these are matched as ids
REFERENCE_KEYS = frozenset({"_id", "user", "likes", "comments._id", "comments.user", "comments.post"})

_PAIR = re.compile(r"^(?P<negate>!?)(?P<key>[^!=<>]+)(?P<op>!=|>=|<=|=|>|<)?(?P<value>.*)$", re.S)
_REGEX = re.compile(r"^/(?P<pattern>.*)/(?P<flags>[imsx]*)$", re.S)
_INT = re.compile(r"^-?\d+$")
_FLOAT = re.compile(r"^-?\d*\.\d+$")
_HEX_ID = re.compile(r"^[0-9a-fA-F]{24}$")

_RANGE_OPERATORS = {">": "$gt", ">=": "$gte", "<": "$lt", "<=": "$lte"}


def _typed(key: str, raw: str) -> Any:
    if key in REFERENCE_KEYS and _HEX_ID.match(raw):
        return ObjectId(raw)
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw == "null":
        return None
    if _INT.match(raw):
        return int(raw)
    if _FLOAT.match(raw):
        return float(raw)
    return raw


def _condition(key: str, op: str, raw: str) -> Any:
    if op == "=":
        regex = _REGEX.match(raw)
        if regex:
            try:
                re.compile(regex.group("pattern"))
            except re.error as e:
                raise exceptions.BadRequest(f"Invalid pattern for {key}: {e}") from e
            condition = {"$regex": regex.group("pattern")}
            if regex.group("flags"):
                condition["$options"] = regex.group("flags")
            return condition
        if "," in raw:
            return {"$in": [_typed(key, v) for v in raw.split(",")]}
        return _typed(key, raw)
    if op == "!=":
        if "," in raw:
            return {"$nin": [_typed(key, v) for v in raw.split(",")]}
        return {"$ne": _typed(key, raw)}
    return {_RANGE_OPERATORS[op]: _typed(key, raw)}


def _field_path(name: str) -> str:
    # operators and empty path segments never reach the store as field names
    if any(not part or part.startswith("$") for part in name.split(".")):
        raise exceptions.BadRequest(f"Invalid field name {name!r}")
    return name


def _non_negative_int(name: str, raw: str) -> int:
    if not _INT.match(raw) or int(raw) < 0:
        raise exceptions.BadRequest(f"{name} must be a non-negative integer")
    return int(raw)


@dataclass
class MongoQuery:
    criteria: Dict[str, Any] = field(default_factory=dict)
    projection: Optional[Dict[str, int]] = None
    skip: int = 0
    limit: int = 10
    sort: List[Tuple[str, int]] = field(default_factory=list)
    # raw "key=value" pieces (still URL-encoded) other than limit/skip, replayed in links
    carried: List[str] = field(default_factory=list)

    def number_of_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)

    def links(self, base_url: str, total: int) -> Dict[str, str]:
        links: Dict[str, str] = {}
        if not self.limit or not total:
            return links

        def url(skip: int) -> str:
            params = self.carried + [f"limit={self.limit}", f"skip={skip}"]
            return f"{base_url}?{'&'.join(params)}"

        if self.skip > 0:
            links["first"] = url(0)
            links["prev"] = url(max(self.skip - self.limit, 0))
        if self.skip + self.limit < total:
            last_skip = (self.number_of_pages(total) - 1) * self.limit
            links["next"] = url(min(self.skip + self.limit, last_skip))
            links["last"] = url(last_skip)
        return links


def parse_query(query_string: str, default_limit: int, max_limit: int) -> MongoQuery:
    query = MongoQuery(limit=default_limit)

    for piece in filter(None, query_string.split("&")):
        match = _PAIR.match(unquote_plus(piece))
        if not match:
            raise exceptions.BadRequest(f"Malformed query parameter {piece!r}")
        negate, key, op, raw = match.group("negate", "key", "op", "value")
        key = key.strip()

        if key in CONTROL_KEYS and op == "=":
            if key == "limit":
                query.limit = min(_non_negative_int("limit", raw), max_limit)
                if query.limit == 0:
                    raise exceptions.BadRequest("limit must be at least 1")
                continue
            if key in ("skip", "offset"):
                query.skip = _non_negative_int(key, raw)
                continue
            query.carried.append(piece)
            if key == "sort":
                query.sort = [
                    (_field_path(name.lstrip("+-")), -1 if name.startswith("-") else 1)
                    for name in raw.split(",")
                    if name.strip("+-")
                ]
            else:
                names = [name for name in raw.split(",") if name.strip("+-")]
                projection = {_field_path(name.lstrip("+-")): 0 if name.startswith("-") else 1 for name in names}
                if len({v for k, v in projection.items() if k != "_id"}) > 1:
                    raise exceptions.BadRequest("fields cannot mix inclusion and exclusion")
                query.projection = projection or None
            continue

        _field_path(key)
        query.carried.append(piece)
        if op is None:
            condition: Any = {"$exists": not negate}
        else:
            condition = _condition(key, op, raw)

        existing = query.criteria.get(key)
        if isinstance(existing, dict) and isinstance(condition, dict) and not existing.keys() & condition.keys():
            existing.update(condition)
        else:
            query.criteria[key] = condition

    # _id breaks ties so consecutive skip windows never overlap or leave gaps
    if all(name != "_id" for name, _ in query.sort):
        query.sort.append(("_id", 1))
    return query
