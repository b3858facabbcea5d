from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from fastapi import Request

from sitetrack.core.query_config import QueryPolicy, get_query_policy
from sitetrack.schemas.query import RawQuery, RejectedKey
from sitetrack.services.query_builder import RESERVED_KEYS
from sitetrack.services.query_grammar import parse_key, rejection_reason

_UNSAFE_CHARS_RE = re.compile(r"[${}]")
_LOG = logging.getLogger("sitetrack.query")


def sanitize_value(value):
    if isinstance(value, str):
        return _UNSAFE_CHARS_RE.sub("", value)
    return value


@dataclass
class ParsedQuery:
    raw: RawQuery
    policy: QueryPolicy
    rejected: list[RejectedKey]


def parse_query_params(items: list[tuple[str, str]], policy: QueryPolicy) -> ParsedQuery:
    grouped: dict[str, list[str]] = {}
    for key, value in items:
        grouped.setdefault(key, []).append(value)

    raw: RawQuery = {}
    rejected: list[RejectedKey] = []
    for key, values in grouped.items():
        if key in RESERVED_KEYS:
            raw[key] = values[-1]
            continue
        field, op = parse_key(key)
        reason = rejection_reason(field, op, policy)
        if reason is not None:
            rejected.append(RejectedKey(key=key, reason=reason))
            _LOG.info("query_key_dropped entity=%s key=%s reason=%s", policy.entity, key, reason)
            continue
        cleaned = [sanitize_value(v) for v in values]
        raw[key] = cleaned[0] if len(cleaned) == 1 else cleaned
    return ParsedQuery(raw=raw, policy=policy, rejected=rejected)


def query_parser(entity: str):
    """FastAPI dependency: whitelist and sanitize ``request.query_params`` for ``entity``."""
    policy = get_query_policy(entity)

    def _inner(request: Request) -> ParsedQuery:
        parsed = parse_query_params(request.query_params.multi_items(), policy)
        # read back by the access log once the response is built
        request.state.parsed_query = parsed
        return parsed

    return _inner
