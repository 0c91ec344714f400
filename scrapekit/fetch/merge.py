"""Merge algorithms for layered configurations and interceptor bundles.

Configurations compose as class baseline, then instance defaults, then the
per-call override: the later layer wins on every key it sets, except
``headers`` which are merged header by header.
"""

import copy
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import httpx

from scrapekit.fetch.schemas import Interceptor


ConfigInput = Mapping[str, Any]
InterceptorsInput = Mapping[str, Sequence[Interceptor]]

_INTERCEPTOR_PHASES = ("request", "response")

# Keys whose values are handles shared by reference, never copied
_SHARED_KEYS = frozenset({"signal"})


def merge_headers(
    a: Mapping[str, str] | None,
    b: Mapping[str, str] | None,
) -> httpx.Headers:
    """Merge two header collections into a new one.

    Keys are compared case-insensitively; values from ``b`` override
    values from ``a``.

    Args:
        a: Base headers (mapping, ``httpx.Headers`` or None).
        b: Overriding headers (mapping, ``httpx.Headers`` or None).

    Returns:
        New ``httpx.Headers`` instance.
    """
    headers = httpx.Headers()
    for source in (a, b):
        if source:
            _set_headers(headers, source.items())
    return headers


def _set_headers(
    headers: httpx.Headers, entries: Iterable[tuple[str, str]]
) -> httpx.Headers:
    for key, value in entries:
        headers[key] = value
    return headers


def merge_config(a: ConfigInput, b: ConfigInput) -> dict[str, Any]:
    """Merge two request configurations.

    ``b`` wins on every key present in both; ``headers`` are merged
    additively. Neither input is mutated, and container values (a ``json``
    payload, a form mapping) are deep-copied so the result shares no
    mutable structure with either input. The abort ``signal`` is kept by
    reference.

    Args:
        a: Base configuration.
        b: Overriding configuration.

    Returns:
        New configuration dictionary owning its own headers and payloads.
    """
    merged: dict[str, Any] = {
        "headers": merge_headers(a.get("headers"), b.get("headers")),
    }
    for source in (a, b):
        for key, value in source.items():
            if key != "headers":
                merged[key] = _copy_value(key, value)
    return merged


def _copy_value(key: str, value: Any) -> Any:
    if key in _SHARED_KEYS or not isinstance(value, Mapping | list):
        return value
    return copy.deepcopy(value)


def merge_interceptors(
    a: InterceptorsInput, b: InterceptorsInput
) -> dict[str, list[Interceptor]]:
    """Merge two interceptor bundles.

    Each list is ``a`` followed by ``b`` with duplicates removed, keeping the
    order in which interceptors were first seen.

    Args:
        a: Base bundle.
        b: Overriding bundle.

    Returns:
        New bundle with ``request`` and ``response`` lists.
    """
    merged: dict[str, list[Interceptor]] = {}
    for phase in _INTERCEPTOR_PHASES:
        unique: list[Interceptor] = []
        for fn in [*(a.get(phase) or ()), *(b.get(phase) or ())]:
            if fn not in unique:
                unique.append(fn)
        merged[phase] = unique
    return merged
