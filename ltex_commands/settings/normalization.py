from __future__ import annotations

from typing import Iterable

from ..settings_config import NEGATION_PREFIX


def clean_up_string_array(values: Iterable[str]) -> list[str]:
    """Deduplicate and order a list-valued setting before it is persisted.

    An entry ``-foo`` cancels an earlier ``foo`` (and vice versa); the later
    entry wins. Negated entries come first, then positive ones, each group
    sorted.

    >>> clean_up_string_array(["foo", "foo", "bar"])
    ['bar', 'foo']
    >>> clean_up_string_array(["foo", "-foo", "baz"])
    ['-foo', 'baz']
    """
    negative: set[str] = set()
    positive: set[str] = set()
    for raw in values:
        if raw is None:
            continue
        entry = str(raw).strip()
        if not entry or entry == NEGATION_PREFIX:
            continue
        if entry.startswith(NEGATION_PREFIX):
            name = entry[len(NEGATION_PREFIX) :]
            negative.add(name)
            positive.discard(name)
        else:
            positive.add(entry)
            negative.discard(entry)
    return [NEGATION_PREFIX + entry for entry in sorted(negative)] + sorted(positive)


def effective_entries(values: Iterable[str]) -> list[str]:
    """Return only the positive entries left after negations are applied."""
    return [
        entry
        for entry in clean_up_string_array(values)
        if not entry.startswith(NEGATION_PREFIX)
    ]
