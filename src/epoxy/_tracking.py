"""Dependency capture — the heart of epoxy.

Uses contextvars to hold the collector of the currently-probing evaluation
(a computed property's first run, or a binding's initial pass). While a
collector is installed, every model attribute read records a
``(source, "change:<name>")`` pair in it, building the dependency graph
automatically.

Captures nest: the inner collector is active for the inner block only, and
the outer one is restored on exit.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Iterator

# The collector of the currently-probing evaluation.
# When set, any Model.get() call records itself as a dependency.
current_collector: contextvars.ContextVar[DependencyCollector | None] = contextvars.ContextVar(
    "current_collector", default=None
)


class DependencyCollector:
    """Ordered, de-duplicated set of ``(source, event)`` pairs."""

    __slots__ = ("_pairs", "_seen")

    def __init__(self) -> None:
        self._pairs: list[tuple[object, str]] = []
        self._seen: set[tuple[int, str]] = set()

    def add(self, source: object, event: str) -> None:
        key = (id(source), event)
        if key not in self._seen:
            self._seen.add(key)
            self._pairs.append((source, event))

    def by_source(self) -> list[tuple[object, list[str]]]:
        """Group events per source, keeping first-read order."""
        groups: dict[int, tuple[object, list[str]]] = {}
        for source, event in self._pairs:
            groups.setdefault(id(source), (source, []))[1].append(event)
        return list(groups.values())

    def events(self) -> list[str]:
        return [event for _, event in self._pairs]

    def __iter__(self) -> Iterator[tuple[object, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __bool__(self) -> bool:
        return bool(self._pairs)

    def __repr__(self) -> str:
        return f"DependencyCollector({self.events()!r})"


@contextmanager
def capture(collector: DependencyCollector | None):
    """Install collector for the duration of the block.

    Usage:
        deps = DependencyCollector()
        with capture(deps):
            model.get("first_name")
        deps.events()  # ["change:first_name"]
    """
    token = current_collector.set(collector)
    try:
        yield collector
    finally:
        current_collector.reset(token)


def untracked():
    """Suspend capture: reads inside the block are not recorded anywhere."""
    return capture(None)


def record(source: object, attribute: str) -> None:
    """Record a read of ``attribute`` on ``source`` if a probe is active."""
    collector = current_collector.get()
    if collector is not None:
        collector.add(source, "change:" + attribute)


def is_capturing() -> bool:
    """Whether a probe is active. Useful for testing."""
    return current_collector.get() is not None
