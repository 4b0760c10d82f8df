"""Events — named, synchronous publish/subscribe.

The change-notification primitive under models, computed properties and
bindings. Handlers run immediately, in subscription order, on the caller's
stack. Several event names may be given at once, separated by spaces:

    model.on("change:first change:last", refresh)

listen_to()/stop_listening() keep track of subscriptions made on *other*
objects so an owner can release all of them in one call.
"""

from __future__ import annotations

from typing import Callable

Handler = Callable[..., None]
Disposer = Callable[[], None]


def _split(events: str) -> list[str]:
    return events.split()


class Events:
    """Mixin providing on/off/trigger and tracked cross-object subscriptions."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._listening: list[tuple[Events, str, Handler]] = []

    def on(self, events: str, handler: Handler) -> Disposer:
        """Register handler for each named event. Returns a function that removes it."""
        for name in _split(events):
            self._handlers.setdefault(name, []).append(handler)

        def _off() -> None:
            self.off(events, handler)

        return _off

    def off(self, events: str | None = None, handler: Handler | None = None) -> None:
        """Remove handlers. No arguments removes everything."""
        names = list(self._handlers) if events is None else _split(events)
        for name in names:
            handlers = self._handlers.get(name)
            if not handlers:
                continue
            if handler is None:
                handlers.clear()
            else:
                try:
                    handlers.remove(handler)
                except ValueError:
                    pass  # already removed
            if not handlers:
                del self._handlers[name]

    def trigger(self, events: str, *args) -> None:
        """Call every handler of each named event with args."""
        for name in _split(events):
            for handler in list(self._handlers.get(name, ())):
                handler(*args)

    def listen_to(self, other: Events, events: str, handler: Handler) -> None:
        """Subscribe to other's events, remembering it for stop_listening()."""
        other.on(events, handler)
        self._listening.append((other, events, handler))

    def stop_listening(self, other: Events | None = None) -> None:
        """Release subscriptions made with listen_to(), on other or on everyone."""
        keep = []
        for target, events, handler in self._listening:
            if other is None or target is other:
                target.off(events, handler)
            else:
                keep.append((target, events, handler))
        self._listening = keep

    def listener_count(self, events: str | None = None) -> int:
        """Number of registered handlers. Useful for leak checks in tests."""
        names = list(self._handlers) if events is None else _split(events)
        return sum(len(self._handlers.get(name, ())) for name in names)

    @property
    def listening_count(self) -> int:
        """Number of subscriptions this object holds on other objects."""
        return len(self._listening)
