"""Computed properties — derived model attributes with automatic dependencies.

A computed property wraps a getter. On its first evaluation it records which
model attributes the getter reads and subscribes to their change events. The
dependency set is captured once and never re-discovered; whenever one of them
fires, the getter re-runs and the new value is published.

Computed properties are eager, unlike a lazy cache: the value is always
current right after the triggering set() returns.

Two storage modes:
- virtual: the value lives only on the property; updates trigger
  ``change:<name>`` and ``change`` on the model directly.
- non-virtual: the value is written through to the model's attributes, and
  the model's own notification drives downstream listeners.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

from epoxy._tracking import DependencyCollector, capture, untracked
from epoxy.errors import NoGetter, NoSetter
from epoxy.events import Events

if TYPE_CHECKING:
    from epoxy.model import Model

logger = logging.getLogger("epoxy.computed")

Getter = Callable[["Model"], Any]
Setter = Callable[["Model", Any], Mapping[str, Any]]


# Immutable values compare by value; anything else must be the same object.
_VALUE_TYPES = (str, bytes, int, float, complex, bool, type(None), tuple, frozenset)


def has_changed(old: Any, new: Any) -> bool:
    """Strict comparison: identity, or ``!=`` between immutable values.

    A getter returning a fresh list or dict is a change even when the new
    container is equal to the cached one.
    """
    if old is new:
        return False
    if isinstance(old, _VALUE_TYPES) and isinstance(new, _VALUE_TYPES):
        return old != new
    return True


class ComputedDefinition:
    """Declaration of a computed property: getter, optional setter, storage mode.

    Also a descriptor, so a definition placed on a Model subclass reads and
    writes through the model:

        class Person(Model):
            @computed
            def full_name(self):
                return f"{self.get('first')} {self.get('last')}"

        Person(first="Ann", last="Lee").full_name  # "Ann Lee"
    """

    def __init__(
        self,
        fget: Getter | None = None,
        fset: Setter | None = None,
        *,
        virtual: bool = False,
        events: Mapping[str, Any] | None = None,
    ) -> None:
        self.fget = fget
        self.fset = fset
        self.virtual = virtual
        self.events = dict(events or {})
        self.name: str | None = getattr(fget, "__name__", None)

    @classmethod
    def coerce(cls, declaration: Any) -> ComputedDefinition:
        """Normalise a bare getter, a mapping, or a definition."""
        if isinstance(declaration, ComputedDefinition):
            return declaration
        if isinstance(declaration, Mapping):
            return cls(
                declaration.get("get"),
                declaration.get("set"),
                virtual=declaration.get("virtual", False),
                events=declaration.get("events"),
            )
        if callable(declaration):
            # A bare getter is read-only and never persisted.
            return cls(declaration, virtual=True)
        raise TypeError(f"Invalid computed definition: {declaration!r}")

    def setter(self, fset: Setter) -> ComputedDefinition:
        """Decorator: return a copy of this definition with a setter attached."""
        definition = ComputedDefinition(self.fget, fset, virtual=self.virtual, events=self.events)
        definition.name = self.name
        return definition

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance, value) -> None:
        instance.set(self.name, value)

    def __repr__(self) -> str:
        mode = "virtual" if self.virtual else "stored"
        access = "rw" if self.fset is not None else "ro"
        return f"ComputedDefinition({self.name}, {mode}, {access})"


def computed(
    fget: Getter | None = None,
    *,
    virtual: bool = True,
    events: Mapping[str, Any] | None = None,
):
    """Decorator/factory to declare a computed property on a Model subclass.

    Usage:
        class Person(Model):
            @computed
            def full_name(self):
                return f"{self.get('first')} {self.get('last')}"

            @full_name.setter
            def full_name(self, value):
                first, last = value.split(" ", 1)
                return {"first": first, "last": last}

            @computed(virtual=False, events={"add remove": roster})
            def team_size(self):
                return len(roster)
    """

    def decorate(fn: Getter) -> ComputedDefinition:
        return ComputedDefinition(fn, virtual=virtual, events=events)

    if fget is not None:
        return decorate(fget)
    return decorate


class ComputedProperty(Events):
    """One live computed attribute of one model instance."""

    def __init__(self, name: str, definition: ComputedDefinition, model: Model) -> None:
        super().__init__()
        if definition.fget is None:
            raise NoGetter(name)
        self.name = name
        self.model: Model | None = model
        self.virtual = definition.virtual
        self._get = definition.fget
        self._set = definition.fset

        # Probe run: every attribute the getter reads becomes a dependency.
        collector = DependencyCollector()
        with capture(collector):
            value = self._get(model)
        for events, source in definition.events.items():
            for event in events.split():
                collector.add(source, event)
        self.dependencies: tuple[tuple[object, str], ...] = tuple(collector)

        for source, events in collector.by_source():
            self.listen_to(source, " ".join(events), self._on_dependency_change)

        self.value = value
        if not self.virtual:
            model._store_set({name: value})

    @property
    def writable(self) -> bool:
        return self._set is not None

    def _on_dependency_change(self, *args) -> None:
        self.update()

    def update(self) -> None:
        """Re-evaluate the getter and publish the value if it changed."""
        model = self.model
        if model is None:
            return

        # Reads during re-evaluation must never leak into an outer probe.
        with untracked():
            value = self._get(model)

        if not has_changed(self.value, value):
            return
        self.value = value

        if self.virtual:
            model.trigger("change:" + self.name, model, value)
            model.trigger("change", model)
        else:
            model._store_set({self.name: value})

    def write(self, value: Any) -> dict[str, Any]:
        """Map an incoming value onto the real attributes it stands for."""
        if self._set is None:
            raise NoSetter(self.name)
        return dict(self._set(self.model, value))

    def dispose(self) -> None:
        """Disconnect from all dependencies. The property becomes inert."""
        self.stop_listening()
        self.off()
        self.model = None
        self.value = None
        self.dependencies = ()

    def __repr__(self) -> str:
        state = "disposed" if self.model is None else f"value={self.value!r}"
        mode = "virtual" if self.virtual else "stored"
        return f"ComputedProperty({self.name}, {mode}, {state})"


class ComputedEngine:
    """The set of computed properties bound to one model."""

    def __init__(self, model: Model) -> None:
        self.model = model
        self.properties: dict[str, ComputedProperty] = {}

    def bind(self, definitions: Mapping[str, Any]) -> None:
        """(Re)build every property, in declaration order.

        A property may depend on computed properties declared before it.
        """
        self.unbind()
        for name, declaration in definitions.items():
            self.properties[name] = ComputedProperty(name, ComputedDefinition.coerce(declaration), self.model)
        if self.properties:
            logger.debug("Bound %d computed properties on %r", len(self.properties), self.model)

    def unbind(self) -> None:
        """Dispose every property. Safe to call repeatedly or before bind()."""
        while self.properties:
            _, prop = self.properties.popitem()
            prop.dispose()

    def get(self, name: str) -> ComputedProperty | None:
        return self.properties.get(name)

    def expand(self, attrs: Mapping[str, Any]) -> dict[str, Any]:
        """Replace computed names in a pending write with their setters' output."""
        result: dict[str, Any] = {}
        for name, value in attrs.items():
            prop = self.properties.get(name)
            if prop is None:
                result[name] = value
            else:
                result.update(prop.write(value))
        return result

    def __contains__(self, name: object) -> bool:
        return name in self.properties

    def __iter__(self):
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)
