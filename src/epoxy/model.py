"""Model — key-based attribute store with change events and computed properties.

A Model holds plain attributes and contains a ComputedEngine; get() and
set() delegate through it. Every read records a dependency when a probe is
active, so computed getters and view bindings discover what they depend on
just by reading.

Events:
- ``change:<name>`` (model, value) for each attribute whose value changed;
- ``change`` (model) once per set() call that changed anything.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from epoxy._tracking import record
from epoxy.computed import ComputedDefinition, ComputedEngine, ComputedProperty
from epoxy.events import Events

_MISSING = object()


class Model(Events):
    """Attribute store with computed properties.

    Declare computed properties either in a ``computed`` mapping or with the
    ``@computed`` decorator:

        class Person(Model):
            defaults = {"first": "", "last": ""}
            computed = {
                "initials": lambda m: m.get("first")[:1] + m.get("last")[:1],
            }
    """

    defaults: Mapping[str, Any] = {}
    computed: Mapping[str, Any] = {}

    _declared_computed: dict[str, ComputedDefinition] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        declared: dict[str, ComputedDefinition] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, ComputedDefinition):
                    declared[name] = value
        cls._declared_computed = declared

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        super().__init__()
        self.attributes: dict[str, Any] = {}
        self._computed = ComputedEngine(self)
        initial = dict(self.defaults)
        initial.update(attributes or {})
        initial.update(kwargs)
        self._store_set(initial, silent=True)
        self.bind_computed()

    # --- Computed lifecycle ---

    def bind_computed(self, definitions: Mapping[str, Any] | None = None) -> None:
        """(Re)bind computed properties. Defaults to the class declarations."""
        if definitions is None:
            definitions = {**self._declared_computed, **self.computed}
        self._computed.bind(definitions)

    def unbind_computed(self) -> None:
        self._computed.unbind()

    @property
    def computed_properties(self) -> dict[str, ComputedProperty]:
        return dict(self._computed.properties)

    # --- Read ---

    def get(self, name: str) -> Any:
        """Read an attribute. If inside a probe, records the dependency."""
        record(self, name)
        prop = self._computed.get(name)
        if prop is not None and prop.virtual:
            return prop.value
        return self.attributes.get(name)

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def keys(self) -> list[str]:
        """Names known to the model: stored attributes, then virtual computeds."""
        names = list(self.attributes)
        names.extend(name for name in self._computed if name not in self.attributes)
        return names

    def to_dict(self) -> dict[str, Any]:
        """Copy of the stored attributes. Virtual values are not included."""
        return dict(self.attributes)

    # --- Write ---

    def set(self, key: str | Mapping[str, Any], value: Any = None, *, silent: bool = False) -> Model:
        """Write one attribute, ``set(name, value)``, or several, ``set({...})``.

        Computed names are replaced with whatever their setter maps them to.
        """
        if isinstance(key, Mapping):
            attrs = dict(key)
        else:
            attrs = {key: value}
        return self._store_set(self._computed.expand(attrs), silent=silent)

    def unset(self, name: str, *, silent: bool = False) -> Model:
        """Remove a stored attribute, notifying with a value of None."""
        if name not in self.attributes:
            return self
        del self.attributes[name]
        if not silent:
            self.trigger("change:" + name, self, None)
            self.trigger("change", self)
        return self

    def _store_set(self, attrs: Mapping[str, Any], *, silent: bool = False) -> Model:
        """Raw store write: bypasses computed setters, emits the change events.

        Stored values compare by equality, so an equal container is no change.
        """
        changed = []
        for name, value in attrs.items():
            old = self.attributes.get(name, _MISSING)
            self.attributes[name] = value
            if old is _MISSING or (old is not value and old != value):
                changed.append(name)

        if silent or not changed:
            return self
        for name in changed:
            self.trigger("change:" + name, self, self.attributes.get(name))
        self.trigger("change", self)
        return self

    # --- Misc ---

    def __contains__(self, name: object) -> bool:
        return name in self.attributes or name in self._computed

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attributes!r})"
