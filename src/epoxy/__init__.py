"""epoxy: computed model properties and declarative view bindings for Python."""

from importlib.metadata import version as _version

__version__ = _version("epoxy-bindings")

from epoxy._tracking import DependencyCollector, capture, untracked
from epoxy.events import Events
from epoxy.errors import EpoxyError, ParseError, UnknownOperator, NoGetter, NoSetter
from epoxy.computed import ComputedDefinition, ComputedProperty, computed
from epoxy.model import Model
from epoxy.expression import BindingExpression, Leaf, Composite, Constant, parse, compile_bindings, read
from epoxy.operators import Operator, default_operators, register_operator, unregister_operator
from epoxy.binding import Binding
from epoxy.view import Accessor, View
from epoxy.dom import Element
# textual NOT auto-imported — opt-in only

__all__ = [
    "DependencyCollector",
    "capture",
    "untracked",
    "Events",
    "EpoxyError",
    "ParseError",
    "UnknownOperator",
    "NoGetter",
    "NoSetter",
    "ComputedDefinition",
    "ComputedProperty",
    "computed",
    "Model",
    "BindingExpression",
    "Leaf",
    "Composite",
    "Constant",
    "parse",
    "compile_bindings",
    "read",
    "Operator",
    "default_operators",
    "register_operator",
    "unregister_operator",
    "Binding",
    "Accessor",
    "View",
    "Element",
]
