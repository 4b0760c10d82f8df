"""Tests for epoxy.textual — Textual adapter layer."""

from textual.css.query import NoMatches

from epoxy import Model, View
from epoxy.textual import TextualDocument, TextualElement


class _Styles:
    pass


class _Widget:
    """Minimal mock matching the Textual widget surface the adapter uses."""

    def __init__(self, **attrs):
        self.classes = set()
        self.styles = _Styles()
        self.display = True
        self.disabled = False
        self.renderable = ""
        for name, value in attrs.items():
            setattr(self, name, value)

    def has_class(self, name):
        return name in self.classes

    def set_class(self, add, *names):
        for name in names:
            (self.classes.add if add else self.classes.discard)(name)

    def update(self, renderable=""):
        self.renderable = renderable


class Input(_Widget):
    pass


class Checkbox(_Widget):
    pass


class TextArea(_Widget):
    pass


class Static(_Widget):
    pass


class _MockApp:
    """Minimal mock matching the Textual App interface the adapter needs."""

    def __init__(self, widgets):
        self.widgets = widgets

    def query_one(self, selector):
        try:
            return self.widgets[selector]
        except KeyError:
            raise NoMatches(f"No nodes match {selector!r}") from None


class _Changed:
    def __init__(self, control):
        self.control = control


class TestQuery:
    def test_no_matches_becomes_none(self):
        doc = TextualDocument(_MockApp({}))
        assert doc.query("#missing") is None

    def test_tags_follow_widget_type(self):
        doc = TextualDocument(_MockApp({"#a": Input(value=""), "#b": TextArea(text=""), "#c": Static()}))
        assert doc.query("#a").tag == "input"
        assert doc.query("#b").tag == "textarea"
        assert doc.query("#c").tag == "static"

    def test_subclass_keeps_tag(self):
        class SearchBox(Input):
            pass

        doc = TextualDocument(_MockApp({"#s": SearchBox(value="")}))
        assert doc.query("#s").tag == "input"


class TestElement:
    def _element(self, widget):
        return TextualElement(widget, TextualDocument(_MockApp({})))

    def test_text_is_escaped(self):
        widget = Static()
        self._element(widget).set_text("[b]hi[/b]")
        assert widget.renderable == r"\[b]hi\[/b]"

    def test_html_is_markup(self):
        widget = Static()
        self._element(widget).set_html("[b]hi[/b]")
        assert widget.renderable == "[b]hi[/b]"

    def test_checked_maps_to_value(self):
        widget = Checkbox(value=False)
        el = self._element(widget)
        el.set_prop("checked", True)
        assert widget.value is True
        assert el.get_prop("checked") is True

    def test_textarea_value(self):
        widget = TextArea(text="")
        el = self._element(widget)
        el.set_value(42)
        assert widget.text == "42"
        assert el.get_value() == "42"

    def test_input_none_becomes_empty(self):
        widget = Input(value="x")
        self._element(widget).set_value(None)
        assert widget.value == ""

    def test_classes_css_visibility(self):
        widget = Static()
        el = self._element(widget)
        el.toggle_class("on", True)
        el.set_css({"background-color": "red"})
        el.set_visible(False)
        assert el.has_class("on")
        assert widget.styles.background_color == "red"
        assert widget.display is False


class TestBinding:
    def _setup(self):
        name = Input(value="")
        label = Static()
        doc = TextualDocument(_MockApp({"#name": name, "#label": label}))
        person = Model(first="Ann")
        view = View(doc, person, bindings={
            "#name": "value: first",
            "#label": "text: first",
            "#absent": "text: first",
        })
        view.bind_view()
        return doc, view, person, name, label

    def test_model_to_widget(self):
        doc, view, person, name, label = self._setup()
        assert name.value == "Ann"
        person.set("first", "Amy")
        assert label.renderable == "Amy"

    def test_widget_to_model(self):
        doc, view, person, name, label = self._setup()
        name.value = "Bea"
        doc.dispatch(_Changed(name))
        assert person.get("first") == "Bea"
        assert label.renderable == "Bea"

    def test_message_without_control_is_ignored(self):
        doc, view, person, name, label = self._setup()
        doc.dispatch(object())
        assert person.get("first") == "Ann"

    def test_unbind_clears_routing(self):
        doc, view, person, name, label = self._setup()
        assert doc.listener_count() == 1
        view.unbind_view()
        assert doc.listener_count() == 0
        view.remove()  # document has no parent to detach from
