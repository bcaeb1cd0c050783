"""Tests for reactform.core.collection — template rendering per collection item."""
from reactform.core.variable_store import VariableStore

from conftest import FakeElement, FakePlaceholder


def _text_producer(context, index, item):
    return context.substitute(context.template, index, item)


def _form_producer(store):
    """Produces one FakeElement per item with a per-index variable and binding."""
    def produce(context, index, item):
        element = FakeElement(context.substitute("$item.label", index, item))
        store.register_element(context.substitute("forms.$idx.label", index, item), element)
        store.bind_visible(element, context.substitute("$mode==$idx", index, item))
        return element
    return produce


class FakeChoices(FakeElement):
    """Combo-like view: fixed entries first, generated entries after them.

    Like a real combo it falls back to its first entry when the selected
    generated entry disappears, and reports that through edit().
    """

    def __init__(self, fixed):
        super().__init__(fixed[0])
        self.fixed = list(fixed)
        self.generated = []
        self._selected = None

    def discard_generated(self):
        self._selected = self.value
        self.generated = []
        if self.value not in self.fixed:
            self.value = self.fixed[0]

    def add_generated(self, element):
        self.generated.append(element)
        if element == self._selected:
            self.value = element

    def finish_generated(self):
        selected, self._selected = self._selected, None
        if selected is not None and self.value != selected:
            self.edit(self.value)

class TestRender:
    def test_renders_existing_items(self):
        store = VariableStore()
        store.set_collection("modes", [{"label": "a"}, {"label": "b"}])
        ph = FakePlaceholder()
        store.register_collection("modes", "item", "idx", ph, _text_producer, "$idx=$item.label")
        assert ph.elements == ["0=a", "1=b"]

    def test_empty_collection(self):
        store = VariableStore()
        ph = FakePlaceholder()
        binding = store.register_collection("modes", "item", None, ph, _text_producer, "$item")
        assert ph.elements == []
        assert binding.context.index_var == ""

    def test_append_renders_new_item(self):
        store = VariableStore()
        store.set_collection("modes", [{"label": "a"}])
        ph = FakePlaceholder()
        store.register_collection("modes", "item", "idx", ph, _text_producer,
                                  "modes.$idx.label=$item.label")
        store.append("modes", {"label": "x"})
        assert len(ph.elements) == 2
        assert "x" in ph.elements[-1]
        assert ph.elements[-1].startswith("modes.1.")

    def test_each_change_rerenders_wholesale(self):
        store = VariableStore()
        ph = FakePlaceholder()
        store.register_collection("modes", "item", "", ph, _text_producer, "$item")
        store.set_collection("modes", ["a", "b"])
        store.set_collection("modes", ["c"])
        assert ph.elements == ["c"]
        assert ph.discards == 3
        assert ph.finishes == 3

    def test_none_result_skipped(self):
        store = VariableStore()
        store.set_collection("modes", [1, 2, 3])
        ph = FakePlaceholder()
        binding = store.register_collection(
            "modes", "item", "", ph,
            lambda ctx, i, item: None if item == 2 else item,
        )
        assert ph.elements == [1, 3]
        assert binding.generated == [1, 3]

    def test_multiple_bindings_same_collection(self):
        store = VariableStore()
        first, second = FakePlaceholder(), FakePlaceholder()
        store.register_collection("modes", "item", "", first, _text_producer, "a:$item")
        store.register_collection("modes", "item", "", second, _text_producer, "b:$item")
        store.append("modes", "x")
        assert first.elements == ["a:x"]
        assert second.elements == ["b:x"]

    def test_not_a_list(self, logs, log_fn):
        store = VariableStore(log_fn)
        store.set_value("modes", "oops")
        ph = FakePlaceholder()
        store.register_collection("modes", "item", "", ph, _text_producer, "$item")
        assert ph.elements == []
        assert any("not a list" in m for _, m in logs)

    def test_is_bound(self):
        store = VariableStore()
        store.register_collection("modes", "item", "", FakePlaceholder(), _text_producer)
        assert store._collections.is_bound("modes")
        assert not store._collections.is_bound("other")


class TestGeneratedState:
    def test_generated_views_are_live(self):
        store = VariableStore()
        store.set_value("mode", 1)
        ph = FakePlaceholder()
        store.register_collection("forms", "item", "idx", ph, _form_producer(store))
        store.initialize_bindings()
        store.set_collection("forms", [{"label": "a"}, {"label": "b"}])

        first, second = ph.elements
        assert store.get_value("forms.1.label") == "b"
        assert first.properties["visible"] is False
        assert second.properties["visible"] is True

        store.set_value("mode", 0)
        assert first.properties["visible"] is True

    def test_rerender_releases_previous_generation(self):
        store = VariableStore()
        ph = FakePlaceholder()
        store.register_collection("forms", "item", "idx", ph, _form_producer(store))
        store.set_collection("forms", [{"label": "a"}])
        old = ph.elements[0]

        store.append("forms", {"label": "b"})
        assert old not in store.elements("forms.0.label")
        assert all(b.target is not old for b in store.dependents("mode"))
        assert len(store.elements("forms.0.label")) == 1
        assert len(store.dependents("mode")) == 2

    def test_per_item_value_survives_rerender(self):
        store = VariableStore()
        ph = FakePlaceholder()
        store.register_collection("forms", "item", "idx", ph, _form_producer(store))
        store.set_collection("forms", [{"label": "a"}])
        ph.elements[0].edit("renamed")

        store.append("forms", {"label": "b"})
        assert ph.elements[0].value == "renamed"

    def test_nested_collection_released(self):
        store = VariableStore()
        outer, inners = FakePlaceholder(), []

        def produce_outer(context, index, item):
            inner = FakePlaceholder()
            inners.append(inner)
            store.register_collection("rows", "row", "", inner, _text_producer, "$row")
            return inner

        store.register_collection("groups", "g", "", outer, produce_outer)
        store.set_collection("groups", ["x"])
        store.set_collection("groups", ["x", "y"])
        assert len(store._collections.bindings("rows")) == 2
        store.set_collection("rows", ["r"])
        assert inners[0].elements == []
        assert inners[1].elements == ["r"]
        assert inners[2].elements == ["r"]

    def test_missing_template_field_is_logged(self, logs, log_fn):
        store = VariableStore(log_fn)
        store.set_collection("modes", [{"label": "a"}])
        ph = FakePlaceholder()
        store.register_collection("modes", "item", "idx", ph, _text_producer,
                                  "$idx=$item.missing")
        assert ph.elements == ["0="]
        assert ("DEBUG", "Template field not found: '$item.missing'") in logs


class TestSelectionChoices:
    def _bound_choices(self):
        store = VariableStore()
        choices = FakeChoices(["-1"])
        store.register_element("activeForm", choices)
        store.register_collection("forms", "form", "idx", choices,
                                  lambda ctx, i, item: str(i))
        target = FakeElement()
        store.bind_visible(target, "$activeForm==0")
        store.initialize_bindings()
        return store, choices, target

    def test_cleared_while_selected_resets_variable(self):
        store, choices, target = self._bound_choices()
        store.set_collection("forms", [{"name": "A"}])
        choices.edit("0")
        assert store.get_value("activeForm") == "0"
        assert target.properties["visible"] is True

        store.clear("forms")
        assert choices.value == "-1"
        assert store.get_value("activeForm") == "-1"
        assert target.properties["visible"] is False

    def test_selection_survives_append(self):
        store, choices, target = self._bound_choices()
        store.set_collection("forms", [{"name": "A"}])
        choices.edit("0")

        store.append("forms", {"name": "B"})
        assert choices.generated == ["0", "1"]
        assert choices.value == "0"
        assert store.get_value("activeForm") == "0"
        assert target.properties["visible"] is True

    def test_fixed_entry_untouched_by_rerender(self):
        store, choices, target = self._bound_choices()
        seen = []
        store.subscribe(lambda name, value: seen.append(name))
        store.set_collection("forms", [{"name": "A"}])
        store.clear("forms")
        assert "activeForm" not in seen
        assert store.get_value("activeForm") == "-1"
