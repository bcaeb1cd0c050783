"""Tests for reactform.core.persistence — nested JSON import/export."""
import json

from reactform.core.persistence import (
    to_json_object, from_json_object, save_json, load_json,
)
from reactform.core.variable_store import VariableStore

from conftest import FakeElement, FakePlaceholder


def _store(**values):
    store = VariableStore()
    for name, value in values.items():
        store.set_value(name.replace("__", "."), value)
    return store


class TestToJsonObject:
    def test_dotted_names_nest(self):
        store = _store(mesh__maxSize=1.0, mesh__refine=1, mode="a")
        assert to_json_object(store) == {
            "mesh": {"maxSize": 1.0, "refine": 1},
            "mode": "a",
        }

    def test_lists_stay_arrays(self):
        store = _store(modes=[{"val": "a"}])
        assert to_json_object(store) == {"modes": [{"val": "a"}]}

    def test_extra_merged(self):
        store = _store(mesh__refine=1)
        tree = to_json_object(store, extra={"mesh.note": "x", "version": 2})
        assert tree == {"mesh": {"refine": 1, "note": "x"}, "version": 2}

    def test_conflict_skipped(self, logs, log_fn):
        store = _store(a=1, a__b=2)
        assert to_json_object(store, log=log_fn) == {"a": 1}
        assert logs and logs[0][0] == "WARNING"


class TestFromJsonObject:
    def test_flattens(self):
        store = VariableStore()
        from_json_object(store, {"mesh": {"maxSize": 2.5}, "mode": "b"})
        assert store.get_value("mesh.maxSize") == 2.5
        assert store.get_value("mode") == "b"

    def test_collections_before_values(self):
        store = VariableStore()
        ph = FakePlaceholder()

        def produce(context, index, item):
            element = FakeElement("")
            store.register_element(context.substitute("formData.$idx.name", index, item), element)
            return element

        store.register_collection("forms", "item", "idx", ph, produce)
        order = []
        store.subscribe(lambda name, value: order.append(name))
        from_json_object(store, {
            "formData": {"0": {"name": "renamed"}},
            "forms": [{"x": 1}],
        })
        assert order == ["forms", "formData.0.name"]
        assert ph.elements[0].value == "renamed"

    def test_logs_counts(self, logs, log_fn):
        from_json_object(VariableStore(), {"a": [1], "b": 2, "c": {"d": 3}}, log_fn)
        assert logs == [("INFO", "Loaded 1 collection(s), 2 value(s)")]

    def test_round_trip(self):
        store = _store(formData__0__name="A", formData__1__name="B", count=3)
        restored = VariableStore()
        from_json_object(restored, to_json_object(store))
        assert restored.get_snapshot() == store.get_snapshot()


class TestFiles:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "state.json"
        store = _store(mesh__maxSize=0.5, modes=["a", "b"])
        assert save_json(store, path)
        assert json.loads(path.read_text(encoding="utf-8"))["mesh"]["maxSize"] == 0.5

        restored = VariableStore()
        assert load_json(restored, path)
        assert restored.get_value("mesh.maxSize") == 0.5
        assert restored.get_collection("modes") == ["a", "b"]

    def test_load_missing_file(self, tmp_path, logs, log_fn):
        assert not load_json(VariableStore(), tmp_path / "none.json", log_fn)
        assert logs[0][0] == "ERROR"

    def test_load_invalid_json(self, tmp_path, logs, log_fn):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert not load_json(VariableStore(), path, log_fn)
        assert "Cannot load" in logs[0][1]

    def test_load_not_an_object(self, tmp_path, logs, log_fn):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert not load_json(VariableStore(), path, log_fn)
        assert "JSON object" in logs[0][1]

    def test_save_to_missing_directory(self, tmp_path, logs, log_fn):
        assert not save_json(_store(a=1), tmp_path / "no" / "state.json", log=log_fn)
        assert logs[0][0] == "ERROR"
