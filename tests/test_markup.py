"""Tests for the widget-free parts of reactform.gui — markup parsing, registry, helpers."""
import xml.etree.ElementTree as ET

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import QCoreApplication

from reactform.core.bindings import TemplateContext
from reactform.gui.builder import MarkupError, UIBuilder, parse_markup, _instantiate
from reactform.gui.widget_registry import (
    WidgetRegistry, attr, bool_attr, int_attr, float_attr,
)


class TestParseMarkup:
    def test_valid(self):
        root = parse_markup("<Form><Label text='x'/></Form>")
        assert root.tag == "Form"
        assert root[0].get("text") == "x"

    def test_syntax_error(self):
        with pytest.raises(MarkupError, match="line 1"):
            parse_markup("<Form><Label></Form>")

    def test_empty(self):
        with pytest.raises(MarkupError):
            parse_markup("")


@pytest.fixture
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


class TestBuildFromFile:
    def test_broken_file_is_not_remembered(self, qapp, tmp_path, logs, log_fn):
        path = tmp_path / "bad.xml"
        path.write_text("<Form><Label></Form>", encoding="utf-8")
        builder = UIBuilder(log_fn=log_fn)
        errors = []
        builder.build_error.connect(errors.append)

        assert builder.build_from_file(path) is None
        assert len(errors) == 1
        assert builder.root is None

        path.write_text("<Form/>", encoding="utf-8")
        assert builder.reload() is False
        assert ("WARNING", "No file to reload") in logs

    def test_missing_file(self, qapp, tmp_path, logs, log_fn):
        builder = UIBuilder(log_fn=log_fn)
        assert builder.build_from_file(tmp_path / "absent.xml") is None
        assert any(level == "ERROR" and "Cannot open file" in m for level, m in logs)
        assert builder.reload() is False

class TestInstantiate:
    def test_substitutes_every_attribute(self):
        template = ET.fromstring(
            '<GroupBox title="$form.name" visible="$mode==$idx">'
            '<LineEdit var="formData.$idx.name" default="$form.name"/>'
            '</GroupBox>'
        )
        context = TemplateContext("forms", "form", "idx", template)
        element = _instantiate(template, context, 2, {"name": "A&B <x>"})

        assert element.get("title") == "A&B <x>"
        assert element.get("visible") == "$mode==2"
        assert element[0].get("var") == "formData.2.name"
        assert element[0].get("default") == "A&B <x>"

    def test_template_left_untouched(self):
        template = ET.fromstring('<Label text="$item"/>')
        context = TemplateContext("items", "item", "", template)
        _instantiate(template, context, 0, "x")
        assert template.get("text") == "$item"


class TestRegistry:
    def test_builtins(self):
        registry = WidgetRegistry()
        for tag in ("Label", "LineEdit", "ComboBox", "GroupBox", "PushButton"):
            assert registry.has(tag)

    def test_empty_registry(self):
        registry = WidgetRegistry(builtins=False)
        assert registry.tags() == []
        assert registry.create("Label", ET.Element("Label"), None) is None

    def test_custom_creator(self):
        registry = WidgetRegistry(builtins=False)
        sentinel = object()
        registry.register("Knob", lambda element, builder: sentinel)
        assert registry.tags() == ["Knob"]
        assert registry.create("Knob", ET.Element("Knob"), None) is sentinel


class TestAttributeHelpers:
    def test_helpers(self):
        element = ET.Element("X", {"a": "text", "b": "Yes", "n": "7", "f": "2.5", "bad": "?"})
        assert attr(element, "a") == "text"
        assert attr(element, "missing", "d") == "d"
        assert bool_attr(element, "b") is True
        assert bool_attr(element, "missing", True) is True
        assert int_attr(element, "n") == 7
        assert int_attr(element, "bad", 3) == 3
        assert float_attr(element, "f") == 2.5
        assert float_attr(element, "bad", 1.0) == 1.0
