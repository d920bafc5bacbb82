"""
Tests for the bundled JSON schemas and the schema_validate helper
"""

import json
import sys

import pytest

from slidegen.core.validate import schema_validate
from slidegen.core.validate.schema_validate import SCHEMA_DIR, schema_errors, validator_for


@pytest.mark.parametrize("name", ["presentation", "template", "icon-registry", "config"])
def test_bundled_schemas_are_valid(name):
    assert validator_for(name) is validator_for(name)
    assert (SCHEMA_DIR / f"{name}.schema.json").is_file()


def test_errors_are_path_ordered():
    """List indices sort numerically, so slide 10 comes after slide 2."""
    doc = {"meta": {}, "slides": [{"template": "x"}] * 2 + [{}] + [{"template": "x"}] * 7 + [{}]}
    errors = schema_errors("presentation", doc)
    assert errors == [
        "$['slides'][2]: 'template' is a required property",
        "$['slides'][10]: 'template' is a required property",
    ]


def test_inline_schema():
    assert schema_errors({"type": "string"}, 3) == ["$: 3 is not of type 'string'"]
    assert schema_errors({"type": "string"}, "ok") == []


class TestMain:
    def _run(self, monkeypatch, *argv):
        monkeypatch.setattr(sys, "argv", ["schema_validate", *argv])
        return schema_validate.main()

    def test_ok(self, monkeypatch, temp_dir, capsys):
        inst = temp_dir / "deck.yaml"
        inst.write_text("meta: {}\nslides: []\n", encoding="utf-8")
        assert self._run(monkeypatch, "--schema", "presentation", "--instance", str(inst)) == 0
        assert capsys.readouterr().out.startswith("[OK]")

    def test_ng(self, monkeypatch, temp_dir, capsys):
        inst = temp_dir / "deck.json"
        inst.write_text(json.dumps({"meta": {}}), encoding="utf-8")
        assert self._run(monkeypatch, "--schema", "presentation", "--instance", str(inst)) == 2
        out = capsys.readouterr().out
        assert "[NG]" in out
        assert "- $: 'slides' is a required property" in out

    def test_missing_instance(self, monkeypatch, temp_dir, capsys):
        assert self._run(monkeypatch, "--schema", "config", "--instance", str(temp_dir / "nope.yaml")) == 2
        assert "[ERR]" in capsys.readouterr().out
