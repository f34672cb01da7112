import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from config.field_candidates import DEFAULT_FIELD_CANDIDATES, load_field_candidates


def test_defaults_without_override(monkeypatch):
    monkeypatch.delenv("FIELD_CANDIDATES_JSON", raising=False)
    assert load_field_candidates() == DEFAULT_FIELD_CANDIDATES
    assert DEFAULT_FIELD_CANDIDATES.date == ("marca", "fecha", "time")


def test_env_override_replaces_only_named_fields(monkeypatch):
    monkeypatch.setenv("FIELD_CANDIDATES_JSON", '{"model": ["sku", "  ", "modelo"], "bogus": ["x"]}')
    candidates = load_field_candidates()
    assert candidates.model == ("sku", "modelo")
    assert candidates.operator == DEFAULT_FIELD_CANDIDATES.operator


def test_invalid_overrides_are_ignored():
    assert load_field_candidates("{not json") == DEFAULT_FIELD_CANDIDATES
    assert load_field_candidates("[1, 2]") == DEFAULT_FIELD_CANDIDATES
    assert load_field_candidates('{"reason": "motivo"}') == DEFAULT_FIELD_CANDIDATES
    assert load_field_candidates('{"reason": []}') == DEFAULT_FIELD_CANDIDATES
