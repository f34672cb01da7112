"""Centralised field-name candidates for the production data source.

The upstream source does not publish a stable schema: column names differ
between exports (``Marca temporal``, ``Fecha``, ``Nombre del operario`` ...).
Each canonical field is resolved by substring matching against an ordered list
of name fragments defined here.  Deployments can override any list through the
``FIELD_CANDIDATES_JSON`` environment variable without touching the pipeline
code.  Unknown fields or malformed entries are ignored and the defaults kept.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class FieldCandidates:
    """Ordered name fragments used to locate each canonical field."""

    date: tuple[str, ...] = ("marca", "fecha", "time")
    model: tuple[str, ...] = ("modelo", "producto", "item", "descripcion")
    operator: tuple[str, ...] = ("operario", "nombre", "empleado", "responsable")
    production_quantity: tuple[str, ...] = ("cantidad", "producida", "total", "unidades")
    rejection_quantity: tuple[str, ...] = ("cantidad", "rechaza", "descarte", "falla")
    reason: tuple[str, ...] = ("motivo", "falla", "causa", "codigo")


DEFAULT_FIELD_CANDIDATES = FieldCandidates()


def _normalise_fragments(value: Any) -> tuple[str, ...] | None:
    """Return ``value`` as a tuple of non-empty strings, or ``None``."""

    if not isinstance(value, (list, tuple)):
        return None
    fragments = tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return fragments or None


def load_field_candidates(raw: str | None = None) -> FieldCandidates:
    """Build the candidate configuration from environment overrides."""

    if raw is None:
        raw = os.getenv("FIELD_CANDIDATES_JSON")
    if not raw:
        return DEFAULT_FIELD_CANDIDATES

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return DEFAULT_FIELD_CANDIDATES

    if not isinstance(parsed, Mapping):
        return DEFAULT_FIELD_CANDIDATES

    known = {f.name for f in fields(FieldCandidates)}
    overrides: dict[str, tuple[str, ...]] = {}
    for name, entry in parsed.items():
        if name not in known:
            continue
        fragments = _normalise_fragments(entry)
        if fragments is not None:
            overrides[name] = fragments

    return replace(DEFAULT_FIELD_CANDIDATES, **overrides)
