"""Shared ingestion data types."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import FrozenSet, Optional


RULES_ORIGIN = "rules"
DATABASE_ORIGIN = "database"


@dataclass(frozen=True)
class RawDocument:
    """One document entry as a source adapter reports it (pre-normalization).

    `site` is the rule file's site identifier (e.g. "facebook.com") for the
    rule corpus, or the service display name for database rows.
    """

    site: str
    doc_name: str
    url: str
    xpath: Optional[str] = None
    imported_from: Optional[str] = None
    origin: str = RULES_ORIGIN


@dataclass(frozen=True)
class DocumentDescriptor:
    """Canonical document to import into a service record."""

    service: str
    doc_type: str
    url: str
    selector: str
    imported_from: Optional[str] = None

    @property
    def file_name(self) -> str:
        return f"{self.service}.json"

    def to_document(self) -> dict:
        return {"fetch": self.url, "select": self.selector}


def load_document_types(path: str) -> FrozenSet[str]:
    """Load the closed set of recognized document types.

    Accepts either an object keyed by type name or a plain list of names.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        names = data.keys()
    elif isinstance(data, list):
        names = data
    else:
        raise ValueError(f"{path}: expected an object or a list of document types")
    return frozenset(str(n) for n in names)
