"""Turn raw source entries into canonical document descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet

from docimport.errors import UnsupportedType
from docimport.ingestion.document_types import RULES_ORIGIN, DocumentDescriptor, RawDocument
from docimport.ingestion.selectors import DEFAULT_SELECTOR, xpath_to_css


def to_service_name(site: str) -> str:
    """Display name for a rule-file site identifier.

    "facebook.com" -> "Facebook". Only the first character is kept upper case,
    so multi-word names such as "stackoverflow.com" become "Stackoverflow".
    """
    first = (site or "").strip().split(".", 1)[0]
    if not first:
        return first
    return first[0].upper() + first[1:].lower()


@dataclass(frozen=True)
class Normalizer:
    doc_types: AbstractSet[str]

    def service_name(self, raw: RawDocument) -> str:
        # Database rows already carry the service display name.
        if raw.origin == RULES_ORIGIN:
            return to_service_name(raw.site)
        return (raw.site or "").strip()

    def doc_type(self, name: str) -> str:
        if name not in self.doc_types:
            raise UnsupportedType(name)
        return name

    def normalize(self, raw: RawDocument) -> DocumentDescriptor:
        """Raises UnsupportedType, or InvalidSelector for an untranslatable xpath."""
        doc_type = self.doc_type(raw.doc_name)
        selector = xpath_to_css(raw.xpath) if raw.xpath else DEFAULT_SELECTOR
        return DocumentDescriptor(
            service=self.service_name(raw),
            doc_type=doc_type,
            url=raw.url.strip(),
            selector=selector,
            imported_from=raw.imported_from,
        )
