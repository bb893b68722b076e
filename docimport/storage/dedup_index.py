"""Fetch URL index preventing the same document from being imported twice.

A URL is either *bound* (a persisted document already fetches it) or
*reserved* (an in-flight import task claimed it and has not finished yet).
Both make later claims for that URL skip. All methods are synchronous, so a
claim taken before a task's first `await` cannot interleave with another
task's claim on the event loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set

from docimport.storage.service_record import ServiceRecord


@dataclass(frozen=True)
class UrlBinding:
    service: str
    doc_type: str
    select: str


class DedupIndex:
    def __init__(self) -> None:
        self._bound: Dict[str, List[UrlBinding]] = {}
        self._reserved: Set[str] = set()

    def seed(self, records: Iterable[ServiceRecord]) -> None:
        for record in records:
            for doc_type, doc in record.documents.items():
                url = doc.get("fetch")
                if not url:
                    continue
                self._bound.setdefault(url, []).append(
                    UrlBinding(service=record.name, doc_type=doc_type, select=doc.get("select") or "")
                )

    def check_and_claim(self, url: str) -> bool:
        """Reserve `url`; False means it is already bound or reserved (skip)."""
        if self._bound.get(url) or url in self._reserved:
            return False
        self._reserved.add(url)
        return True

    def bind(self, url: str, binding: UrlBinding) -> None:
        self._reserved.discard(url)
        self._bound.setdefault(url, []).append(binding)

    def release(self, url: str) -> None:
        self._reserved.discard(url)

    def bindings(self, url: str) -> List[UrlBinding]:
        return list(self._bound.get(url, ()))

    @property
    def reserved(self) -> int:
        return len(self._reserved)

    def __contains__(self, url: object) -> bool:
        return bool(self._bound.get(url)) if isinstance(url, str) else False

    def __len__(self) -> int:
        return sum(1 for v in self._bound.values() if v)
