"""In-memory form of a persisted service record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ServiceRecord:
    name: str
    imported_from: Optional[str] = None
    documents: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    # Unknown top-level keys found in an existing file; written back untouched.
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        return f"{self.name}.json"

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ServiceRecord":
        if not isinstance(payload, dict):
            raise ValueError("service file must contain a JSON object")
        extra = {k: v for k, v in payload.items() if k not in ("name", "importedFrom", "documents")}
        documents = payload.get("documents") or {}
        if not isinstance(documents, dict):
            raise ValueError("documents must be an object")
        return cls(
            name=str(payload.get("name") or ""),
            imported_from=payload.get("importedFrom"),
            documents={k: dict(v) for k, v in documents.items()},
            extra=extra,
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.imported_from is not None:
            out["importedFrom"] = self.imported_from
        out["documents"] = {k: dict(v) for k, v in self.documents.items()}
        out.update(self.extra)
        return out
