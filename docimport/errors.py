"""Exception types raised while importing service documents.

Everything below `DocImportError` is caught at the task (or per-file) boundary
and turned into a logged outcome; only connectivity errors coming from the
source adapters are allowed to end the run.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class DocImportError(Exception):
    """Base class for import errors."""


class ConfigError(DocImportError):
    pass


class UnsupportedType(DocImportError):
    def __init__(self, doc_type: str):
        super().__init__(f"Unsupported type: {doc_type}")
        self.doc_type = doc_type


class InvalidSelector(DocImportError):
    def __init__(self, expression: str, detail: str = "unsupported expression"):
        super().__init__(f"Cannot translate selector {expression!r}: {detail}")
        self.expression = expression


class DuplicateType(DocImportError):
    def __init__(self, service: str, doc_type: str):
        super().__init__(f"Same type used twice! {service} already has a {doc_type!r} document")
        self.service = service
        self.doc_type = doc_type


class ValidationFailure(DocImportError):
    def __init__(self, message: str, errors: Optional[Sequence[str]] = None):
        self.errors: List[str] = list(errors or [])
        detail = "; ".join(self.errors)
        super().__init__(f"{message}: {detail}" if detail else message)


class SourceParseFailure(DocImportError):
    def __init__(self, filename: str, reason: str):
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class PersistFailure(DocImportError):
    pass
