"""File-backed store of service records.

One pretty-printed JSON file per service (`<Name>.json`) under a single
directory. The store keeps every record in memory for the duration of a run,
together with the fetch URL index built from them, and rewrites a record's
whole file each time it is saved.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from typing import AbstractSet, Dict, Optional

from docimport.contracts.service_record import assert_valid, build_service_schema
from docimport.errors import PersistFailure, ValidationFailure
from docimport.storage.dedup_index import DedupIndex
from docimport.storage.service_record import ServiceRecord


logger = logging.getLogger(__name__)


def _write_atomic(path: str, text: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class ServiceStore:
    def __init__(self, services_path: str, doc_types: AbstractSet[str]):
        self.services_path = services_path
        self.service_schema = build_service_schema(doc_types)
        self.dedup = DedupIndex()
        self._records: Dict[str, ServiceRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def path_for(self, file_name: str) -> str:
        return os.path.join(self.services_path, file_name)

    def load_existing(self) -> int:
        """Load every `*.json` record and seed the URL index from it.

        Must run before any import work so that a re-run skips what is
        already persisted. Returns the number of records loaded.
        """
        os.makedirs(self.services_path, exist_ok=True)
        loaded = 0
        for file_name in sorted(os.listdir(self.services_path)):
            if not file_name.endswith(".json") or file_name.startswith(".tmp-"):
                continue
            path = self.path_for(file_name)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    record = ServiceRecord.from_json(json.load(f))
            except (OSError, ValueError) as e:
                raise PersistFailure(f"Cannot load existing service file {path}: {e}") from e
            self._records[file_name] = record
            self.dedup.seed([record])
            loaded += 1
        logger.info("Loaded %d existing services, %d fetch URLs covered", loaded, len(self.dedup))
        return loaded

    def get(self, file_name: str) -> Optional[ServiceRecord]:
        return self._records.get(file_name)

    def get_or_create(self, name: str, imported_from: Optional[str] = None) -> ServiceRecord:
        record = ServiceRecord(name=name, imported_from=imported_from)
        return self._records.setdefault(record.file_name, record)

    async def save(self, file_name: str) -> bool:
        """Write the full current record for `file_name`.

        Saves of the same file are serialized and each one snapshots the record
        only once it holds the lock, so the last write always carries every
        merge made before it. Returns False when there is nothing to write.
        Raises PersistFailure when the record is invalid or the write fails.
        """
        path = self.path_for(file_name)
        lock = self._locks.setdefault(file_name, asyncio.Lock())
        async with lock:
            record = self._records.get(file_name)
            if record is None or not record.documents:
                return False
            logger.info("Saving %s", path)
            payload = record.to_json()
            try:
                assert_valid(self.service_schema, payload)
            except ValidationFailure as e:
                raise PersistFailure(str(e)) from e
            text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
            try:
                await asyncio.to_thread(_write_atomic, path, text)
            except OSError as e:
                raise PersistFailure(f"Cannot write {path}: {e}") from e
            logger.info("Saved %s", path)
            return True
