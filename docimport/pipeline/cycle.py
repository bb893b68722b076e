"""Merge-validate-save cycle for one document.

Each document runs as one scheduler task:

    start -> skip                      (URL already covered)
          -> fail   (rejected)         (unknown type, bad selector, type already
                                        present for the service, invalid document)
          -> merge -> save -> done     (whole record written)
                          -> fail      (record invalid or write failed; the merge
                                        stays in memory until a later save)

The URL claim happens before the first await of the task; the type conflict is
checked again right before the merge because validation suspends the task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from docimport.contracts.service_record import validate_document
from docimport.errors import DocImportError, DuplicateType, PersistFailure, ValidationFailure
from docimport.ingestion.document_types import RawDocument
from docimport.ingestion.normalize import Normalizer
from docimport.pipeline.outcomes import ImportOutcome, ImportReport, ImportStatus
from docimport.pipeline.scheduler import TaskScheduler
from docimport.storage.dedup_index import UrlBinding
from docimport.storage.service_store import ServiceStore


logger = logging.getLogger(__name__)


class ImportCycle:
    def __init__(self, store: ServiceStore, normalizer: Normalizer, scheduler: TaskScheduler):
        self.store = store
        self.normalizer = normalizer
        self.scheduler = scheduler

    def submit(self, raw: RawDocument, report: ImportReport) -> None:
        logger.info("%s %s queued", self.normalizer.service_name(raw), raw.doc_name)

        async def task() -> None:
            report.record(await self.process(raw))

        self.scheduler.enqueue(task)

    async def run_phase(self, phase: str, raws: Iterable[RawDocument]) -> ImportReport:
        report = ImportReport(phase=phase)
        for raw in raws:
            self.submit(raw, report)
        await self.scheduler.join()
        logger.info("%s", report.summary())
        return report

    async def process(self, raw: RawDocument) -> ImportOutcome:
        service = self.normalizer.service_name(raw)
        doc_name = raw.doc_name
        url = raw.url.strip()
        logger.info("%s %s start", service, doc_name)

        if not self.store.dedup.check_and_claim(url):
            logger.info("%s %s skip", service, doc_name)
            return ImportOutcome(service, doc_name, url, ImportStatus.SKIPPED, "url already covered")

        merged = False
        try:
            descriptor = self.normalizer.normalize(raw)
            self._check_conflict(descriptor.service, descriptor.file_name, descriptor.doc_type)
            document = descriptor.to_document()
            result = await asyncio.to_thread(validate_document, document)
            if not result.ok:
                raise ValidationFailure("Invalid document", result.errors)
            self._check_conflict(descriptor.service, descriptor.file_name, descriptor.doc_type)

            record = self.store.get_or_create(descriptor.service, descriptor.imported_from)
            record.documents[descriptor.doc_type] = document
            self.store.dedup.bind(
                url, UrlBinding(service=descriptor.service, doc_type=descriptor.doc_type, select=descriptor.selector)
            )
            merged = True
        except DocImportError as e:
            logger.info("%s %s fail: %s", service, doc_name, e)
            return ImportOutcome(service, doc_name, url, ImportStatus.REJECTED, str(e))
        finally:
            if not merged:
                self.store.dedup.release(url)

        try:
            await self.store.save(descriptor.file_name)
        except PersistFailure as e:
            logger.error("Could not save %s: %s", self.store.path_for(descriptor.file_name), e)
            logger.info("%s %s fail", service, doc_name)
            return ImportOutcome(service, descriptor.doc_type, url, ImportStatus.SAVE_FAILED, str(e))

        logger.info("%s %s done", service, doc_name)
        return ImportOutcome(service, descriptor.doc_type, url, ImportStatus.SAVED)

    def _check_conflict(self, service: str, file_name: str, doc_type: str) -> None:
        record = self.store.get(file_name)
        if record is not None and doc_type in record.documents:
            raise DuplicateType(service, doc_type)
