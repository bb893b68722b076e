"""One import run: load existing records, then each source phase in turn."""

from __future__ import annotations

import asyncio
import logging
from typing import AbstractSet, List, Optional, Sequence

from docimport.config import ImportConfig
from docimport.ingestion.document_types import load_document_types
from docimport.ingestion.normalize import Normalizer
from docimport.ingestion.sources import BaseSource, PostgresSource, RuleCorpusSource
from docimport.pipeline.cycle import ImportCycle
from docimport.pipeline.outcomes import ImportReport
from docimport.pipeline.scheduler import TaskScheduler
from docimport.storage.service_store import ServiceStore


logger = logging.getLogger(__name__)


def build_sources(config: ImportConfig) -> List[BaseSource]:
    """Historical rule corpus first, then the live database."""
    sources: List[BaseSource] = []
    if config.include_rules:
        sources.append(RuleCorpusSource(config))
    if config.include_database:
        sources.append(PostgresSource(config.pg_dsn))
    return sources


async def run_import(
    config: ImportConfig,
    *,
    sources: Optional[Sequence[BaseSource]] = None,
    doc_types: Optional[AbstractSet[str]] = None,
) -> List[ImportReport]:
    if doc_types is None:
        doc_types = load_document_types(config.doc_types_path)
    if sources is None:
        sources = build_sources(config)

    store = ServiceStore(config.services_path, doc_types)
    store.load_existing()
    cycle = ImportCycle(store, Normalizer(doc_types), TaskScheduler(config.concurrency))

    reports: List[ImportReport] = []
    for source in sources:
        raws = await asyncio.to_thread(source.fetch)
        reports.append(await cycle.run_phase(source.name, raws))
    return reports
