"""Source adapters for service documents.

- RuleCorpusSource: the tosback2 XML rule files, checked out as a git repo
- PostgresSource: the documents table of the ToS;DR database

Both normalize their entries into RawDocument; type checks and selector
translation happen later, per document, in the import cycle.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional

import psycopg

from docimport.config import ImportConfig
from docimport.errors import SourceParseFailure
from docimport.ingestion.document_types import DATABASE_ORIGIN, RULES_ORIGIN, RawDocument


logger = logging.getLogger(__name__)


class BaseSource:
    name: str = "base"

    def fetch(self) -> List[RawDocument]:
        raise NotImplementedError


def parse_rule_file(path: str, *, imported_from: Optional[str] = None) -> List[RawDocument]:
    """Parse one rule file.

    Layout::

        <sitename name="example.com">
          <docname name="Terms of Service">
            <url name="https://example.com/tos" xpath="//div[@id='main']"/>
          </docname>
        </sitename>
    """
    filename = os.path.basename(path)
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise SourceParseFailure(filename, str(e)) from e
    if root.tag != "sitename":
        raise SourceParseFailure(filename, f"unexpected root element <{root.tag}>")
    site = (root.get("name") or "").strip()
    if not site:
        raise SourceParseFailure(filename, "sitename has no name")

    out: List[RawDocument] = []
    for docname in root.findall("docname"):
        doc_name = docname.get("name") or ""
        url_el = docname.find("url")
        url = (url_el.get("name") or "").strip() if url_el is not None else ""
        if not url:
            logger.warning("Skipping %s %r in %s: no url", site, doc_name, filename)
            continue
        out.append(
            RawDocument(
                site=site,
                doc_name=doc_name,
                url=url,
                xpath=(url_el.get("xpath") or None),
                imported_from=imported_from,
                origin=RULES_ORIGIN,
            )
        )
    return out


@dataclass(frozen=True)
class RuleCorpusSource(BaseSource):
    """Rule files of a local tosback2 checkout, pinned to its HEAD commit."""

    config: ImportConfig
    name: str = "rules"

    def head_commit(self) -> str:
        # Imported here: GitPython needs a git executable as soon as it loads.
        from git import Repo

        # A missing checkout is a connectivity-level failure and ends the run.
        repo = Repo(self.config.rules_repo_path, search_parent_directories=True)
        return repo.head.commit.hexsha

    def fetch(self) -> List[RawDocument]:
        folder = self.config.rules_folder
        commit = self.head_commit()
        logger.info("Reading rule corpus %s at %s", folder, commit)
        out: List[RawDocument] = []
        failed = 0
        for filename in sorted(os.listdir(folder)):
            path = os.path.join(folder, filename)
            if not os.path.isfile(path):
                continue
            try:
                out.extend(parse_rule_file(path, imported_from=self.config.rule_file_web_url(commit, filename)))
            except SourceParseFailure as e:
                failed += 1
                logger.error("Error parsing xml %s: %s", e.filename, e.reason)
        logger.info("Rule corpus: %d documents, %d unparseable files", len(out), failed)
        return out


DOCUMENTS_QUERY = """
SELECT d.name, d.xpath, d.url, s.url AS domains, s.name AS service
FROM documents d
INNER JOIN services s ON d.service_id = s.id
"""


@dataclass(frozen=True)
class PostgresSource(BaseSource):
    pg_dsn: str
    name: str = "database"

    def fetch(self) -> List[RawDocument]:
        with psycopg.connect(self.pg_dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(DOCUMENTS_QUERY)
                rows = cur.fetchall()
        out: List[RawDocument] = []
        for doc_name, xpath, url, _domains, service in rows:
            if not url or not service:
                logger.warning("Skipping database row without url/service: %r %r", service, doc_name)
                continue
            out.append(
                RawDocument(
                    site=str(service),
                    doc_name=str(doc_name or ""),
                    url=str(url).strip(),
                    xpath=xpath or None,
                    origin=DATABASE_ORIGIN,
                )
            )
        logger.info("Database: %d documents", len(out))
        return out
