#!/usr/bin/env python3
"""Service document import worker.

Imports document declarations into per-service JSON files:
- tosback2 rule corpus (historical, git checkout)
- ToS;DR Postgres database (live)

Existing service files are loaded first, so re-running only adds what is new.
Select the sources with IMPORT_RULES / IMPORT_DATABASE (see docimport.config).
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from docimport.config import ImportConfig
from docimport.errors import DocImportError
from docimport.pipeline.runner import run_import


logger = logging.getLogger("tosback_import")


def main() -> int:
    load_dotenv()
    logging.basicConfig(
        level=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    try:
        config = ImportConfig.from_env()
        reports = asyncio.run(run_import(config))
    except (DocImportError, OSError) as e:
        logger.error("Import aborted: %s", e)
        return 1
    except Exception as e:
        # git / database connectivity
        logger.exception("Import aborted: %s", e)
        return 1
    for report in reports:
        logger.info("[import] %s", report.summary())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
