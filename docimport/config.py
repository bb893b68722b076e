"""Runtime configuration for the service document import.

Values come from the environment (a `.env` file is honoured by the entry point
through python-dotenv) and fall back to the defaults of a local checkout where
the rule corpus sits next to the services repository.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from docimport.errors import ConfigError


DEFAULT_DOC_TYPES_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "types.json")

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class ImportConfig:
    services_path: str = "./services/"
    rules_repo_path: str = "../../tosdr/tosback2"
    rules_web_root: str = "https://github.com/tosdr/tosback2"
    rules_folder_name: str = "rules"
    pg_dsn: str = "postgres://localhost/phoenix_development"
    concurrency: int = 5
    doc_types_path: str = DEFAULT_DOC_TYPES_PATH
    include_rules: bool = True
    include_database: bool = False

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigError(f"concurrency must be >= 1, got {self.concurrency}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ImportConfig":
        env = os.environ if env is None else env
        return cls(
            services_path=env.get("SERVICES_PATH") or cls.services_path,
            rules_repo_path=env.get("RULES_REPO_PATH") or cls.rules_repo_path,
            rules_web_root=(env.get("RULES_WEB_ROOT") or cls.rules_web_root).rstrip("/"),
            rules_folder_name=env.get("RULES_FOLDER_NAME") or cls.rules_folder_name,
            pg_dsn=env.get("PG_DSN") or cls.pg_dsn,
            concurrency=_env_int(env, "IMPORT_CONCURRENCY", cls.concurrency),
            doc_types_path=env.get("DOC_TYPES_PATH") or cls.doc_types_path,
            include_rules=_env_bool(env, "IMPORT_RULES", cls.include_rules),
            include_database=_env_bool(env, "IMPORT_DATABASE", cls.include_database),
        )

    @property
    def rules_folder(self) -> str:
        return os.path.join(self.rules_repo_path, self.rules_folder_name)

    def rule_file_web_url(self, commit_hash: str, filename: str) -> str:
        """Link to a rule file as it was at `commit_hash` on the corpus web host."""
        return "/".join([self.rules_web_root, "blob", commit_hash, self.rules_folder_name, filename])
