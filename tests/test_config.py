import os
import unittest

from docimport.config import DEFAULT_DOC_TYPES_PATH, ImportConfig
from docimport.errors import ConfigError
from docimport.ingestion.document_types import load_document_types


class TestImportConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = ImportConfig.from_env({})
        self.assertEqual(cfg.services_path, "./services/")
        self.assertEqual(cfg.concurrency, 5)
        self.assertTrue(cfg.include_rules)
        self.assertFalse(cfg.include_database)
        self.assertEqual(cfg.rules_folder, os.path.join("../../tosdr/tosback2", "rules"))

    def test_env_overrides(self):
        cfg = ImportConfig.from_env(
            {
                "SERVICES_PATH": "/tmp/services",
                "IMPORT_CONCURRENCY": "2",
                "IMPORT_RULES": "no",
                "IMPORT_DATABASE": "true",
                "RULES_WEB_ROOT": "https://git.example.org/rules-repo/",
            }
        )
        self.assertEqual(cfg.services_path, "/tmp/services")
        self.assertEqual(cfg.concurrency, 2)
        self.assertFalse(cfg.include_rules)
        self.assertTrue(cfg.include_database)
        self.assertEqual(
            cfg.rule_file_web_url("abc123", "example.xml"),
            "https://git.example.org/rules-repo/blob/abc123/rules/example.xml",
        )

    def test_invalid_values_fail_fast(self):
        with self.assertRaises(ConfigError):
            ImportConfig.from_env({"IMPORT_CONCURRENCY": "many"})
        with self.assertRaises(ConfigError):
            ImportConfig.from_env({"IMPORT_CONCURRENCY": "0"})
        with self.assertRaises(ConfigError):
            ImportConfig.from_env({"IMPORT_RULES": "maybe"})

    def test_bundled_document_types(self):
        types = load_document_types(DEFAULT_DOC_TYPES_PATH)
        self.assertIn("Terms of Service", types)
        self.assertIn("Privacy Policy", types)


if __name__ == "__main__":
    unittest.main()
