import os
import tempfile
import unittest
from unittest import mock

from docimport.config import ImportConfig
from docimport.errors import SourceParseFailure
from docimport.ingestion.document_types import DATABASE_ORIGIN, RULES_ORIGIN
from docimport.ingestion.sources import PostgresSource, RuleCorpusSource, parse_rule_file


SINGLE = """<sitename name="example.com">
  <docname name="Terms of Service">
    <url name="https://example.com/tos" xpath="//div[@id='terms']" reviewed="true">
      <norecurse name="arbitrary"/>
    </url>
  </docname>
</sitename>
"""

MULTI = """<sitename name="Facebook.com">
  <docname name="Terms of Service">
    <url name="https://www.facebook.com/legal/terms"/>
  </docname>
  <docname name="Privacy Policy">
    <url name="https://www.facebook.com/policy.php"/>
  </docname>
  <docname name="Orphan"/>
</sitename>
"""


class TestRuleFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.repo = self._tmp.name
        self.rules = os.path.join(self.repo, "rules")
        os.makedirs(self.rules)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, name, text):
        path = os.path.join(self.rules, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_single_docname(self):
        docs = parse_rule_file(self._write("example.com.xml", SINGLE), imported_from="ref")
        self.assertEqual(len(docs), 1)
        d = docs[0]
        self.assertEqual((d.site, d.doc_name, d.url, d.xpath), ("example.com", "Terms of Service", "https://example.com/tos", "//div[@id='terms']"))
        self.assertEqual(d.imported_from, "ref")
        self.assertEqual(d.origin, RULES_ORIGIN)

    def test_repeated_docnames_and_missing_url(self):
        docs = parse_rule_file(self._write("facebook.com.xml", MULTI))
        self.assertEqual([d.doc_name for d in docs], ["Terms of Service", "Privacy Policy"])
        self.assertIsNone(docs[0].xpath)

    def test_malformed_file(self):
        with self.assertRaises(SourceParseFailure) as ctx:
            parse_rule_file(self._write("broken.xml", "<sitename name='x'><docname>"))
        self.assertEqual(ctx.exception.filename, "broken.xml")

    def test_corpus_skips_unparseable_files_and_links_provenance(self):
        self._write("example.com.xml", SINGLE)
        self._write("facebook.com.xml", MULTI)
        self._write("broken.xml", "<nope")
        config = ImportConfig(rules_repo_path=self.repo, rules_web_root="https://github.com/tosdr/tosback2")
        with mock.patch.object(RuleCorpusSource, "head_commit", return_value="abc123"):
            with self.assertLogs("docimport.ingestion.sources", level="ERROR") as logs:
                docs = RuleCorpusSource(config).fetch()
        self.assertEqual(len(docs), 3)
        self.assertTrue(any("broken.xml" in line for line in logs.output))
        self.assertEqual(docs[0].imported_from, "https://github.com/tosdr/tosback2/blob/abc123/rules/example.com.xml")


class TestPostgresSource(unittest.TestCase):
    def test_rows_become_raw_documents(self):
        rows = [
            ("Terms of Service", "//main", "https://example.com/tos", "example.com", "Example"),
            ("Privacy Policy", None, "https://example.com/privacy ", "example.com", "Example"),
            ("Privacy Policy", None, None, "broken.com", "Broken"),
        ]
        with mock.patch("docimport.ingestion.sources.psycopg.connect") as connect:
            cur = connect.return_value.__enter__.return_value.cursor.return_value.__enter__.return_value
            cur.fetchall.return_value = rows
            docs = PostgresSource("postgres://localhost/test").fetch()

        connect.assert_called_once_with("postgres://localhost/test")
        self.assertEqual(len(docs), 2)
        self.assertEqual(docs[0].site, "Example")
        self.assertEqual(docs[0].xpath, "//main")
        self.assertEqual(docs[1].url, "https://example.com/privacy")
        self.assertIsNone(docs[1].imported_from)
        self.assertTrue(all(d.origin == DATABASE_ORIGIN for d in docs))


if __name__ == "__main__":
    unittest.main()
