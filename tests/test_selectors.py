import unittest

from docimport.errors import InvalidSelector
from docimport.ingestion.selectors import xpath_to_css


class TestXpathToCss(unittest.TestCase):
    def test_id_predicate(self):
        self.assertEqual(xpath_to_css("//div[@id='content']"), "div#content")

    def test_wildcard_with_id(self):
        self.assertEqual(xpath_to_css('//*[@id="main"]'), "#main")

    def test_child_axis_and_position(self):
        self.assertEqual(xpath_to_css("/html/body/div[2]"), "html > body > div:nth-of-type(2)")

    def test_class_and_descendant(self):
        self.assertEqual(xpath_to_css("//div[@class='legal terms']//p"), "div.legal.terms p")

    def test_contains_class(self):
        self.assertEqual(xpath_to_css("//div[contains(@class, 'terms')]"), "div.terms")

    def test_attribute_functions(self):
        self.assertEqual(xpath_to_css("//a[starts-with(@href,'/legal')]"), 'a[href^="/legal"]')
        self.assertEqual(xpath_to_css("//a[contains(@href,'privacy')]"), 'a[href*="privacy"]')

    def test_and_predicates(self):
        self.assertEqual(xpath_to_css("//section[@data-part='tos' and @role]"), 'section[data-part="tos"][role]')

    def test_and_inside_quoted_value(self):
        self.assertEqual(xpath_to_css("//div[@title='terms and conditions']"), 'div[title="terms and conditions"]')
        self.assertEqual(
            xpath_to_css("//div[contains(@title, 'a and b') and @role]"), 'div[title*="a and b"][role]'
        )

    def test_non_identifier_values_use_attribute_selectors(self):
        self.assertEqual(xpath_to_css("//div[@id='terms.v2']"), 'div[id="terms.v2"]')
        self.assertEqual(xpath_to_css("//div[@id='2024-terms']"), 'div[id="2024-terms"]')
        self.assertEqual(xpath_to_css("//div[@class='legal 2col']"), 'div[class="legal 2col"]')
        self.assertEqual(xpath_to_css("//div[contains(@class, 'v1.2')]"), 'div[class*="v1.2"]')
        self.assertEqual(xpath_to_css("//div[@id='-main_2']"), "div#-main_2")

    def test_last_and_union(self):
        self.assertEqual(xpath_to_css("//div[last()] | //article"), "div:last-of-type, article")

    def test_text_nodes_are_rejected(self):
        with self.assertRaises(InvalidSelector):
            xpath_to_css("//div/text()")
        with self.assertRaises(InvalidSelector):
            xpath_to_css("//p[text()='Terms']")

    def test_empty_and_malformed(self):
        with self.assertRaises(InvalidSelector):
            xpath_to_css("")
        with self.assertRaises(InvalidSelector):
            xpath_to_css("//div[@id='x'")
        with self.assertRaises(InvalidSelector):
            xpath_to_css("//div/")


if __name__ == "__main__":
    unittest.main()
