import pytest

from xmlcontent_api.content.document import XmlContent, parse_xml, schema_location_of
from xmlcontent_api.content.errors import ContentError, LocaleNotFoundError

from .conftest import ARTICLE_XML


class TestXmlContent:

    def test_locales_in_document_order(self, article_content):
        assert article_content.locales == ["en", "de"]
        assert article_content.has_locale("de")
        assert not article_content.has_locale("fr")

    def test_schema_location(self, article_content):
        assert article_content.schema_location == "opencms://system/schemas/article.xsd"
        assert schema_location_of(ARTICLE_XML) == "opencms://system/schemas/article.xsd"

    def test_locale_node(self, article_content):
        node = article_content.locale_node("de")
        assert node.get("language") == "de"

    def test_unknown_locale(self, article_content):
        with pytest.raises(LocaleNotFoundError) as exc_info:
            article_content.locale_node("fr")
        assert exc_info.value.available == ["en", "de"]

    def test_wrong_root_element(self, article_definition):
        with pytest.raises(ContentError, match="does not match"):
            XmlContent.parse("<Events/>", article_definition)

    def test_wrong_locale_node(self, article_definition):
        with pytest.raises(ContentError, match="Unexpected element 'Event'"):
            XmlContent.parse('<Articles><Event language="en"/></Articles>', article_definition)

    def test_missing_language(self, article_definition):
        with pytest.raises(ContentError, match="no language attribute"):
            XmlContent.parse("<Articles><Article/></Articles>", article_definition)

    def test_duplicate_locale(self, article_definition):
        xml = '<Articles><Article language="en"/><Article language="en"/></Articles>'
        with pytest.raises(ContentError, match="Duplicate locale 'en'"):
            XmlContent.parse(xml, article_definition)

    def test_empty_content_has_no_locales(self, article_definition):
        assert XmlContent.parse("<Articles/>", article_definition).locales == []


class TestParseXml:

    def test_empty_input(self):
        with pytest.raises(ContentError, match="Empty"):
            parse_xml("   ")

    def test_entities_are_not_expanded(self):
        xml = """<?xml version="1.0"?>
<!DOCTYPE Articles [<!ENTITY secret SYSTEM "file:///etc/passwd">]>
<Articles>&secret;</Articles>"""
        root = parse_xml(xml)
        assert "root:" not in "".join(root.itertext())

    def test_str_with_encoding_declaration(self):
        root = parse_xml('<?xml version="1.0" encoding="UTF-8"?><Articles/>')
        assert root.tag == "Articles"

    def test_str_with_latin1_declaration_keeps_text(self):
        root = parse_xml('<?xml version="1.0" encoding="ISO-8859-1"?>\n<Title>Grüße</Title>')
        assert root.text == "Grüße"

    def test_latin1_bytes(self):
        data = '<?xml version="1.0" encoding="ISO-8859-1"?><Title>Grüße</Title>'.encode("latin-1")
        assert parse_xml(data).text == "Grüße"
