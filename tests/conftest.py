"""Shared schemas, contents and fixtures for the content tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from xmlcontent_api.content.definition import ContentDefinition, DefinitionLoader, SchemaResolver
from xmlcontent_api.content.document import XmlContent

PARAGRAPH_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" elementFormDefault="qualified">
  <xsd:include schemaLocation="opencms://opencms-xmlcontent.xsd"/>
  <xsd:element name="Paragraphs" type="OpenCmsParagraphs"/>
  <xsd:complexType name="OpenCmsParagraphs">
    <xsd:sequence>
      <xsd:element name="Paragraph" type="OpenCmsParagraph" minOccurs="0" maxOccurs="unbounded"/>
    </xsd:sequence>
  </xsd:complexType>
  <xsd:complexType name="OpenCmsParagraph">
    <xsd:sequence>
      <xsd:element name="Headline" type="OpenCmsString" minOccurs="0"/>
      <xsd:element name="Text" type="OpenCmsHtml"/>
    </xsd:sequence>
    <xsd:attribute name="language" type="OpenCmsLocale" use="optional"/>
  </xsd:complexType>
</xsd:schema>
"""

MEDIA_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" elementFormDefault="qualified">
  <xsd:include schemaLocation="opencms://opencms-xmlcontent.xsd"/>
  <xsd:element name="Medias" type="OpenCmsMedias"/>
  <xsd:complexType name="OpenCmsMedias">
    <xsd:sequence>
      <xsd:element name="Media" type="OpenCmsMedia" minOccurs="0" maxOccurs="unbounded"/>
    </xsd:sequence>
  </xsd:complexType>
  <xsd:complexType name="OpenCmsMedia">
    <xsd:choice minOccurs="0" maxOccurs="unbounded">
      <xsd:element name="Image" type="OpenCmsVfsFile" minOccurs="0"/>
      <xsd:element name="Video" type="OpenCmsString" minOccurs="0"/>
    </xsd:choice>
    <xsd:attribute name="language" type="OpenCmsLocale" use="optional"/>
  </xsd:complexType>
</xsd:schema>
"""

HIGHLIGHT_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" elementFormDefault="qualified">
  <xsd:include schemaLocation="opencms://opencms-xmlcontent.xsd"/>
  <xsd:element name="Highlights" type="OpenCmsHighlights"/>
  <xsd:complexType name="OpenCmsHighlights">
    <xsd:sequence>
      <xsd:element name="Highlight" type="OpenCmsHighlight" minOccurs="0" maxOccurs="unbounded"/>
    </xsd:sequence>
  </xsd:complexType>
  <xsd:complexType name="OpenCmsHighlight">
    <xsd:choice minOccurs="0" maxOccurs="1">
      <xsd:element name="Quote" type="OpenCmsString" minOccurs="0"/>
      <xsd:element name="Image" type="OpenCmsVfsFile" minOccurs="0"/>
    </xsd:choice>
    <xsd:attribute name="language" type="OpenCmsLocale" use="optional"/>
  </xsd:complexType>
</xsd:schema>
"""

ARTICLE_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" elementFormDefault="qualified">
  <xsd:include schemaLocation="opencms://opencms-xmlcontent.xsd"/>
  <xsd:include schemaLocation="opencms://system/schemas/nested/paragraph.xsd"/>
  <xsd:include schemaLocation="nested/media.xsd"/>
  <xsd:include schemaLocation="/system/schemas/nested/highlight.xsd"/>
  <xsd:element name="Articles" type="OpenCmsArticles"/>
  <xsd:complexType name="OpenCmsArticles">
    <xsd:sequence>
      <xsd:element name="Article" type="OpenCmsArticle" minOccurs="0" maxOccurs="unbounded"/>
    </xsd:sequence>
  </xsd:complexType>
  <xsd:complexType name="OpenCmsArticle">
    <xsd:sequence>
      <xsd:element name="Title" type="OpenCmsString"/>
      <xsd:element name="Date" type="OpenCmsDateTime" minOccurs="0"/>
      <xsd:element name="Published" type="OpenCmsBoolean" minOccurs="0" default="false"/>
      <xsd:element name="Keyword" type="OpenCmsString" minOccurs="0" maxOccurs="unbounded"/>
      <xsd:element name="Paragraph" type="OpenCmsParagraph" minOccurs="0" maxOccurs="5"/>
      <xsd:element name="Media" type="OpenCmsMedia" minOccurs="0"/>
      <xsd:element name="Highlight" type="OpenCmsHighlight" minOccurs="0"/>
      <xsd:element name="Link" type="OpenCmsVarLink" minOccurs="0"/>
    </xsd:sequence>
    <xsd:attribute name="language" type="OpenCmsLocale" use="required"/>
  </xsd:complexType>
  <xsd:annotation>
    <xsd:appinfo>
      <mappings>
        <mapping element="Title" mapto="property:Title"/>
      </mappings>
      <defaults>
        <default element="Paragraph/Headline" value="Untitled"/>
      </defaults>
    </xsd:appinfo>
  </xsd:annotation>
</xsd:schema>
"""

ARTICLE_LOCATION = "opencms://system/schemas/article.xsd"

ARTICLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Articles xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
          xsi:noNamespaceSchemaLocation="opencms://system/schemas/article.xsd">
  <Article language="en">
    <Title><![CDATA[Hello World]]></Title>
    <Date><![CDATA[1700000000000]]></Date>
    <Published><![CDATA[true]]></Published>
    <Keyword><![CDATA[cms]]></Keyword>
    <Paragraph>
      <Headline><![CDATA[Intro]]></Headline>
      <Text name="Text0">
        <links/>
        <content><![CDATA[<p>First</p>]]></content>
      </Text>
    </Paragraph>
    <Paragraph>
      <Text name="Text1">
        <links/>
        <content><![CDATA[<p>Second</p>]]></content>
      </Text>
    </Paragraph>
    <Media>
      <Image>
        <link type="WEAK">
          <target><![CDATA[/sites/default/a.png]]></target>
          <uuid>0f0e0d0c-0000-0000-0000-000000000001</uuid>
        </link>
      </Image>
      <Video><![CDATA[https://example.org/v.mp4]]></Video>
      <Image>
        <link type="WEAK">
          <target><![CDATA[/sites/default/b.png]]></target>
        </link>
      </Image>
    </Media>
    <Highlight>
      <Quote><![CDATA[Simply the best]]></Quote>
    </Highlight>
    <Link><![CDATA[https://www.opencms.org]]></Link>
  </Article>
  <Article language="de">
    <Title><![CDATA[Hallo Welt]]></Title>
  </Article>
</Articles>
"""


def write_schemas(root: Path) -> Path:
    """Write the test schemas below ``root`` and return the root."""
    schemas = root / "system" / "schemas"
    (schemas / "nested").mkdir(parents=True, exist_ok=True)
    (schemas / "nested" / "paragraph.xsd").write_text(PARAGRAPH_XSD, encoding="utf-8")
    (schemas / "nested" / "media.xsd").write_text(MEDIA_XSD, encoding="utf-8")
    (schemas / "nested" / "highlight.xsd").write_text(HIGHLIGHT_XSD, encoding="utf-8")
    (schemas / "article.xsd").write_text(ARTICLE_XSD, encoding="utf-8")
    return root


@pytest.fixture()
def schema_root(tmp_path: Path) -> Path:
    return write_schemas(tmp_path)


@pytest.fixture()
def resolver(schema_root: Path) -> SchemaResolver:
    return SchemaResolver(schema_root)


@pytest.fixture()
def article_definition(resolver: SchemaResolver) -> ContentDefinition:
    return DefinitionLoader(resolver).load(ARTICLE_LOCATION)


@pytest.fixture()
def article_content(article_definition: ContentDefinition) -> XmlContent:
    return XmlContent.parse(ARTICLE_XML, article_definition)
