"""
XML content documents.

An XML content stores one locale node per language below its root element:

    <Articles xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
              xsi:noNamespaceSchemaLocation="opencms://system/schemas/article.xsd">
      <Article language="en">
        <Title><![CDATA[Hello]]></Title>
      </Article>
      <Article language="de">
        <Title><![CDATA[Hallo]]></Title>
      </Article>
    </Articles>
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, List, Optional, Type, Union

from lxml import etree

from ..logging import get_content_logger
from .errors import ContentError, LocaleNotFoundError, XmlContentError

if TYPE_CHECKING:
    from .definition import ContentDefinition

logger = get_content_logger('document')

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSI_NO_NAMESPACE_SCHEMA_LOCATION = "{%s}noNamespaceSchemaLocation" % XSI_NAMESPACE
LANGUAGE_ATTRIBUTE = "language"

_XML_DECLARATION = re.compile(r"^\ufeff?\s*<\?xml\s[^>]*\?>")


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=False,
    )


def parse_xml(
    data: Union[bytes, str],
    what: str = "document",
    error_class: Type[XmlContentError] = ContentError,
) -> etree._Element:
    """Parse XML text without entity expansion or network access."""
    if isinstance(data, str):
        # Text is already decoded, so its declared encoding no longer applies
        data = _XML_DECLARATION.sub("", data, count=1).encode("utf-8")
    if not data.strip():
        raise error_class(f"Empty {what}")
    try:
        return etree.fromstring(data, parser=_new_parser())
    except etree.XMLSyntaxError as e:
        raise error_class(f"Malformed XML in {what}: {e}") from e


def schema_location_of(data: Union[bytes, str]) -> Optional[str]:
    """Return the ``xsi:noNamespaceSchemaLocation`` of a content, if any."""
    root = parse_xml(data)
    return root.get(XSI_NO_NAMESPACE_SCHEMA_LOCATION)


class XmlContent:
    """A parsed XML content bound to its content definition."""

    def __init__(self, root: etree._Element, definition: "ContentDefinition"):
        self.root = root
        self.definition = definition
        self._locale_nodes: Dict[str, etree._Element] = {}
        self._index_locales()

    @classmethod
    def parse(cls, data: Union[bytes, str], definition: "ContentDefinition") -> "XmlContent":
        return cls(parse_xml(data), definition)

    @property
    def schema_location(self) -> Optional[str]:
        return self.root.get(XSI_NO_NAMESPACE_SCHEMA_LOCATION)

    @property
    def locales(self) -> List[str]:
        return list(self._locale_nodes)

    def has_locale(self, locale: str) -> bool:
        return locale in self._locale_nodes

    def locale_node(self, locale: str) -> etree._Element:
        try:
            return self._locale_nodes[locale]
        except KeyError:
            raise LocaleNotFoundError(locale, self.locales) from None

    def _index_locales(self) -> None:
        definition = self.definition
        if etree.QName(self.root).localname != definition.outer_name:
            raise ContentError(
                f"Root element '{etree.QName(self.root).localname}' does not match "
                f"content definition '{definition.outer_name}'"
            )

        for child in self.root:
            if not isinstance(child.tag, str):
                continue
            name = etree.QName(child).localname
            if name != definition.inner_name:
                raise ContentError(
                    f"Unexpected element '{name}', expected '{definition.inner_name}' locale nodes"
                )
            locale = child.get(LANGUAGE_ATTRIBUTE)
            if not locale:
                raise ContentError(f"Locale node '{name}' has no language attribute")
            if locale in self._locale_nodes:
                raise ContentError(f"Duplicate locale '{locale}'")
            self._locale_nodes[locale] = child

        logger.debug(f"Indexed locales {self.locales} for {definition.type_name}")
