"""
Simple value types of OpenCms XML content definitions.

A simple type is referenced from a content definition by its type name
(``type="OpenCmsString"``) and knows how to read the CMS string value, and
optionally a typed JSON value, from the XML element that stores it.
"""

from __future__ import annotations

import json
from typing import Any

from lxml import etree


class SimpleType:
    """A simple (leaf) schema type whose value is the element text."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"

    def string_value(self, element: etree._Element) -> str:
        return element.text or ""

    def typed_value(self, element: etree._Element) -> Any:
        return self.string_value(element)


class HtmlType(SimpleType):
    """HTML values keep their markup in a ``content`` child next to the link table."""

    def string_value(self, element: etree._Element) -> str:
        content = element.find("content")
        if content is not None:
            return content.text or ""
        return element.text or ""


class LinkType(SimpleType):
    """File and variable links store the target path in ``link/target``."""

    def string_value(self, element: etree._Element) -> str:
        target = element.find("link/target")
        if target is not None:
            return (target.text or "").strip()
        return (element.text or "").strip()


class BooleanType(SimpleType):

    def typed_value(self, element: etree._Element) -> Any:
        text = self.string_value(element).strip().lower()
        if text in ("true", "false"):
            return text == "true"
        return self.string_value(element)


class DateTimeType(SimpleType):
    """Dates are stored as milliseconds since the epoch."""

    def typed_value(self, element: etree._Element) -> Any:
        text = self.string_value(element).strip()
        try:
            return int(text)
        except ValueError:
            return self.string_value(element)


class SerialDateType(SimpleType):
    """Serial dates are stored as a JSON document."""

    def typed_value(self, element: etree._Element) -> Any:
        text = self.string_value(element)
        try:
            return json.loads(text)
        except ValueError:
            return text


# Type name of the locale attribute on every locale node
LOCALE_TYPE_NAME = "OpenCmsLocale"

_REGISTRY: dict[str, SimpleType] = {
    simple_type.name: simple_type
    for simple_type in (
        SimpleType("OpenCmsString"),
        SimpleType("OpenCmsPlainText"),
        HtmlType("OpenCmsHtml"),
        LinkType("OpenCmsVfsFile"),
        LinkType("OpenCmsVarLink"),
        BooleanType("OpenCmsBoolean"),
        DateTimeType("OpenCmsDateTime"),
        SerialDateType("OpenCmsSerialDate"),
        SimpleType("OpenCmsColor"),
        SimpleType("OpenCmsCategory"),
        SimpleType("OpenCmsDynamicCategory"),
        SimpleType("OpenCmsDisplayFormatter"),
        SimpleType(LOCALE_TYPE_NAME),
    )
}


def get_simple_type(name: str) -> SimpleType | None:
    """Return the registered simple type for a type name, or None."""
    return _REGISTRY.get(name)


def is_simple_type(name: str) -> bool:
    return name in _REGISTRY


def simple_type_names() -> list[str]:
    return sorted(_REGISTRY)
