"""
Content definitions for OpenCms XML contents.

A content definition is read from an XML schema (XSD) with a fixed shape:

    <xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" elementFormDefault="qualified">
      <xsd:include schemaLocation="opencms://opencms-xmlcontent.xsd"/>
      <xsd:include schemaLocation="opencms://system/schemas/paragraph.xsd"/>
      <xsd:element name="Articles" type="OpenCmsArticles"/>
      <xsd:complexType name="OpenCmsArticles">
        <xsd:sequence>
          <xsd:element name="Article" type="OpenCmsArticle" minOccurs="0" maxOccurs="unbounded"/>
        </xsd:sequence>
      </xsd:complexType>
      <xsd:complexType name="OpenCmsArticle">
        <xsd:sequence>
          <xsd:element name="Title" type="OpenCmsString"/>
          <xsd:element name="Paragraph" type="OpenCmsParagraph" minOccurs="0" maxOccurs="5"/>
        </xsd:sequence>
        <xsd:attribute name="language" type="OpenCmsLocale" use="required"/>
      </xsd:complexType>
    </xsd:schema>

The list type wraps one locale node per language; the node type declares
the fields of a locale node as an ``xsd:sequence`` or an ``xsd:choice``.
Every additional include contributes a nested definition that can be
referenced by its node type name.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from lxml import etree

from ..logging import get_content_logger
from .document import parse_xml
from .errors import SchemaError, SchemaResolutionError
from .types import LOCALE_TYPE_NAME, SimpleType, get_simple_type

logger = get_content_logger('definition')

XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"
_XSD = "{%s}" % XSD_NAMESPACE

XSD_NODE_SCHEMA = _XSD + "schema"
XSD_NODE_INCLUDE = _XSD + "include"
XSD_NODE_ELEMENT = _XSD + "element"
XSD_NODE_COMPLEXTYPE = _XSD + "complexType"
XSD_NODE_SEQUENCE = _XSD + "sequence"
XSD_NODE_CHOICE = _XSD + "choice"
XSD_NODE_ATTRIBUTE = _XSD + "attribute"
XSD_NODE_ANNOTATION = _XSD + "annotation"
XSD_NODE_APPINFO = _XSD + "appinfo"

OPENCMS_SCHEME = "opencms://"
XSD_INCLUDE_OPENCMS = OPENCMS_SCHEME + "opencms-xmlcontent.xsd"
XSD_ATTRIBUTE_VALUE_LANGUAGE = "language"
XSD_ATTRIBUTE_VALUE_UNBOUNDED = "unbounded"

# Same bound the CMS uses for maxOccurs="unbounded"
UNBOUNDED = 2**31 - 1


class SequenceKind(str, Enum):
    """How the fields of a locale node are grouped."""
    SEQUENCE = "sequence"
    CHOICE = "choice"


@dataclass
class SchemaType:
    """One element declaration of a content definition."""
    name: str
    type_name: str
    min_occurs: int = 1
    max_occurs: int = 1
    default: Optional[str] = None
    nested: Optional["ContentDefinition"] = None

    @property
    def simple_type(self) -> Optional[SimpleType]:
        return get_simple_type(self.type_name)

    @property
    def is_simple(self) -> bool:
        return self.nested is None

    @property
    def is_multivalue(self) -> bool:
        return self.max_occurs > 1

    @property
    def is_optional(self) -> bool:
        return self.min_occurs == 0


@dataclass
class ContentDefinition:
    """The structure of an XML content type, read from its schema."""
    outer_name: str
    inner_name: str
    type_name: str
    schema_location: str
    sequence_kind: SequenceKind = SequenceKind.SEQUENCE
    choice_min_occurs: int = 1
    choice_max_occurs: int = 1
    types: List[SchemaType] = field(default_factory=list)
    mappings: Dict[str, str] = field(default_factory=dict)
    defaults: Dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"ContentDefinition({self.type_name!r}, {self.schema_location!r})"

    @property
    def is_choice(self) -> bool:
        return self.sequence_kind is SequenceKind.CHOICE

    @property
    def is_multiple_choice(self) -> bool:
        return self.is_choice and self.choice_max_occurs > 1

    def get_schema_type(self, name: str) -> Optional[SchemaType]:
        for schema_type in self.types:
            if schema_type.name == name:
                return schema_type
        return None

    def type_names(self) -> List[str]:
        return [schema_type.name for schema_type in self.types]


def normalize_location(location: str, base: Optional[str] = None) -> str:
    """
    Normalize a schema location to an absolute repository path.

    ``opencms://system/a.xsd`` and ``/system/a.xsd`` both become
    ``/system/a.xsd``; relative locations are resolved against the
    directory of ``base``.
    """
    location = location.strip()
    if not location:
        raise SchemaResolutionError(location, "empty schema location")
    if location.startswith(OPENCMS_SCHEME):
        path = "/" + location[len(OPENCMS_SCHEME):].lstrip("/")
    elif location.startswith("/"):
        path = location
    elif base is not None:
        path = posixpath.join(posixpath.dirname(normalize_location(base)), location)
    else:
        path = "/" + location
    normalized = posixpath.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    if ".." in normalized.split("/"):
        raise SchemaResolutionError(location, "location escapes the schema root")
    return normalized


class SchemaResolver:
    """Reads schemas by location from a schema root directory."""

    def __init__(self, schema_root: Union[str, Path]):
        self.schema_root = Path(schema_root).resolve()

    def path_for(self, location: str) -> Path:
        normalized = normalize_location(location)
        candidate = (self.schema_root / normalized.lstrip("/")).resolve()
        try:
            candidate.relative_to(self.schema_root)
        except ValueError:
            raise SchemaResolutionError(location, "location escapes the schema root")
        return candidate

    def read(self, location: str) -> bytes:
        path = self.path_for(location)
        if not path.is_file():
            raise SchemaResolutionError(location, f"no schema file at {path}")
        return path.read_bytes()


def _invalid(reason: str, location: str) -> SchemaError:
    return SchemaError(
        f"Invalid OpenCms content definition XML schema structure in '{location}': {reason}"
    )


def _children(element: etree._Element) -> List[etree._Element]:
    # Comments and processing instructions have non-string tags
    return [child for child in element if isinstance(child.tag, str)]


def _parse_occurs(value: Optional[str], attribute: str, location: str) -> int:
    if value is None:
        return 1
    if value == XSD_ATTRIBUTE_VALUE_UNBOUNDED:
        return UNBOUNDED
    try:
        occurs = int(value)
    except ValueError:
        raise _invalid(f"{attribute}='{value}' is not a number", location)
    if occurs < 0:
        raise _invalid(f"{attribute}='{value}' is negative", location)
    return occurs


class DefinitionLoader:
    """
    Unmarshals content definitions from XML schemas.

    Included schemas are loaded once per loader through the resolver;
    circular includes are rejected.
    """

    def __init__(self, resolver: Optional[SchemaResolver] = None):
        self.resolver = resolver
        self._loaded: Dict[str, ContentDefinition] = {}
        self._loading: List[str] = []

    def load(self, location: str) -> ContentDefinition:
        """Load the definition stored at a schema location."""
        key = normalize_location(location)
        if key in self._loaded:
            return self._loaded[key]
        if self.resolver is None:
            raise SchemaResolutionError(location, "no schema resolver configured")
        return self.load_source(self.resolver.read(key), key)

    def load_source(self, source: Union[bytes, str], location: str) -> ContentDefinition:
        """Load a definition from schema text, registered under ``location``."""
        key = normalize_location(location)
        if key in self._loading:
            cycle = " -> ".join(self._loading + [key])
            raise SchemaError(f"Circular schema include: {cycle}")

        self._loading.append(key)
        try:
            root = parse_xml(source, what=f"schema '{key}'", error_class=SchemaError)
            definition = self._unmarshal(root, key)
        finally:
            self._loading.pop()

        self._loaded[key] = definition
        logger.debug(f"Loaded content definition {definition.type_name} from {key}")
        return definition

    def _unmarshal(self, root: etree._Element, location: str) -> ContentDefinition:
        if root.tag != XSD_NODE_SCHEMA:
            raise _invalid("root element is not xsd:schema", location)

        nested = self._load_includes(root, location)

        elements = root.findall(XSD_NODE_ELEMENT)
        if len(elements) != 1:
            raise _invalid(f"expected exactly one top-level element, found {len(elements)}", location)
        outer_name = elements[0].get("name")
        list_type_name = elements[0].get("type")
        if not outer_name or not list_type_name:
            raise _invalid("top-level element needs a name and a type", location)

        complex_types = root.findall(XSD_NODE_COMPLEXTYPE)
        if len(complex_types) != 2:
            raise _invalid(f"expected exactly two complex types, found {len(complex_types)}", location)
        by_name = {complex_type.get("name"): complex_type for complex_type in complex_types}
        if list_type_name not in by_name:
            raise _invalid(f"list type '{list_type_name}' is not declared", location)
        list_type = by_name.pop(list_type_name)
        if not by_name or None in by_name:
            raise _invalid(f"node type must be named and differ from list type '{list_type_name}'", location)
        node_type_name, node_type = next(iter(by_name.items()))

        inner_name = self._check_list_type(list_type, node_type_name, location)

        definition = ContentDefinition(
            outer_name=outer_name,
            inner_name=inner_name,
            type_name=node_type_name,
            schema_location=location,
        )
        self._read_node_type(node_type, definition, nested, location)
        self._read_appinfo(root, definition, location)
        return definition

    def _load_includes(self, root: etree._Element, location: str) -> Dict[str, ContentDefinition]:
        nested: Dict[str, ContentDefinition] = {}
        base_includes = 0
        for include in root.findall(XSD_NODE_INCLUDE):
            target = include.get("schemaLocation")
            if not target:
                raise _invalid("xsd:include without schemaLocation", location)
            if target == XSD_INCLUDE_OPENCMS:
                base_includes += 1
                continue
            included = self.load(normalize_location(target, base=location))
            nested[included.type_name] = included
        if base_includes != 1:
            raise _invalid(f"schema must include {XSD_INCLUDE_OPENCMS} exactly once", location)
        return nested

    def _check_list_type(self, list_type: etree._Element, node_type_name: str, location: str) -> str:
        children = _children(list_type)
        if not children or children[0].tag != XSD_NODE_SEQUENCE:
            raise _invalid("list type must contain an xsd:sequence", location)
        entries = _children(children[0])
        if len(entries) != 1 or entries[0].tag != XSD_NODE_ELEMENT:
            raise _invalid("list type sequence must declare exactly one element", location)
        entry = entries[0]
        inner_name = entry.get("name")
        if not inner_name:
            raise _invalid("list type element has no name", location)
        if entry.get("type") != node_type_name:
            raise _invalid(f"list type element must have type '{node_type_name}'", location)
        if entry.get("minOccurs") != "0" or entry.get("maxOccurs") != XSD_ATTRIBUTE_VALUE_UNBOUNDED:
            raise _invalid("list type element must have minOccurs='0' maxOccurs='unbounded'", location)
        return inner_name

    def _read_node_type(
        self,
        node_type: etree._Element,
        definition: ContentDefinition,
        nested: Dict[str, ContentDefinition],
        location: str,
    ) -> None:
        children = _children(node_type)
        if len(children) != 2:
            raise _invalid(f"type '{definition.type_name}' must have a group and a language attribute", location)
        group, attribute = children

        if attribute.tag != XSD_NODE_ATTRIBUTE:
            raise _invalid(f"type '{definition.type_name}' lacks the language attribute", location)
        if attribute.get("name") != XSD_ATTRIBUTE_VALUE_LANGUAGE or attribute.get("type") != LOCALE_TYPE_NAME:
            raise _invalid(f"language attribute of '{definition.type_name}' must have type {LOCALE_TYPE_NAME}", location)

        if group.tag == XSD_NODE_SEQUENCE:
            definition.sequence_kind = SequenceKind.SEQUENCE
        elif group.tag == XSD_NODE_CHOICE:
            definition.sequence_kind = SequenceKind.CHOICE
            definition.choice_min_occurs = _parse_occurs(group.get("minOccurs"), "minOccurs", location)
            definition.choice_max_occurs = _parse_occurs(group.get("maxOccurs"), "maxOccurs", location)
            if definition.choice_min_occurs > definition.choice_max_occurs:
                raise _invalid(f"choice of '{definition.type_name}' has minOccurs > maxOccurs", location)
        else:
            raise _invalid(f"type '{definition.type_name}' must use xsd:sequence or xsd:choice", location)

        declarations = _children(group)
        if not declarations:
            raise _invalid(f"type '{definition.type_name}' declares no elements", location)

        for declaration in declarations:
            if declaration.tag != XSD_NODE_ELEMENT:
                raise _invalid(f"unexpected {etree.QName(declaration).localname} in '{definition.type_name}'", location)
            schema_type = self._read_element(declaration, nested, location)
            if definition.get_schema_type(schema_type.name) is not None:
                raise _invalid(f"element '{schema_type.name}' declared twice", location)
            if definition.is_choice:
                # Choice options hold a single value per occurrence
                schema_type.min_occurs = 0
                schema_type.max_occurs = 1
            definition.types.append(schema_type)

    def _read_element(
        self,
        declaration: etree._Element,
        nested: Dict[str, ContentDefinition],
        location: str,
    ) -> SchemaType:
        name = declaration.get("name")
        type_name = declaration.get("type")
        if not name or not type_name:
            raise _invalid("element declarations need a name and a type", location)

        min_occurs = _parse_occurs(declaration.get("minOccurs"), "minOccurs", location)
        max_occurs = _parse_occurs(declaration.get("maxOccurs"), "maxOccurs", location)
        if max_occurs == 0 or min_occurs > max_occurs:
            raise _invalid(f"element '{name}' has invalid occurrence bounds", location)

        schema_type = SchemaType(
            name=name,
            type_name=type_name,
            min_occurs=min_occurs,
            max_occurs=max_occurs,
            default=declaration.get("default"),
        )
        if type_name in nested:
            schema_type.nested = nested[type_name]
        elif get_simple_type(type_name) is None or type_name == LOCALE_TYPE_NAME:
            raise SchemaError(f"Unregistered XML content type '{type_name}' used by element '{name}' in '{location}'")
        return schema_type

    def _read_appinfo(self, root: etree._Element, definition: ContentDefinition, location: str) -> None:
        appinfo = root.find(f"{XSD_NODE_ANNOTATION}/{XSD_NODE_APPINFO}")
        if appinfo is None:
            return

        for section in _children(appinfo):
            if section.tag == "mappings":
                for mapping in section.findall("mapping"):
                    self._add_entry(definition.mappings, definition, mapping.get("element"), mapping.get("mapto"), location)
            elif section.tag == "mapping":
                self._add_entry(definition.mappings, definition, section.get("element"), section.get("mapto"), location)
            elif section.tag == "defaults":
                for default in section.findall("default"):
                    self._add_entry(definition.defaults, definition, default.get("element"), default.get("value"), location)

    @staticmethod
    def _add_entry(
        target: Dict[str, str],
        definition: ContentDefinition,
        element: Optional[str],
        value: Optional[str],
        location: str,
    ) -> None:
        if element is None or value is None:
            return
        # Element paths may be nested ("Paragraph/Text"); the first step must exist here
        first_step = element.split("/")[0].split("[")[0]
        if definition.get_schema_type(first_step) is None:
            raise SchemaError(
                f"Unregistered XML content element '{element}' used in appinfo of '{location}'"
            )
        target[element] = value


def load_definition(
    source: Union[bytes, str],
    schema_location: str,
    resolver: Optional[SchemaResolver] = None,
) -> ContentDefinition:
    """Unmarshal a content definition from schema text."""
    return DefinitionLoader(resolver).load_source(source, schema_location)
