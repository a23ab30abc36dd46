"""
In-memory tree of an XML content locale.

The tree mirrors the content definition rather than the raw XML: every
sequence node carries one field per declared element (present or not), choice
nodes list their chosen options in document order, and simple nodes wrap the
XML element holding a value.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from lxml import etree

from ..logging import get_content_logger, log_content_operation
from .definition import ContentDefinition, SchemaType
from .document import XmlContent
from .errors import ContentError

logger = get_content_logger('tree')

_XPATH_STEP = re.compile(r'^([A-Za-z_][\w.\-]*)(?:\[(\d+)\])?$')


class NodeType(str, Enum):
    SEQUENCE = "sequence"
    CHOICE = "choice"
    SIMPLE = "simple"


@dataclass
class Node:
    """A node of the content tree."""
    type: NodeType
    path: str
    element: etree._Element
    schema_type: Optional[SchemaType] = None
    definition: Optional[ContentDefinition] = None
    fields: List["Field"] = field(default_factory=list)
    options: List[Tuple[str, "Node"]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return etree.QName(self.element).localname

    @property
    def value(self) -> Optional[str]:
        """String value of a simple node."""
        if self.type is not NodeType.SIMPLE or self.schema_type is None:
            return None
        return self.schema_type.simple_type.string_value(self.element)

    @property
    def typed_value(self) -> Any:
        if self.type is not NodeType.SIMPLE or self.schema_type is None:
            return None
        return self.schema_type.simple_type.typed_value(self.element)

    def get_field(self, name: str) -> Optional["Field"]:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None

    def children(self) -> Iterator["Node"]:
        if self.type is NodeType.SEQUENCE:
            for content_field in self.fields:
                yield from content_field.nodes
        elif self.type is NodeType.CHOICE:
            for _, option in self.options:
                yield option


@dataclass
class Field:
    """The values of one declared element inside a sequence node."""
    name: str
    schema_type: SchemaType
    nodes: List[Node] = field(default_factory=list)

    @property
    def is_multivalue(self) -> bool:
        return self.schema_type.is_multivalue


def _join(parent_path: str, name: str, index: int) -> str:
    step = f"{name}[{index}]"
    return f"{parent_path}/{step}" if parent_path else step


class ContentTree:
    """Content tree for one locale of an XML content."""

    def __init__(self, root: Node, locale: str):
        self.root = root
        self.locale = locale

    @classmethod
    def build(cls, content: XmlContent, locale: str, strict: bool = False) -> "ContentTree":
        """
        Build the tree of a locale.

        Args:
            content: Parsed XML content
            locale: Locale to build the tree for
            strict: Reject missing mandatory values and undeclared elements
                instead of tolerating them

        Returns:
            ContentTree rooted at the locale node

        Raises:
            LocaleNotFoundError: If the locale is not in the content
            ContentError: If the content does not match its definition
        """
        builder = _TreeBuilder(strict=strict, locale=locale)
        root = builder.node_for_definition(content.locale_node(locale), content.definition, "")
        log_content_operation(
            logger, "Built content tree", locale=locale,
            schema_location=content.definition.schema_location,
            level=logging.DEBUG, skipped=builder.skipped,
        )
        return cls(root, locale)

    def walk(self) -> Iterator[Node]:
        """Iterate all nodes depth first, root included."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children())))

    def find(self, path: str) -> Optional[Node]:
        """
        Resolve an xpath like ``Paragraph[2]/Text`` to a node.

        Indexes are 1-based and default to 1.
        """
        node = self.root
        for step in [step for step in path.strip("/").split("/") if step]:
            match = _XPATH_STEP.match(step)
            if not match:
                raise ValueError(f"Invalid xpath step '{step}' in '{path}'")
            name, index = match.group(1), int(match.group(2) or 1)
            if index < 1:
                return None
            if node.type is NodeType.SEQUENCE:
                content_field = node.get_field(name)
                if content_field is None or index > len(content_field.nodes):
                    return None
                node = content_field.nodes[index - 1]
            elif node.type is NodeType.CHOICE:
                matching = [option for option_name, option in node.options if option_name == name]
                if index > len(matching):
                    return None
                node = matching[index - 1]
            else:
                return None
        return node

    def value(self, path: str) -> Optional[str]:
        node = self.find(path)
        return node.value if node is not None else None


class _TreeBuilder:

    def __init__(self, strict: bool, locale: str):
        self.strict = strict
        self.locale = locale
        self.skipped = 0

    def node_for_definition(
        self,
        element: etree._Element,
        definition: ContentDefinition,
        path: str,
        schema_type: Optional[SchemaType] = None,
    ) -> Node:
        if definition.is_choice:
            node = Node(NodeType.CHOICE, path, element, schema_type=schema_type, definition=definition)
            self._fill_choice(node, definition)
        else:
            node = Node(NodeType.SEQUENCE, path, element, schema_type=schema_type, definition=definition)
            self._fill_sequence(node, definition)
        return node

    def node_for_value(self, element: etree._Element, schema_type: SchemaType, path: str) -> Node:
        if schema_type.nested is not None:
            return self.node_for_definition(element, schema_type.nested, path, schema_type)
        return Node(NodeType.SIMPLE, path, element, schema_type=schema_type)

    def _elements(self, element: etree._Element) -> Iterator[Tuple[str, etree._Element]]:
        for child in element:
            if isinstance(child.tag, str):
                yield etree.QName(child).localname, child

    def _undeclared(self, name: str, node: Node) -> None:
        xpath = _join(node.path, name, 1)
        if self.strict:
            raise ContentError(f"Element '{name}' is not declared by '{node.definition.type_name}'", xpath)
        self.skipped += 1
        logger.warning(
            f"Skipping undeclared element '{name}' in {node.definition.type_name}",
            extra={'locale': self.locale, 'xpath': xpath},
        )

    def _fill_sequence(self, node: Node, definition: ContentDefinition) -> None:
        fields = {schema_type.name: Field(schema_type.name, schema_type) for schema_type in definition.types}
        for name, child in self._elements(node.element):
            content_field = fields.get(name)
            if content_field is None:
                self._undeclared(name, node)
                continue
            index = len(content_field.nodes) + 1
            if index > content_field.schema_type.max_occurs:
                raise ContentError(
                    f"Element '{name}' occurs more than {content_field.schema_type.max_occurs} times",
                    _join(node.path, name, index),
                )
            content_field.nodes.append(self.node_for_value(child, content_field.schema_type, _join(node.path, name, index)))

        for content_field in fields.values():
            missing = content_field.schema_type.min_occurs - len(content_field.nodes)
            if missing > 0:
                xpath = _join(node.path, content_field.name, len(content_field.nodes) + 1)
                if self.strict:
                    raise ContentError(
                        f"Element '{content_field.name}' needs at least "
                        f"{content_field.schema_type.min_occurs} occurrences",
                        xpath,
                    )
                logger.debug(f"Missing {missing} mandatory '{content_field.name}' value(s) at {xpath}")

        node.fields = list(fields.values())

    def _fill_choice(self, node: Node, definition: ContentDefinition) -> None:
        counts: Dict[str, int] = {}
        for name, child in self._elements(node.element):
            schema_type = definition.get_schema_type(name)
            if schema_type is None:
                self._undeclared(name, node)
                continue
            if len(node.options) >= definition.choice_max_occurs:
                raise ContentError(
                    f"Choice '{definition.type_name}' allows at most {definition.choice_max_occurs} option(s)",
                    _join(node.path, name, counts.get(name, 0) + 1),
                )
            counts[name] = counts.get(name, 0) + 1
            node.options.append((name, self.node_for_value(child, schema_type, _join(node.path, name, counts[name]))))

        if len(node.options) < definition.choice_min_occurs and self.strict:
            raise ContentError(
                f"Choice '{definition.type_name}' needs at least {definition.choice_min_occurs} option(s)",
                node.path or None,
            )
