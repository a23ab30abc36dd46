"""
JSON rendering of content trees.

Rendering rules:

- simple values become strings (or typed values, see ``RenderOptions``),
- sequences become objects keyed by element name in definition order,
  single-valued fields are collapsed to their value and multi-valued fields
  always become arrays,
- a single choice becomes a one-key object, a repeatable choice becomes an
  array of one-key objects in document order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..logging import get_content_logger
from .document import XmlContent
from .tree import ContentTree, Node, NodeType

logger = get_content_logger('renderer')


@dataclass(frozen=True)
class RenderOptions:
    typed_values: bool = False
    include_missing: bool = False
    strict: bool = False


class JsonRenderer:
    """Renders content trees as JSON-compatible Python objects."""

    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions()

    def render(self, node: Node) -> Any:
        if node.type is NodeType.SIMPLE:
            return self.render_simple(node)
        if node.type is NodeType.CHOICE:
            return self.render_choice(node)
        return self.render_sequence(node)

    def render_simple(self, node: Node) -> Any:
        if self.options.typed_values:
            return node.typed_value
        return node.value

    def render_sequence(self, node: Node) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for content_field in node.fields:
            if content_field.is_multivalue:
                result[content_field.name] = [self.render(child) for child in content_field.nodes]
            elif content_field.nodes:
                result[content_field.name] = self.render(content_field.nodes[0])
            elif self.options.include_missing:
                result[content_field.name] = None
        return result

    def render_choice(self, node: Node) -> Any:
        entries = [{name: self.render(option)} for name, option in node.options]
        if node.definition is not None and node.definition.is_multiple_choice:
            return entries
        return entries[0] if entries else {}

    def render_tree(self, tree: ContentTree) -> Any:
        return self.render(tree.root)

    def render_locale(self, content: XmlContent, locale: str) -> Any:
        tree = ContentTree.build(content, locale, strict=self.options.strict)
        return self.render_tree(tree)

    def render_content(
        self,
        content: XmlContent,
        locales: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Render every locale (or the selected ones) as ``{locale: data}``."""
        selected: List[str] = list(locales) if locales is not None else content.locales
        logger.debug(f"Rendering locales {selected} of {content.definition.type_name}")
        return {locale: self.render_locale(content, locale) for locale in selected}
