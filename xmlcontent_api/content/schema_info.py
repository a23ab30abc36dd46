"""Describes content definitions as JSON for editors and API clients."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .definition import UNBOUNDED, ContentDefinition, SchemaType


def _max_occurs(value: int) -> Any:
    return "unbounded" if value >= UNBOUNDED else value


class SchemaInfo:
    """Field tree of a content definition."""

    def __init__(self, definition: ContentDefinition):
        self.definition = definition

    def describe(self) -> Dict[str, Any]:
        definition = self.definition
        return {
            "name": definition.inner_name,
            "rootElement": definition.outer_name,
            "type": definition.type_name,
            "schemaLocation": definition.schema_location,
            "isChoice": definition.is_choice,
            "choiceMinOccurs": definition.choice_min_occurs if definition.is_choice else None,
            "choiceMaxOccurs": _max_occurs(definition.choice_max_occurs) if definition.is_choice else None,
            "children": self._children(definition, ""),
        }

    def _children(self, definition: ContentDefinition, prefix: str) -> list:
        return [
            self._describe_type(schema_type, definition, f"{prefix}{schema_type.name}")
            for schema_type in definition.types
        ]

    def _describe_type(self, schema_type: SchemaType, parent: ContentDefinition, path: str) -> Dict[str, Any]:
        nested: Optional[ContentDefinition] = schema_type.nested
        info: Dict[str, Any] = {
            "name": schema_type.name,
            "path": path,
            "type": schema_type.type_name,
            "minOccurs": schema_type.min_occurs,
            "maxOccurs": _max_occurs(schema_type.max_occurs),
            "isChoiceOption": parent.is_choice,
            "isChoice": nested is not None and nested.is_choice,
            "isNestedContent": nested is not None,
            "defaultValue": self._default(schema_type, path),
            "mapping": self.definition.mappings.get(path),
        }
        if nested is not None:
            if nested.is_choice:
                info["choiceMaxOccurs"] = _max_occurs(nested.choice_max_occurs)
            info["children"] = self._children(nested, f"{path}/")
        return info

    def _default(self, schema_type: SchemaType, path: str) -> Optional[str]:
        if path in self.definition.defaults:
            return self.definition.defaults[path]
        return schema_type.default
