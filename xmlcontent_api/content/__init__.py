"""
XML content processing.

This package reads OpenCms style XML content definitions and XML contents,
builds content trees mirroring the definitions, and renders them as JSON.
"""

from .definition import ContentDefinition, SchemaResolver, SchemaType, SequenceKind, load_definition
from .document import XmlContent
from .errors import *
from .renderer import JsonRenderer, RenderOptions
from .repository import ContentRepository
from .schema_info import SchemaInfo
from .tree import ContentTree, Field, Node, NodeType

__all__ = [
    'ContentDefinition',
    'SchemaResolver',
    'SchemaType',
    'SequenceKind',
    'load_definition',
    'XmlContent',
    'JsonRenderer',
    'RenderOptions',
    'ContentRepository',
    'SchemaInfo',
    'ContentTree',
    'Field',
    'Node',
    'NodeType',
]
