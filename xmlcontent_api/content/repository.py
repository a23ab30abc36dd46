"""
File system backed content repository.

Contents and schemas live below root directories on disk, addressed by
relative repository paths. Schema locations inside contents
(``opencms://system/...``) are resolved against the schema root.
"""

import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..logging import get_content_logger, log_content_operation
from .cache import DefinitionCache
from .definition import ContentDefinition, DefinitionLoader, SchemaResolver, normalize_location
from .document import XmlContent, schema_location_of
from .errors import ContentError, ContentNotFoundError, RepositoryPathError, SchemaResolutionError

logger = get_content_logger('repository')

# Location under which inline schemas sent with a request are registered
INLINE_SCHEMA_LOCATION = "/inline/schema.xsd"

_TRAVERSAL_PATTERNS = [
    re.compile(r'%2e%2e', re.IGNORECASE),
    re.compile(r'%252e', re.IGNORECASE),
    re.compile(r'%c0%ae', re.IGNORECASE),
]


class ContentRepository:
    """
    Reads XML contents and their content definitions from disk.

    Provides path validation for repository paths, content listing, and
    cached loading of content definitions.
    """

    CONTENT_SUFFIX = ".xml"

    def __init__(
        self,
        content_root: Union[str, Path],
        schema_root: Optional[Union[str, Path]] = None,
        cache: Optional[DefinitionCache] = None,
        max_document_bytes: int = 5 * 1024 * 1024,
        max_path_length: int = 1024,
    ):
        """
        Initialize ContentRepository.

        Args:
            content_root: Directory holding the XML contents
            schema_root: Directory schema locations resolve against,
                defaults to the content root
            cache: Definition cache shared between requests
            max_document_bytes: Largest content or schema accepted
            max_path_length: Longest repository path accepted
        """
        self.content_root = Path(content_root).resolve()
        self.schema_root = Path(schema_root).resolve() if schema_root is not None else self.content_root
        self.resolver = SchemaResolver(self.schema_root)
        self.cache = cache if cache is not None else DefinitionCache()
        self.max_document_bytes = max_document_bytes
        self.max_path_length = max_path_length

        if not self.content_root.is_dir():
            raise RepositoryPathError(f"Content root is not a directory: {self.content_root}")

    def resolve(self, path: Union[str, Path]) -> Path:
        """
        Resolve a repository path to a file below the content root.

        Raises:
            RepositoryPathError: If the path is malformed or escapes the root
            ContentNotFoundError: If no file exists at the path
        """
        path_str = str(path)
        if not path_str or not path_str.strip():
            raise RepositoryPathError("Path cannot be empty")
        if '\x00' in path_str:
            raise RepositoryPathError("Path contains null bytes")
        if len(path_str) > self.max_path_length:
            raise RepositoryPathError(f"Path too long: {len(path_str)} > {self.max_path_length}")
        for pattern in _TRAVERSAL_PATTERNS:
            if pattern.search(path_str):
                raise RepositoryPathError(f"Path contains encoded traversal sequences: {path_str}")

        relative = Path(path_str.replace('\\', '/'))
        if relative.is_absolute():
            raise RepositoryPathError(f"Path must be relative to the content root: {path_str}")
        if any(part == '..' for part in relative.parts):
            raise RepositoryPathError(f"Path must not contain '..': {path_str}")

        candidate = (self.content_root / relative).resolve()
        try:
            candidate.relative_to(self.content_root)
        except ValueError:
            raise RepositoryPathError(f"Path resolves outside the content root: {path_str}")

        if not candidate.is_file():
            raise ContentNotFoundError(f"No content at '{path_str}'")
        return candidate

    def list_contents(self) -> List[str]:
        """List the XML contents below the root as relative paths."""
        results = []
        for file in self.content_root.rglob(f"*{self.CONTENT_SUFFIX}"):
            if file.is_file():
                results.append(file.relative_to(self.content_root).as_posix())
        return sorted(results)

    def read_bytes(self, path: Union[str, Path]) -> bytes:
        file_path = self.resolve(path)
        size = file_path.stat().st_size
        if size > self.max_document_bytes:
            raise ContentError(f"Document '{path}' is {size} bytes, limit is {self.max_document_bytes}")
        return file_path.read_bytes()

    def load_definition(self, location: str) -> ContentDefinition:
        """Load the content definition for a schema location, using the cache."""
        key = normalize_location(location)
        schema_file = self.resolver.path_for(key)

        definition = self.cache.get(key, schema_file)
        if definition is not None:
            return definition

        if not schema_file.is_file():
            raise SchemaResolutionError(location, "schema not found in repository")
        definition = DefinitionLoader(self.resolver).load(key)
        self.cache.put(key, schema_file, definition)
        log_content_operation(logger, "Loaded content definition", schema_location=key)
        return definition

    def definition_from_source(self, schema: Union[bytes, str], location: Optional[str] = None) -> ContentDefinition:
        """Load an uncached definition from schema text; includes resolve against the schema root."""
        self._check_size(schema, "schema")
        return DefinitionLoader(self.resolver).load_source(schema, location or INLINE_SCHEMA_LOCATION)

    def parse_content(
        self,
        data: Union[bytes, str],
        schema: Optional[Union[bytes, str]] = None,
    ) -> XmlContent:
        """
        Parse content text with an explicit schema or the one it names.

        Raises:
            ContentError: If no schema is given and the content names none
        """
        self._check_size(data, "content")
        location = schema_location_of(data)
        if schema is not None:
            definition = self.definition_from_source(schema, location)
        else:
            if not location:
                raise ContentError("Content declares no xsi:noNamespaceSchemaLocation and no schema was given")
            definition = self.load_definition(location)
        return XmlContent.parse(data, definition)

    def load_content(self, path: Union[str, Path]) -> Tuple[XmlContent, ContentDefinition]:
        """Load a content and its definition from the repository."""
        data = self.read_bytes(path)
        content = self.parse_content(data)
        log_content_operation(
            logger, "Loaded content", content_path=str(path),
            schema_location=content.definition.schema_location,
        )
        return content, content.definition

    def _check_size(self, data: Union[bytes, str], what: str) -> None:
        size = len(data.encode('utf-8') if isinstance(data, str) else data)
        if size > self.max_document_bytes:
            raise ContentError(f"The {what} is {size} bytes, limit is {self.max_document_bytes}")
