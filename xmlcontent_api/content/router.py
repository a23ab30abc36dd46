"""
FastAPI router for XML content rendering endpoints.

Exposes rendering of posted contents, rendering of repository contents,
single value lookup by xpath, and schema descriptions.
"""

import logging
from typing import Annotated, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..config import Settings, get_settings
from ..schemas import (
    ContentListResponse, ContentResponse, ContentValueResponse,
    RenderRequest, RenderResponse, SchemaInfoResponse,
)
from .cache import get_definition_cache
from .errors import (
    ContentError, ContentNotFoundError, LocaleNotFoundError,
    RepositoryPathError, SchemaError, SchemaResolutionError, XmlContentError,
)
from .renderer import JsonRenderer, RenderOptions
from .repository import ContentRepository
from .schema_info import SchemaInfo
from .tree import ContentTree, NodeType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_repository(settings: SettingsDep) -> ContentRepository:
    """Get a content repository over the configured roots."""
    try:
        return ContentRepository(
            content_root=settings.resolved_content_root,
            schema_root=settings.resolved_schema_root,
            cache=get_definition_cache(settings.cache.max_size, settings.cache.ttl_seconds),
            max_document_bytes=settings.max_document_bytes,
        )
    except RepositoryPathError as e:
        logger.error(f"Content repository unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )


RepositoryDep = Annotated[ContentRepository, Depends(get_repository)]


def _render_options(
    settings: Settings,
    typed_values: Optional[bool],
    include_missing: Optional[bool],
    strict: Optional[bool],
) -> RenderOptions:
    defaults = settings.render
    return RenderOptions(
        typed_values=defaults.typed_values if typed_values is None else typed_values,
        include_missing=defaults.include_missing if include_missing is None else include_missing,
        strict=defaults.strict if strict is None else strict,
    )


def _raise_http_error(error: XmlContentError) -> NoReturn:
    """Translate a content pipeline error into an HTTP error."""
    if isinstance(error, RepositoryPathError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, SchemaResolutionError):
        # Must precede SchemaError, which it subclasses
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(error, (ContentNotFoundError, LocaleNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (SchemaError, ContentError)):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.info(f"Request failed with {code}: {error}")
    raise HTTPException(status_code=code, detail=str(error)) from error


def _raise_unexpected_error(action: str, error: Exception) -> NoReturn:
    logger.error(f"Unexpected error {action}: {str(error)}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unexpected error {action}: {str(error)}"
    ) from error


@router.post("/render", response_model=RenderResponse)
def render_content(
    request: RenderRequest,
    repository: RepositoryDep,
    settings: SettingsDep,
) -> RenderResponse:
    """
    Render a posted XML content as JSON.

    The schema may be posted along with the content; otherwise the schema
    named by the content's ``xsi:noNamespaceSchemaLocation`` is loaded from
    the repository.
    """
    options = _render_options(settings, request.typed_values, request.include_missing, request.strict)
    try:
        content = repository.parse_content(request.content, request.schema_text)
        locales = [request.locale] if request.locale else None
        data = JsonRenderer(options).render_content(content, locales)
    except XmlContentError as e:
        _raise_http_error(e)
    except Exception as e:
        _raise_unexpected_error("rendering content", e)

    return RenderResponse(
        schema_location=content.schema_location,
        locales=content.locales,
        data=data,
    )


@router.get("/contents", response_model=ContentListResponse)
def list_contents(repository: RepositoryDep) -> ContentListResponse:
    """List the XML contents in the repository."""
    contents = repository.list_contents()
    logger.debug(f"Found {len(contents)} contents")
    return ContentListResponse(contents=contents, total_count=len(contents))


@router.get("/contents/{path:path}/value", response_model=ContentValueResponse)
def get_content_value(
    path: str,
    repository: RepositoryDep,
    settings: SettingsDep,
    locale: Annotated[str, Query(min_length=1)],
    xpath: Annotated[str, Query(min_length=1)],
) -> ContentValueResponse:
    """Read one simple value of a content by its xpath."""
    try:
        content, _ = repository.load_content(path)
        tree = ContentTree.build(content, locale, strict=settings.render.strict)
        node = tree.find(xpath)
    except XmlContentError as e:
        _raise_http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        _raise_unexpected_error("reading content value", e)

    if node is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No value at '{xpath}' in locale '{locale}'",
        )
    if node.type is not NodeType.SIMPLE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"'{xpath}' is a {node.type.value} node, not a simple value",
        )
    return ContentValueResponse(path=path, locale=locale, xpath=xpath, value=node.value)


@router.get("/contents/{path:path}", response_model=ContentResponse)
def get_content(
    path: str,
    repository: RepositoryDep,
    settings: SettingsDep,
    locale: Optional[str] = None,
    typed_values: Optional[bool] = None,
    include_missing: Optional[bool] = None,
    strict: Optional[bool] = None,
) -> ContentResponse:
    """Render a repository content as JSON."""
    options = _render_options(settings, typed_values, include_missing, strict)
    try:
        content, definition = repository.load_content(path)
        data = JsonRenderer(options).render_content(content, [locale] if locale else None)
    except XmlContentError as e:
        _raise_http_error(e)
    except Exception as e:
        _raise_unexpected_error("rendering content", e)

    return ContentResponse(
        path=path,
        schema_location=definition.schema_location,
        locales=content.locales,
        data=data,
    )


@router.get("/schemas/{location:path}", response_model=SchemaInfoResponse)
def get_schema_info(location: str, repository: RepositoryDep) -> SchemaInfoResponse:
    """Describe the content definition stored at a schema location."""
    try:
        definition = repository.load_definition(location)
        info = SchemaInfo(definition).describe()
    except SchemaResolutionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except XmlContentError as e:
        _raise_http_error(e)
    except Exception as e:
        _raise_unexpected_error("describing schema", e)

    return SchemaInfoResponse(location=definition.schema_location, info=info)
