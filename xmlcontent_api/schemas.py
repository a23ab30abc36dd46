from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    timestamp: datetime


class RenderRequest(BaseModel):
    content: str = Field(..., min_length=1, description="XML content document")
    schema_text: str | None = Field(
        None,
        alias="schema",
        description="XSD content definition; defaults to the schema the content names",
    )
    locale: str | None = Field(None, description="Render only this locale")
    typed_values: bool | None = None
    include_missing: bool | None = None
    strict: bool | None = None

    model_config = {"populate_by_name": True}


class RenderResponse(BaseModel):
    schema_location: str | None = None
    locales: list[str]
    data: dict[str, Any]


class ContentListResponse(BaseModel):
    contents: list[str]
    total_count: int


class ContentResponse(BaseModel):
    path: str
    schema_location: str | None = None
    locales: list[str]
    data: dict[str, Any]


class ContentValueResponse(BaseModel):
    path: str
    locale: str
    xpath: str
    value: str | None = None


class SchemaInfoResponse(BaseModel):
    location: str
    info: dict[str, Any]
