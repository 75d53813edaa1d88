"""Pydantic request/response models for API endpoints."""

from typing import Any

from pydantic import BaseModel

from lumia.models import Selection


class ImportBody(BaseModel):
    data: Any
    source_name: str
    overwrite: bool = False


class FetchBody(BaseModel):
    url: str
    overwrite: bool = False


class DominantBody(BaseModel):
    selection: Selection | None = None


class ExpandBody(BaseModel):
    text: str


class PackSummary(BaseModel):
    name: str
    source_url: str
    is_custom: bool
    lumia_count: int
    loom_count: int
