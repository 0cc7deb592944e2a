from __future__ import annotations

"""Pydantic response models for the API layer."""

from typing import Literal

from pydantic import BaseModel, RootModel


class ErrorResponse(BaseModel):
    error: str


class PropertyOut(BaseModel):
    name: str
    visibility: Literal["public", "protected", "private"]


class MethodOut(BaseModel):
    name: str
    visibility: Literal["public", "protected", "private"]
    parameters: int
    return_type: str


class ClassSummaryOut(BaseModel):
    type: Literal["class_summary"] = "class_summary"
    name: str
    interfaces: list[str]
    properties: list[PropertyOut]
    methods: list[MethodOut]


class OutlineResponse(RootModel[dict[str, ClassSummaryOut | ErrorResponse | None]]):
    """Absolute file path -> class outline, ``null`` or a per-file error."""


class HealthResponse(BaseModel):
    status: str
