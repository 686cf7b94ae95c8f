"""Special tool and torque value reference records."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import IndexRecord


class Tool(IndexRecord):
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    used_in: List[str] = Field(default_factory=list)

    @field_validator("used_in", mode="before")
    @classmethod
    def _none_as_unused(cls, value):
        return [] if value is None else value


class TorqueValue(IndexRecord):
    component: Optional[str] = None
    value: Optional[Any] = None
    unit: Optional[str] = None
    source_page: Optional[str] = None
