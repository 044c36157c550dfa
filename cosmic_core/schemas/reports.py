"""Schemas for cached reports."""

from datetime import datetime
from enum import StrEnum
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field

T = TypeVar("T")

ScalarValue = Union[bool, int, float, str]


class ReportType(StrEnum):
    """Report kinds produced by the app's generators."""

    KUNDALI = "kundali"
    PANCHANG = "panchang"
    HOROSCOPE = "horoscope"
    MATCHMAKING = "matchmaking"
    MUHURAT = "muhurat"
    NUMEROLOGY = "numerology"
    TAROT = "tarot"
    PALM = "palm"
    FACE = "face"


class ReportMeta(BaseModel):
    """Listing entry for a saved report."""

    id: str = Field(..., description="Fingerprint or time-based id")
    type: str = Field(..., description="Report type")
    title: str = Field(..., description="Display title")
    created_at: datetime = Field(..., description="When the report was saved")
    form_input: Optional[dict[str, Optional[ScalarValue]]] = Field(
        default=None, description="Form values the report was generated from"
    )


class ReportRecord(BaseModel, Generic[T]):
    """A saved report: its metadata and the generated payload."""

    meta: ReportMeta
    payload: T
