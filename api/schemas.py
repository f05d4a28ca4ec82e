from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    gender: Optional[str] = None
    age_range: Optional[Tuple[float, float]] = None
    height_range: Optional[Tuple[float, float]] = None
    weight_range: Optional[Tuple[float, float]] = None
    # End may be null for an open window; the window is ignored without a start.
    date_range: Optional[Tuple[Optional[str], Optional[str]]] = None


class QuartilesRequest(BaseModel):
    values: List[float] = Field(default_factory=list)
