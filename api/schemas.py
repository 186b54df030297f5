from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class DashboardOptionsModel(BaseModel):
    today: Optional[date] = None
    recent_limit: int = Field(default=5, ge=1, le=50)
    instructor_limit: int = Field(default=6, ge=1, le=50)


class CountsResponse(BaseModel):
    instructors: int
    rooms: int
    participants: int
    courses: int
    enrollments: int
