from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import Field

from models.base import WireModel, utcnow


class Relevance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TalkingPoint(WireModel):
    topic: str
    relevance: Relevance = Relevance.MEDIUM
    context: str = ""
    source_field: str = ""


class ProfileAnalysis(WireModel):
    """Analysis produced by the downstream service; stored, never interpreted."""

    target_profile_id: str
    user_profile_id: str
    talking_points: List[TalkingPoint] = Field(default_factory=list)
    mutual_interests: List[str] = Field(default_factory=list)
    connection_opportunities: List[str] = Field(default_factory=list)
    suggested_approach: str = ""
    caution_flags: List[str] = Field(default_factory=list)
    analyzed_at: datetime = Field(default_factory=utcnow)
    model_used: str = ""
    tokens_used: int = 0

    @property
    def cache_key(self) -> str:
        return analysis_key(self.target_profile_id, self.user_profile_id)


def analysis_key(target_profile_id: str, user_profile_id: str) -> str:
    return f"{target_profile_id}_{user_profile_id}"
