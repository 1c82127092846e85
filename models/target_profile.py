from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from extraction.quality import ExtractionQuality, classify
from models.base import WireModel, utcnow
from utils.text_cleanup import dedupe, truncate


MAX_SKILLS = 20
MAX_POSTS = 5
MAX_POST_CHARS = 500


def sanitize_post_content(content: str) -> str:
    """Truncate post text to 500 chars (497 + '...')."""
    return truncate(content, MAX_POST_CHARS)


class WorkExperience(WireModel):
    title: str
    company: Optional[str] = None
    date_range: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None


class Education(WireModel):
    institution: str
    degree: Optional[str] = None
    field: Optional[str] = None
    graduation_year: Optional[int] = None


class PostEngagement(WireModel):
    likes: int = 0
    comments: int = 0


class LinkedInPost(WireModel):
    content: str
    posted_ago: Optional[str] = None
    engagement: PostEngagement = Field(default_factory=PostEngagement)

    @field_validator("content")
    @classmethod
    def _truncate_content(cls, value: str) -> str:
        return sanitize_post_content(value)


class TargetProfile(WireModel):
    """One page's extracted snapshot.

    Immutable once built; quality and missing fields are always derived
    from the current field values and cannot be assigned.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    id: str
    linkedin_url: str
    name: str
    headline: Optional[str] = None
    current_job_title: Optional[str] = None
    current_company: Optional[str] = None
    about: Optional[str] = None
    work_experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    recent_posts: List[LinkedInPost] = Field(default_factory=list)
    mutual_connections: int = 0
    raw_profile_text: str = ""
    extracted_at: datetime = Field(default_factory=utcnow)

    @field_validator("skills")
    @classmethod
    def _cap_skills(cls, value: List[str]) -> List[str]:
        return dedupe(value)[:MAX_SKILLS]

    @field_validator("recent_posts")
    @classmethod
    def _cap_posts(cls, value: List[LinkedInPost]) -> List[LinkedInPost]:
        return value[:MAX_POSTS]

    @computed_field(alias="extractionQuality")  # type: ignore[prop-decorator]
    @property
    def extraction_quality(self) -> ExtractionQuality:
        return classify(self).quality

    @computed_field(alias="missingFields")  # type: ignore[prop-decorator]
    @property
    def missing_fields(self) -> List[str]:
        return classify(self).missing_fields
