from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class ExtractionQuality(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class QualityReport:
    quality: ExtractionQuality
    missing_fields: List[str] = field(default_factory=list)


# Checked in this order; the order is also the order of missing_fields.
CRITICAL_FIELDS = [
    ("name", "name"),
    ("linkedinUrl", "linkedin_url"),
    ("currentJobTitle", "current_job_title"),
    ("currentCompany", "current_company"),
]
STRUCTURAL_FIELDS = [
    ("workExperience", "work_experience"),
    ("education", "education"),
    ("recentPosts", "recent_posts"),
]


def _absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def classify(profile: Any) -> QualityReport:
    """Derive the quality tier and missing-field report for a profile.

    1. every absent critical or structural field is reported missing
    2. nothing missing -> complete
    3. job title or company missing -> minimal
    4. otherwise -> partial
    """
    missing: List[str] = []
    for label, attr in CRITICAL_FIELDS + STRUCTURAL_FIELDS:
        if _absent(getattr(profile, attr, None)):
            missing.append(label)

    if not missing:
        quality = ExtractionQuality.COMPLETE
    elif "currentJobTitle" in missing or "currentCompany" in missing:
        quality = ExtractionQuality.MINIMAL
    else:
        quality = ExtractionQuality.PARTIAL
    return QualityReport(quality=quality, missing_fields=missing)
