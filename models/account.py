from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import WireModel, utcnow
from models.message_draft import MessageLength, TonePreset


class PlanTier(str, Enum):
    FREE = "free"
    PAID = "paid"


class PlanStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    TRIAL = "trial"
    CANCELLED = "cancelled"


class UserProfile(WireModel):
    """The acting user's own profile, used as context for analyses."""

    id: str
    name: str = ""
    job_title: str = ""
    company: str = ""
    background: str = ""
    value_proposition: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ExtensionSettings(WireModel):
    default_tone: TonePreset = TonePreset.PROFESSIONAL
    default_length: MessageLength = MessageLength.MEDIUM
    theme: str = "auto"
    auto_extract: bool = True
    show_quality_badge: bool = True


class SubscriptionPlan(WireModel):
    user_id: str
    plan: PlanTier = PlanTier.FREE
    status: PlanStatus = PlanStatus.ACTIVE
    purchased_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    license_key: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.plan == PlanTier.PAID and self.status in (PlanStatus.ACTIVE, PlanStatus.TRIAL)
