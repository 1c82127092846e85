from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import WireModel, utcnow


class OutreachHistory(WireModel):
    """Record of a previous contact, used to warn about duplicate outreach."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    target_profile_id: str
    target_name: str
    target_linkedin_url: str
    contacted_at: datetime = Field(default_factory=utcnow)
    # Null on the paid tier (kept indefinitely)
    expires_at: Optional[datetime] = None
