from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.base import WireModel, utcnow


class TonePreset(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ENTHUSIASTIC = "enthusiastic"


class MessageLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class EditType(str, Enum):
    MANUAL = "manual"
    TONE_CHANGE = "tone_change"
    LENGTH_CHANGE = "length_change"


class Annotation(WireModel):
    text: str
    source: str = "generated"  # target_profile | user_profile | generated
    source_field: Optional[str] = None
    highlight: bool = False


class MessageEdit(WireModel):
    timestamp: datetime = Field(default_factory=utcnow)
    old_text: str
    new_text: str
    edit_type: EditType = EditType.MANUAL


class MessageDraft(WireModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    target_profile_id: str
    analysis_id: Optional[str] = None
    subject: str = ""
    body: str = ""
    annotations: List[Annotation] = Field(default_factory=list)
    tone: TonePreset = TonePreset.PROFESSIONAL
    length: MessageLength = MessageLength.MEDIUM
    generated_at: datetime = Field(default_factory=utcnow)
    model_used: str = ""
    tokens_used: int = 0
    generation_time: int = 0  # milliseconds
    manual_edits: List[MessageEdit] = Field(default_factory=list)
    version: int = 1


def count_words(text: str) -> int:
    return len([w for w in text.split() if w])


def apply_manual_edit(draft: MessageDraft, old_text: str, new_text: str) -> MessageDraft:
    """Return a copy of the draft with one text replacement recorded as a manual edit."""
    annotations = [
        a.model_copy(update={"text": new_text}) if a.text == old_text else a
        for a in draft.annotations
    ]
    edit = MessageEdit(old_text=old_text, new_text=new_text, edit_type=EditType.MANUAL)
    return draft.model_copy(
        update={
            "body": draft.body.replace(old_text, new_text),
            "annotations": annotations,
            "manual_edits": [*draft.manual_edits, edit],
        }
    )
