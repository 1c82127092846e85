from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from models.account import UserProfile
from models.analysis import ProfileAnalysis
from models.message_draft import MessageDraft
from models.target_profile import TargetProfile


class AnalysisServicePort(Protocol):
    def analyze_profile(self, target: TargetProfile, user: UserProfile) -> ProfileAnalysis:
        ...

    def generate_message(
        self,
        target: TargetProfile,
        analysis: ProfileAnalysis,
        user: UserProfile,
        options: Optional[Dict[str, Any]] = None,
    ) -> MessageDraft:
        ...
