from extraction.quality import ExtractionQuality
from .target_profile import TargetProfile, WorkExperience, Education, LinkedInPost, PostEngagement
from .analysis import ProfileAnalysis, TalkingPoint, Relevance, analysis_key
from .message_draft import MessageDraft, Annotation, MessageEdit, TonePreset, MessageLength
from .outreach_history import OutreachHistory
from .account import UserProfile, ExtensionSettings, SubscriptionPlan, PlanTier, PlanStatus

__all__ = [
    "ExtractionQuality",
    "TargetProfile",
    "WorkExperience",
    "Education",
    "LinkedInPost",
    "PostEngagement",
    "ProfileAnalysis",
    "TalkingPoint",
    "Relevance",
    "analysis_key",
    "MessageDraft",
    "Annotation",
    "MessageEdit",
    "TonePreset",
    "MessageLength",
    "OutreachHistory",
    "UserProfile",
    "ExtensionSettings",
    "SubscriptionPlan",
    "PlanTier",
    "PlanStatus",
]
