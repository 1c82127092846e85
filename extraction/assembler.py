from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

from errors import InvalidPageError, MissingMandatoryFieldError
from extraction import fields
from extraction.page import PageDocument, canonical_profile_url, is_profile_url, profile_id_for_url
from models.target_profile import Education, LinkedInPost, TargetProfile, WorkExperience

logger = logging.getLogger(__name__)


ENTRY_SEPARATOR = "\n\n---\n\n"


def _format_experience(exp: WorkExperience) -> str:
    head = " | ".join(p for p in (exp.title, exp.company, exp.date_range, exp.duration) if p)
    return f"{head}\n{exp.description}" if exp.description else head


def _format_education(edu: Education) -> str:
    parts = [edu.institution]
    degree = ", ".join(p for p in (edu.degree, edu.field) if p)
    if degree:
        parts.append(degree)
    if edu.graduation_year:
        parts.append(str(edu.graduation_year))
    return " | ".join(parts)


def _format_post(post: LinkedInPost) -> str:
    meta = f"{post.engagement.likes} likes, {post.engagement.comments} comments"
    if post.posted_ago:
        meta = f"{post.posted_ago} · {meta}"
    return f"{post.content}\n({meta})"


def format_profile_text(
    *,
    name: str,
    linkedin_url: str,
    headline: Optional[str] = None,
    current_company: Optional[str] = None,
    about: Optional[str] = None,
    work_experience: Optional[List[WorkExperience]] = None,
    education: Optional[List[Education]] = None,
    skills: Optional[List[str]] = None,
    recent_posts: Optional[List[LinkedInPost]] = None,
) -> str:
    """Flatten the extracted fields into the labeled block fed to the analysis service.

    Sections whose extractor came back empty are left out entirely.
    """
    lines = ["=== LINKEDIN PROFILE DATA ===", "", f"Name: {name}"]
    if headline:
        lines.append(f"Current Role/Headline: {headline}")
    if current_company:
        lines.append(f"Current Company: {current_company}")
    lines.append(f"LinkedIn URL: {linkedin_url}")

    blocks = [
        ("ABOUT", about),
        ("WORK EXPERIENCE", ENTRY_SEPARATOR.join(_format_experience(e) for e in work_experience or [])),
        ("EDUCATION", ENTRY_SEPARATOR.join(_format_education(e) for e in education or [])),
        ("SKILLS", ", ".join(skills or [])),
        ("RECENT ACTIVITY & POSTS", ENTRY_SEPARATOR.join(_format_post(p) for p in recent_posts or [])),
    ]
    for label, body in blocks:
        if body and body.strip():
            lines.extend(["", f"--- {label} ---", body])

    lines.extend(["", "=== END OF PROFILE ==="])
    return "\n".join(lines)


class ProfileAssembler:
    """Runs every field extractor against one page snapshot.

    Only two conditions abort: the page is not a profile page, or the
    name could not be found. Everything else degrades into the quality
    tier and missing-field list.
    """

    def __init__(self, markers: Optional[List[str]] = None):
        self.markers = markers

    def assemble(self, document: PageDocument) -> TargetProfile:
        if not is_profile_url(document.url, self.markers):
            raise InvalidPageError(document.url)

        scope = document.soup
        url = canonical_profile_url(document.url)
        headline = fields.extract_headline(scope)
        job_title, company = fields.split_headline(headline)
        if not company:
            company = fields.extract_company(scope)

        values = dict(
            id=profile_id_for_url(url),
            linkedin_url=url,
            name=fields.extract_name(scope) or "",
            headline=headline,
            current_job_title=job_title,
            current_company=company,
            about=fields.extract_about(scope),
            work_experience=fields.extract_work_experience(scope),
            education=fields.extract_education(scope),
            skills=fields.extract_skills(scope),
            recent_posts=fields.extract_recent_posts(scope),
            mutual_connections=fields.extract_mutual_connections(scope),
        )
        draft = TargetProfile(**values)
        if not draft.name:
            raise MissingMandatoryFieldError(
                "name", draft.missing_fields, draft.extraction_quality.value
            )

        profile = draft.model_copy(
            update={
                "raw_profile_text": format_profile_text(
                    name=draft.name,
                    linkedin_url=draft.linkedin_url,
                    headline=draft.headline,
                    current_company=draft.current_company,
                    about=draft.about,
                    work_experience=draft.work_experience,
                    education=draft.education,
                    skills=draft.skills,
                    recent_posts=draft.recent_posts,
                )
            }
        )
        logger.info(
            "Assembled profile %s quality=%s missing=%s",
            profile.id,
            profile.extraction_quality.value,
            ",".join(profile.missing_fields) or "-",
            extra={"step": "assemble", "status": profile.extraction_quality.value},
        )
        return profile


def check_extraction_capability(document: PageDocument) -> Dict[str, Union[bool, int]]:
    """Cheap probe of how much of the page is extractable right now (0-100)."""
    scope = document.soup
    result: Dict[str, Union[bool, int]] = {
        "isProfilePage": is_profile_url(document.url),
        "hasName": bool(fields.extract_name(scope)),
        "hasJobInfo": bool(fields.extract_headline(scope)),
        "hasExperience": fields.find_section(scope, "experience") is not None,
    }
    result["overallScore"] = 25 * sum(1 for v in result.values() if v)
    return result
