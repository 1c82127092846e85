"""
Field extractors: one per logical profile field.

Each extractor resolves its fallback selector list, cleans the text and parses
it into the field's shape. Nothing here raises on missing markup; absence is
returned as None / an empty list and left for the quality classifier.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from bs4 import Tag

from extraction.patterns import (
    FIELD_PATTERNS,
    ITEM_LINE_PATTERN,
    ITEM_PATTERNS,
    POST_ITEM_PATTERNS,
    POST_PATTERNS,
    TEXT_NODE_PATTERN,
    section_patterns,
)
from extraction.selectors import resolve, resolve_all
from models.target_profile import (
    MAX_POSTS,
    MAX_SKILLS,
    Education,
    LinkedInPost,
    PostEngagement,
    WorkExperience,
)
from utils.number_parsing import last_year, parse_count, parse_count_or_zero
from utils.text_cleanup import clean_text, collapse_whitespace, dedupe

logger = logging.getLogger(__name__)


HEADLINE_SEPARATORS = (" at ", " @ ")
SECTION_HEADINGS = {"about", "experience", "education", "skills", "activity", "posts"}

_DATE_LINE = re.compile(r"\b(19|20)\d{2}\b|\bpresent\b", re.IGNORECASE)
_POSTED_AGO = re.compile(r"\b(\d+\s*(?:mo|yr|[smhdwy]))\b", re.IGNORECASE)


def node_text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return collapse_whitespace(node.get_text(" ", strip=True))


# --- Top card -----------------------------------------------------------------

def _plausible_name(node: Tag) -> bool:
    text = node_text(node)
    low = text.lower()
    return 1 < len(text) < 100 and "linkedin" not in low and "profile" not in low


def _plausible_headline(node: Tag) -> bool:
    return 5 < len(node_text(node)) < 200


def extract_name(scope: Tag) -> Optional[str]:
    node = resolve(FIELD_PATTERNS["name"], scope, accept=_plausible_name)
    if node is None:
        logger.debug("Name not found with any selector")
        return None
    return node_text(node)


def extract_headline(scope: Tag) -> Optional[str]:
    node = resolve(FIELD_PATTERNS["headline"], scope, accept=_plausible_headline)
    return clean_text(node_text(node)) if node is not None else None


def split_headline(headline: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'Staff Engineer at Acme | Speaker' -> ('Staff Engineer', 'Acme')."""
    if not headline:
        return None, None
    for sep in HEADLINE_SEPARATORS:
        if sep in headline:
            title, _, company = headline.rpartition(sep)
            company = company.split(" | ")[0]
            return (title.strip(" |,-") or None), (company.strip(" |,-") or None)
    return headline.strip() or None, None


def extract_job_title(scope: Tag) -> Optional[str]:
    return split_headline(extract_headline(scope))[0]


def extract_company(scope: Tag) -> Optional[str]:
    _, company = split_headline(extract_headline(scope))
    if company:
        return company
    node = resolve(FIELD_PATTERNS["company"], scope, accept=lambda n: bool(clean_text(node_text(n))))
    return clean_text(node_text(node)) if node is not None else None


def extract_mutual_connections(scope: Tag) -> int:
    node = resolve(
        FIELD_PATTERNS["mutual_connections"],
        scope,
        accept=lambda n: parse_count(node_text(n)) is not None,
    )
    return parse_count_or_zero(node_text(node)) if node is not None else 0


# --- Sections -----------------------------------------------------------------

def _innermost(nodes: List[Tag]) -> Optional[Tag]:
    ids = {id(n) for n in nodes}
    for node in nodes:
        contains_other = any(
            id(d) in ids for d in node.find_all(True) if d is not node
        )
        if not contains_other:
            return node
    return nodes[0] if nodes else None


def find_section(scope: Tag, section: str) -> Optional[Tag]:
    return _innermost(resolve_all(section_patterns(section), scope))


def _top_level(nodes: List[Tag], boundary: Tag) -> List[Tag]:
    ids = {id(n) for n in nodes}
    top: List[Tag] = []
    for node in nodes:
        nested = False
        for parent in node.parents:
            if parent is boundary:
                break
            if id(parent) in ids:
                nested = True
                break
        if not nested:
            top.append(node)
    return top


def section_items(section: Tag, patterns: List[str] = ITEM_PATTERNS) -> List[Tag]:
    return _top_level(resolve_all(patterns, section), section)


def item_lines(item: Tag) -> List[str]:
    """Distinct, cleaned text lines of one list item."""
    spans = item.select(ITEM_LINE_PATTERN)
    raw = [node_text(s) for s in spans] if spans else list(item.stripped_strings)
    lines = [clean_text(t) for t in raw]
    return dedupe([t for t in lines if t and t.lower() not in SECTION_HEADINGS])


def _is_date_line(line: str) -> bool:
    return bool(_DATE_LINE.search(line))


def _parse_experience(lines: List[str]) -> Optional[WorkExperience]:
    if not lines:
        return None
    company: Optional[str] = None
    date_range: Optional[str] = None
    duration: Optional[str] = None
    rest: List[str] = []
    for line in lines[1:]:
        if date_range is None and _is_date_line(line):
            date_part, _, duration_part = line.partition(" · ")
            date_range = date_part.strip() or None
            duration = duration_part.strip() or None
        elif company is None and date_range is None:
            company = line.split(" · ")[0].strip() or None
        else:
            rest.append(line)
    return WorkExperience(
        title=lines[0],
        company=company,
        date_range=date_range,
        duration=duration,
        description=" ".join(rest) or None,
    )


def _parse_education(lines: List[str]) -> Optional[Education]:
    if not lines:
        return None
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    year: Optional[int] = None
    for line in lines[1:]:
        if year is None and _is_date_line(line):
            year = last_year(line)
        elif degree is None:
            degree_part, _, field_part = line.partition(", ")
            degree = degree_part.strip() or None
            field_of_study = field_part.strip() or None
    return Education(
        institution=lines[0], degree=degree, field=field_of_study, graduation_year=year
    )


def extract_work_experience(scope: Tag) -> List[WorkExperience]:
    section = find_section(scope, "experience")
    if section is None:
        return []
    entries: List[WorkExperience] = []
    seen = set()
    for item in section_items(section):
        lines = item_lines(item)
        key = tuple(lines)
        if not lines or key in seen:
            continue
        seen.add(key)
        exp = _parse_experience(lines)
        if exp is not None:
            entries.append(exp)
    return entries


def extract_education(scope: Tag) -> List[Education]:
    section = find_section(scope, "education")
    if section is None:
        return []
    entries: List[Education] = []
    seen = set()
    for item in section_items(section):
        lines = item_lines(item)
        key = tuple(lines)
        if not lines or key in seen:
            continue
        seen.add(key)
        edu = _parse_education(lines)
        if edu is not None:
            entries.append(edu)
    return entries


def extract_skills(scope: Tag) -> List[str]:
    section = find_section(scope, "skills")
    if section is None:
        return []
    items = section_items(section)
    if items:
        names = [lines[0] for lines in (item_lines(i) for i in items) if lines]
    else:
        names = item_lines(section)
    names = [n for n in names if "endorse" not in n.lower()]
    return dedupe(names)[:MAX_SKILLS]


def extract_about(scope: Tag) -> Optional[str]:
    section = find_section(scope, "about")
    if section is None:
        return None
    texts: List[str] = []
    for node in section.select(TEXT_NODE_PATTERN):
        text = clean_text(node_text(node))
        if not text or len(text) <= 1 or text.lower() in SECTION_HEADINGS:
            continue
        if any(text in existing for existing in texts):
            continue
        texts.append(text)
    return "\n".join(texts) or None


def _count_from(patterns: List[str], item: Tag) -> int:
    node = resolve(patterns, item)
    if node is None:
        return 0
    parsed = parse_count(node_text(node))
    if parsed is None:
        parsed = parse_count(node.get("aria-label"))
    return parsed or 0


def extract_recent_posts(scope: Tag) -> List[LinkedInPost]:
    section = find_section(scope, "activity")
    if section is None:
        return []
    posts: List[LinkedInPost] = []
    seen = set()
    for item in section_items(section, POST_ITEM_PATTERNS):
        if len(posts) >= MAX_POSTS:
            break
        content = clean_text(node_text(resolve(POST_PATTERNS["content"], item)) or node_text(item))
        if not content or content in seen:
            continue
        seen.add(content)
        ago_match = _POSTED_AGO.search(node_text(resolve(POST_PATTERNS["posted_ago"], item)))
        posts.append(
            LinkedInPost(
                content=content,
                posted_ago=ago_match.group(1) if ago_match else None,
                engagement=PostEngagement(
                    likes=_count_from(POST_PATTERNS["likes"], item),
                    comments=_count_from(POST_PATTERNS["comments"], item),
                ),
            )
        )
    return posts
