from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional


PROFILE_URL = "https://www.linkedin.com/in/jane-doe-123/?trk=public_profile#about"
CANONICAL_URL = "https://www.linkedin.com/in/jane-doe-123"


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def _top_card(name: Optional[str], headline: Optional[str], mutual: Optional[str]) -> str:
    parts = ['<section class="pv-top-card">']
    if name is not None:
        parts.append(f'<h1 class="text-heading-xlarge">{name}</h1>')
    if headline is not None:
        parts.append(f'<div class="text-body-medium break-words">{headline}</div>')
    if mutual is not None:
        parts.append(f'<span class="member-insights__mutual-connections-count">{mutual}</span>')
    parts.append("</section>")
    return "".join(parts)


def _list_section(anchor: str, items: List[List[str]]) -> str:
    lis = []
    for lines in items:
        spans = "".join(f'<span aria-hidden="true">{line}</span>' for line in lines)
        lis.append(f'<li class="artdeco-list__item">{spans}</li>')
    return (
        f'<section><div id="{anchor}"></div>'
        f'<div><span aria-hidden="true">{anchor.title()}</span></div>'
        f'<ul>{"".join(lis)}</ul></section>'
    )


def _about_section(about: str) -> str:
    return (
        '<section><div id="about"></div>'
        '<div><span aria-hidden="true">About</span></div>'
        f'<div class="inline-show-more-text"><span aria-hidden="true">{about}</span>'
        f'<span class="visually-hidden">{about}</span></div>'
        "</section>"
    )


def _post(content: str, likes: str, comments: str, ago: str) -> str:
    return (
        '<div class="feed-shared-update-v2">'
        f'<div class="update-components-actor__sub-description"><span aria-hidden="true">{ago} • Edited</span></div>'
        f'<div class="feed-shared-update-v2__description"><span>{content}</span></div>'
        f'<span class="social-details-social-counts__reactions-count">{likes}</span>'
        f'<button aria-label="{comments} comments">{comments} comments</button>'
        "</div>"
    )


DEFAULT_EXPERIENCE = [
    ["Staff Engineer", "Acme Corp · Full-time", "Jan 2020 - Present · 4 yrs 2 mos", "Berlin, Germany"],
    ["Software Engineer", "Globex", "2016 - 2019 · 3 yrs"],
]
DEFAULT_EDUCATION = [
    ["Technical University of Munich", "Master of Science, Computer Science", "2012 - 2014"],
]
DEFAULT_SKILLS = [["Python", "12 endorsements"], ["Distributed Systems"], ["Python"]]
DEFAULT_POSTS = [
    ("Excited to share our new release!", "1,204", "37", "2w"),
    ("Hiring senior engineers in Berlin.", "88", "5", "1mo"),
]


def profile_html(
    *,
    name: Optional[str] = "Jane Doe",
    headline: Optional[str] = "Staff Engineer at Acme Corp",
    mutual: Optional[str] = "12 mutual connections",
    about: Optional[str] = "I build distributed systems.",
    experience: Optional[List[List[str]]] = None,
    education: Optional[List[List[str]]] = None,
    skills: Optional[List[List[str]]] = None,
    posts: Optional[list] = None,
    include_experience: bool = True,
    include_education: bool = True,
    include_skills: bool = True,
    include_posts: bool = True,
) -> str:
    """Synthetic profile page in the current layout; each section can be left out."""
    body = [_top_card(name, headline, mutual)]
    if about is not None:
        body.append(_about_section(about))
    if include_experience:
        body.append(_list_section("experience", experience or DEFAULT_EXPERIENCE))
    if include_education:
        body.append(_list_section("education", education or DEFAULT_EDUCATION))
    if include_skills:
        body.append(_list_section("skills", skills or DEFAULT_SKILLS))
    if include_posts:
        items = "".join(_post(*p) for p in (posts or DEFAULT_POSTS))
        body.append(f'<section><div id="content_collections"></div>{items}</section>')
    return f"<html><body><main>{''.join(body)}</main></body></html>"
