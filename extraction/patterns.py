# Selector fallback lists, newest layout first. These track the host site's
# markup and need maintenance whenever its UI ships a new layout.

from __future__ import annotations

from typing import Dict, List


FIELD_PATTERNS: Dict[str, List[str]] = {
    "name": [
        "h1.text-heading-xlarge",
        'h1[class*="text-heading"]',
        ".pv-text-details__left-panel h1",
        'div[class*="pv-top-card"] h1',
        "main section:first-of-type h1",
        "[data-generated-suggestion-target] h1",
        "main h1:first-of-type",
        "h1",
    ],
    "headline": [
        ".text-body-medium.break-words",
        'div[class*="text-body-medium"]',
        ".pv-text-details__left-panel .text-body-medium",
        'div[class*="pv-top-card"] .text-body-medium',
        "main section:first-of-type .text-body-medium",
        "[data-generated-suggestion-target] + div",
        "main h1 + div",
    ],
    "company": [
        'button[aria-label^="Current company"] span',
        ".pv-text-details__right-panel-item-text",
        "ul.pv-top-card--experience-list li:first-child span",
        '[data-field="experience_company_logo"] span[aria-hidden="true"]',
    ],
    "mutual_connections": [
        ".member-insights__mutual-connections-count",
        "[data-test-mutual-connections-count]",
        'a[href*="facetNetwork"] span.t-normal',
        'span:-soup-contains("mutual connection")',
    ],
}


# {section} is replaced with the section anchor id.
SECTION_PATTERNS: List[str] = [
    "section:has(> div#{section})",
    "section:has(#{section})",
    "section#{section}",
    'section[data-section="{section}"]',
    "div#{section}-section",
    "section.{section}-section",
]

SECTION_IDS: Dict[str, List[str]] = {
    "about": ["about"],
    "experience": ["experience"],
    "education": ["education"],
    "skills": ["skills"],
    "activity": ["content_collections", "activity"],
}

ITEM_PATTERNS: List[str] = [
    "li.artdeco-list__item",
    "li.pvs-list__paged-list-item",
    "li.pvs-list__item--line-separated",
    "ul > li",
    "li",
]

POST_ITEM_PATTERNS: List[str] = [
    "div.feed-shared-update-v2",
    "li.profile-creator-shared-feed-update__container",
    "article",
    "li",
]

POST_PATTERNS: Dict[str, List[str]] = {
    "content": [
        ".feed-shared-update-v2__description",
        ".update-components-text",
        ".feed-shared-text",
        "span.break-words",
        "p",
    ],
    "likes": [
        ".social-details-social-counts__reactions-count",
        ".social-details-social-counts__social-proof-fallback-number",
        'button[aria-label*="reaction"]',
    ],
    "comments": [
        ".social-details-social-counts__comments",
        'button[aria-label*="comment"]',
    ],
    "posted_ago": [
        '.update-components-actor__sub-description span[aria-hidden="true"]',
        ".feed-shared-actor__sub-description",
        "time",
    ],
}

TEXT_NODE_PATTERN = (
    'span[aria-hidden="true"], span:not([aria-hidden]), div[dir="ltr"], '
    "p, h1, h2, h3, h4, h5, h6"
)
ITEM_LINE_PATTERN = 'span[aria-hidden="true"]'


def section_patterns(section: str) -> List[str]:
    patterns: List[str] = []
    for anchor in SECTION_IDS.get(section, [section]):
        patterns.extend(p.format(section=anchor) for p in SECTION_PATTERNS)
    return patterns
