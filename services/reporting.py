from __future__ import annotations

from typing import Any, Dict, Optional

from models.target_profile import TargetProfile


def print_extraction_summary(profile: TargetProfile, meta: Optional[Dict[str, Any]] = None, cached: bool = False) -> None:
    """Print a human-readable summary of one extraction."""
    meta = meta or {}
    print("\n" + "=" * 60)
    print("PROFILE EXTRACTION - SUMMARY")
    print("=" * 60)
    print(f"Name: {profile.name}")
    print(f"Headline: {profile.headline or 'N/A'}")
    print(f"Job Title: {profile.current_job_title or 'N/A'}")
    print(f"Company: {profile.current_company or 'N/A'}")
    print(f"Profile URL: {profile.linkedin_url}")
    print(f"Profile ID: {profile.id}")
    print()
    print("Sections:")
    print(f"  Experience entries: {len(profile.work_experience)}")
    print(f"  Education entries: {len(profile.education)}")
    print(f"  Skills: {len(profile.skills)}")
    print(f"  Recent posts: {len(profile.recent_posts)}")
    print(f"  Mutual connections: {profile.mutual_connections}")
    print()
    print(f"Quality: {profile.extraction_quality.value}")
    print(f"Missing Fields: {', '.join(profile.missing_fields) or 'none'}")
    if cached:
        print("Source: cache")
    elif meta.get("attempts"):
        print(f"Attempts: {meta['attempts']}")
    print("=" * 60)


def print_storage_usage(usage: Dict[str, Dict[str, Any]]) -> None:
    print("Storage usage:")
    for domain, stats in usage.items():
        print(
            f"  {domain}: {stats.get('used', 0)} / {stats.get('capacity', 0)} bytes "
            f"({stats.get('percentage', 0)}%)"
        )
