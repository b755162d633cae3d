"""
Metrics Service: Period-over-period brand statistics and top-N content rankings
for the dashboard. Everything here is pure: rows in, dicts out.

Rows may be ORM objects or plain dicts; fields are read by name either way.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, Optional

from iqol.models import Platform

logger = logging.getLogger(__name__)

# metric column -> key of its change percentage in the stats dict
METRIC_FIELDS = {
    "website_visits": "website_change",
    "linkedin_impressions": "linkedin_imp_change",
    "linkedin_followers": "linkedin_fol_change",
    "instagram_views": "insta_view_change",
    "instagram_followers": "insta_fol_change",
}


def _field(record, name: str, default=None) -> Any:
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def _number(value) -> float:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


def _date_key(value) -> str:
    """Sortable form of a date that may arrive as a date, datetime or ISO string."""
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def change_pct(current, previous) -> int:
    """
    Whole-number percentage change from previous to current.
    A zero/missing previous value yields 0 rather than an infinite change.
    """
    current = _number(current)
    previous = _number(previous)
    if not previous or current == previous:
        return 0
    return round_half_up(((current - previous) / previous) * 100)


def _for_brand(records: Iterable, brand_id) -> list:
    return [r for r in records if _field(r, "brand_id") == brand_id]


def latest_two(records: Iterable, brand_id) -> tuple[Optional[Any], Optional[Any]]:
    """
    (current, previous) entries for a brand: newest date first, ties broken by
    the higher id so duplicate dates resolve the same way every time.
    """
    ordered = sorted(
        _for_brand(records, brand_id),
        key=lambda r: (_date_key(_field(r, "date")), _number(_field(r, "id"))),
        reverse=True,
    )
    current = ordered[0] if ordered else None
    previous = ordered[1] if len(ordered) > 1 else None
    return current, previous


def aggregate(records: Iterable, brand_id) -> dict:
    """Current values and change percentages for every tracked metric of one brand."""
    current, previous = latest_two(records, brand_id)
    stats = {}
    for field, change_key in METRIC_FIELDS.items():
        cur = _number(_field(current, field, 0)) if current is not None else 0
        prev = _number(_field(previous, field, 0)) if previous is not None else 0
        stats[field] = cur
        stats[change_key] = change_pct(cur, prev)
    stats["current_date"] = _field(current, "date") if current is not None else None
    stats["previous_date"] = _field(previous, "date") if previous is not None else None
    return stats


def top_n(records: Iterable, brand_id, sort_key: str, limit: int) -> list:
    """
    A brand's records ranked by ``sort_key`` descending, at most ``limit`` of them.
    Missing values rank last; equal values fall back to the higher id.
    """
    if limit <= 0:
        return []

    def rank(r):
        value = _field(r, sort_key)
        return (value is not None, _number(value), _number(_field(r, "id")))

    return sorted(_for_brand(records, brand_id), key=rank, reverse=True)[:limit]


def ai_health_label(score) -> Optional[str]:
    """Badge for an AI-detection score: lower means more human-sounding."""
    if score is None:
        return None
    if score <= 20:
        return "Healthy"
    if score <= 50:
        return "Moderate"
    return "High AI"


def split_by_platform(posts: Iterable) -> dict:
    return {
        "linkedin": [p for p in posts if _field(p, "platform") == Platform.LINKEDIN.value],
        "instagram": [p for p in posts if _field(p, "platform") == Platform.INSTAGRAM.value],
    }


def build_dashboard(brands: Iterable, metrics: list, blogs: list, posts: list, limit: int = 5) -> list[dict]:
    """
    One entry per brand with its stats, top blogs and top social posts by platform.
    Callers pass rows that have already been scoped to the requesting user.
    """
    out = []
    for brand in brands:
        brand_id = _field(brand, "id")
        top_blogs = top_n(blogs, brand_id, "views", limit)
        top_posts = top_n(posts, brand_id, "impressions_views", limit)
        out.append({
            "brand": brand,
            "stats": aggregate(metrics, brand_id),
            "top_blogs": [
                {"blog": b, "health": ai_health_label(_field(b, "ai_detection_score"))}
                for b in top_blogs
            ],
            "top_social": split_by_platform(top_posts),
        })
    logger.debug(f"Dashboard built for {len(out)} brands")
    return out
