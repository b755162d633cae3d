"""
Per-brand dashboard: stats, top blogs and top social posts.
"""

from datetime import date

import pytest
from sqlalchemy import text

from conftest import auth_headers, make_user
from iqol.models import Blog, DailyMetric, SocialPost


@pytest.mark.anyio
async def test_dashboard_stats_and_rankings(client, seed, brands):
    truestate, canvas, acn = brands
    admin = await seed(make_user("Meera", role="admin"))
    await seed(
        DailyMetric(brand_id=truestate.id, date=date(2024, 6, 1), website_visits=100, instagram_followers=40),
        DailyMetric(brand_id=truestate.id, date=date(2024, 6, 2), website_visits=150, instagram_followers=50),
        DailyMetric(brand_id=canvas.id, date=date(2024, 6, 2), website_visits=80),
        *[Blog(brand_id=truestate.id, title=f"Blog {v}", views=v, ai_detection_score=v % 101) for v in (5, 60, 20, 90, 10, 75, 40)],
        SocialPost(brand_id=truestate.id, platform="LinkedIn", post_name="L1", impressions_views=500),
        SocialPost(brand_id=truestate.id, platform="Instagram", post_name="I1", impressions_views=300),
    )

    response = await client.get("/api/dashboard", headers=auth_headers(admin))
    assert response.status_code == 200
    by_name = {entry["brand"]["name"]: entry for entry in response.json()}
    assert set(by_name) == {"TruEstate", "Canvas Homes", "ACN"}

    stats = by_name["TruEstate"]["stats"]
    assert stats["website_visits"] == 150
    assert stats["website_change"] == 50
    assert stats["insta_fol_change"] == 25
    assert stats["current_date"] == "2024-06-02"
    assert stats["previous_date"] == "2024-06-01"

    assert by_name["Canvas Homes"]["stats"]["website_visits"] == 80
    assert by_name["Canvas Homes"]["stats"]["website_change"] == 0
    assert by_name["ACN"]["stats"]["website_visits"] == 0

    top_blogs = by_name["TruEstate"]["top_blogs"]
    assert [b["views"] for b in top_blogs] == [90, 75, 60, 40, 20]
    assert top_blogs[0]["health"] == "High AI"

    social = by_name["TruEstate"]["top_social"]
    assert [p["post_name"] for p in social["linkedin"]] == ["L1"]
    assert [p["post_name"] for p in social["instagram"]] == ["I1"]


@pytest.mark.anyio
async def test_dashboard_only_shows_allowed_brands(client, seed, brands):
    asha = await seed(make_user("Asha", allowed_brands=[brands[1].id]))
    await seed(
        DailyMetric(brand_id=brands[0].id, date=date(2024, 6, 2), website_visits=999),
        DailyMetric(brand_id=brands[1].id, date=date(2024, 6, 2), website_visits=12),
    )

    response = await client.get("/api/dashboard", headers=auth_headers(asha))
    assert response.status_code == 200
    entries = response.json()
    assert [e["brand"]["name"] for e in entries] == ["Canvas Homes"]
    assert entries[0]["stats"]["website_visits"] == 12


@pytest.mark.anyio
async def test_user_with_no_brands_gets_empty_dashboard(client, seed, brands):
    asha = await seed(make_user("Asha"))
    response = await client.get("/api/dashboard", headers=auth_headers(asha))
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.anyio
async def test_dashboard_survives_unreadable_table(client, seed, session_maker, brands):
    asha = await seed(make_user("Asha", allowed_brands=[brands[0].id]))
    await seed(
        DailyMetric(brand_id=brands[0].id, date=date(2024, 6, 2), website_visits=42),
        Blog(brand_id=brands[0].id, title="Kept", views=7),
    )
    async with session_maker() as db:
        await db.execute(text("DROP TABLE social_posts"))
        await db.commit()

    response = await client.get("/api/dashboard", headers=auth_headers(asha))
    assert response.status_code == 200
    [entry] = response.json()
    assert entry["brand"]["name"] == "TruEstate"
    assert entry["stats"]["website_visits"] == 42
    assert [b["title"] for b in entry["top_blogs"]] == ["Kept"]
    assert entry["top_social"] == {"linkedin": [], "instagram": []}
