"""HTTP routes — identity headers, error envelopes, admin operations and probes."""

from datetime import timedelta
from uuid import uuid4

import pytest

from tests.support import T0, participant


def _challenge_body(slug="golden-hour", start=T0, **extra):
    body = {
        "title": "Golden Hour",
        "slug": slug,
        "theme": "Light at dusk",
        "description": "Shoot the last hour of sunlight.",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=7)).isoformat(),
        "voting_end": (start + timedelta(days=10)).isoformat(),
    }
    body.update(extra)
    return body


@pytest.fixture
async def created(client, admin_headers):
    res = await client.post(
        "/api/v1/admin/challenges", json=_challenge_body(), headers=admin_headers,
    )
    assert res.status_code == 201
    return res.json()


@pytest.fixture
async def entry(client, clock, created):
    clock.set(T0 + timedelta(days=1))
    res = await client.post(
        "/api/v1/entries",
        json={"challenge_id": created["id"], "image_ref": "alice.jpg", "title": "  "},
        headers=participant("alice"),
    )
    assert res.status_code == 201
    return res.json()


# ─── Health ──────────────────────────────────────────────────────

async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


# ─── Admin gate ──────────────────────────────────────────────────

async def test_admin_requires_token(client):
    res = await client.post("/api/v1/admin/challenges", json=_challenge_body())
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "ADMIN_REQUIRED"


async def test_admin_rejects_wrong_token(client):
    res = await client.get(
        "/api/v1/admin/challenges", headers={"X-Admin-Token": "nope"},
    )
    assert res.status_code == 403


# ─── Challenge creation & reads ──────────────────────────────────

async def test_create_returns_challenge(created):
    assert created["slug"] == "golden-hour"
    assert created["phase"] == "UPCOMING"
    assert created["entry_count"] == 0


async def test_create_invalid_window(client, admin_headers):
    body = _challenge_body(end_date=T0.isoformat())
    res = await client.post("/api/v1/admin/challenges", json=body, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_WINDOW"


async def test_create_duplicate_slug(client, admin_headers, created):
    res = await client.post(
        "/api/v1/admin/challenges", json=_challenge_body(), headers=admin_headers,
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_SLUG"


async def test_create_rejects_bad_slug(client, admin_headers):
    res = await client.post(
        "/api/v1/admin/challenges",
        json=_challenge_body(slug="Not A Slug"),
        headers=admin_headers,
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(d["field"].endswith("slug") for d in error["details"])


async def test_active_listing(client, created):
    res = await client.get("/api/v1/challenges/active")
    assert res.status_code == 200
    assert [c["slug"] for c in res.json()] == ["golden-hour"]


async def test_detail_unknown_slug(client):
    res = await client.get("/api/v1/challenges/missing")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "CHALLENGE_NOT_FOUND"


async def test_detail_lists_approved_entries(client, created, entry):
    res = await client.get("/api/v1/challenges/golden-hour")
    body = res.json()
    assert body["challenge"]["entry_count"] == 1
    assert [e["entry"]["id"] for e in body["entries"]] == [entry["id"]]
    assert body["entries"][0]["vote_count"] == 0


async def test_leaderboard_limit_bounds(client, created):
    res = await client.get(f"/api/v1/challenges/{created['id']}/leaderboard?limit=0")
    assert res.status_code == 400
    res = await client.get(f"/api/v1/challenges/{created['id']}/leaderboard?limit=101")
    assert res.status_code == 400


async def test_leaderboard_unknown_challenge(client):
    res = await client.get(f"/api/v1/challenges/{uuid4()}/leaderboard")
    assert res.status_code == 404


# ─── Entries ─────────────────────────────────────────────────────

async def test_entry_requires_participant(client, created):
    res = await client.post(
        "/api/v1/entries",
        json={"challenge_id": created["id"], "image_ref": "a.jpg"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "PARTICIPANT_REQUIRED"


async def test_entry_while_upcoming(client, created):
    res = await client.post(
        "/api/v1/entries",
        json={"challenge_id": created["id"], "image_ref": "a.jpg"},
        headers=participant("alice"),
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CHALLENGE_NOT_ACCEPTING_ENTRIES"


async def test_entry_blank_metadata_becomes_null(entry):
    assert entry["title"] is None
    assert entry["participant_id"] == "alice"
    assert entry["is_approved"] is True


async def test_my_entry(client, created, entry):
    res = await client.get(
        f"/api/v1/entries/mine?challenge_id={created['id']}",
        headers=participant("alice"),
    )
    assert res.status_code == 200
    assert res.json()["entry"]["id"] == entry["id"]
    assert res.json()["vote_count"] == 0

    res = await client.get(
        f"/api/v1/entries/mine?challenge_id={created['id']}",
        headers=participant("bob"),
    )
    assert res.status_code == 404


# ─── Votes ───────────────────────────────────────────────────────

async def test_vote_while_active_is_closed(client, entry):
    res = await client.post(
        "/api/v1/votes/toggle", json={"entry_id": entry["id"]},
        headers=participant("bob"),
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "VOTING_CLOSED"


async def test_vote_unknown_entry(client):
    res = await client.post(
        "/api/v1/votes/toggle", json={"entry_id": str(uuid4())},
        headers=participant("bob"),
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "ENTRY_NOT_FOUND"


async def test_vote_toggle_and_status(client, clock, entry):
    clock.set(T0 + timedelta(days=8))
    headers = participant("bob")

    res = await client.post("/api/v1/votes/toggle", json={"entry_id": entry["id"]}, headers=headers)
    assert res.json() == {"voted": True}
    res = await client.get(f"/api/v1/votes/status?entry_id={entry['id']}", headers=headers)
    assert res.json() == {"entry_id": entry["id"], "voted": True, "vote_count": 1}

    res = await client.post("/api/v1/votes/toggle", json={"entry_id": entry["id"]}, headers=headers)
    assert res.json() == {"voted": False}
    res = await client.get(f"/api/v1/votes/status?entry_id={entry['id']}", headers=headers)
    assert res.json() == {"entry_id": entry["id"], "voted": False, "vote_count": 0}


# ─── Admin management ────────────────────────────────────────────

async def test_admin_list_all(client, admin_headers, created, entry):
    res = await client.get("/api/v1/admin/challenges", headers=admin_headers)
    assert res.status_code == 200
    [listed] = res.json()
    assert listed["id"] == created["id"]
    assert listed["entry_count"] == 1


async def test_patch_featured_and_single_step_phase(client, admin_headers, created):
    res = await client.patch(
        f"/api/v1/admin/challenges/{created['id']}",
        json={"featured": True, "phase": "ACTIVE"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["featured"] is True
    assert res.json()["phase"] == "ACTIVE"


async def test_patch_rejects_phase_skip(client, admin_headers, created):
    res = await client.patch(
        f"/api/v1/admin/challenges/{created['id']}",
        json={"phase": "COMPLETED"},
        headers=admin_headers,
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "ILLEGAL_TRANSITION"


async def test_moderation_round_trip(client, admin_headers, entry):
    res = await client.post(
        f"/api/v1/admin/entries/{entry['id']}/reject", headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["is_approved"] is False

    detail = await client.get("/api/v1/challenges/golden-hour")
    assert detail.json()["entries"] == []

    res = await client.post(
        f"/api/v1/admin/entries/{entry['id']}/approve", headers=admin_headers,
    )
    assert res.json()["is_approved"] is True


async def test_admin_delete_entry(client, admin_headers, created, entry):
    res = await client.delete(f"/api/v1/admin/entries/{entry['id']}", headers=admin_headers)
    assert res.status_code == 200
    res = await client.delete(f"/api/v1/admin/entries/{entry['id']}", headers=admin_headers)
    assert res.status_code == 404


async def test_admin_delete_challenge(client, admin_headers, created, entry):
    res = await client.delete(
        f"/api/v1/admin/challenges/{created['id']}", headers=admin_headers,
    )
    assert res.status_code == 200
    res = await client.get("/api/v1/challenges/golden-hour")
    assert res.status_code == 404


async def test_winners_before_completion(client, admin_headers, created, entry):
    res = await client.post(
        f"/api/v1/admin/challenges/{created['id']}/winners",
        json={"first": entry["id"]},
        headers=admin_headers,
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "WINNERS_NOT_ALLOWED"


async def test_winners_foreign_entry(client, clock, admin_headers, created, entry):
    clock.set(T0 + timedelta(days=11))
    res = await client.post(
        f"/api/v1/admin/challenges/{created['id']}/winners",
        json={"first": entry["id"], "second": str(uuid4())},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ENTRY_NOT_IN_CHALLENGE"


async def test_manual_phase_run(client, clock, admin_headers, created):
    clock.set(T0 + timedelta(days=7))
    res = await client.post("/api/v1/admin/phases/run", headers=admin_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["examined"] == 1
    assert [t["to_phase"] for t in body["applied"]] == ["ACTIVE", "VOTING"]
