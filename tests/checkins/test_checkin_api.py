"""Tests for the /api/checkin endpoints."""

from datetime import timedelta

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from momentum.clock import FixedClock, get_clock
from momentum.db.models import ManualCheckin
from tests.conftest import ALICE, FIXED_NOW, TODAY, bearer, register


def _day(offset: int) -> str:
    return (TODAY - timedelta(days=offset)).isoformat()


async def _submit(client: AsyncClient, headers: dict, **fields) -> dict:
    body = {"date": TODAY.isoformat(), **fields}
    response = await client.post("/api/checkin", json=body, headers=headers)
    assert response.status_code in (200, 201), response.text
    return response.json()


async def _count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(ManualCheckin))).scalar_one()


class TestSubmit:
    async def test_create_returns_201(self, client: AsyncClient, alice_headers: dict):
        body = {"date": TODAY.isoformat(), "sleepHours": 7.5, "productivityRating": 8, "mood": "good"}
        response = await client.post("/api/checkin", json=body, headers=alice_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["date"] == TODAY.isoformat()
        assert data["sleepHours"] == 7.5
        assert data["productivityRating"] == 8
        assert data["energyMorning"] is None
        assert data["createdAt"] == data["updatedAt"]

    async def test_snake_case_body_accepted(self, client: AsyncClient, alice_headers: dict):
        body = {"date": TODAY.isoformat(), "sleep_hours": 6, "ate_breakfast": True}
        response = await client.post("/api/checkin", json=body, headers=alice_headers)
        assert response.status_code == 201
        assert response.json()["ateBreakfast"] is True

    async def test_upsert_same_date(
        self, app: FastAPI, client: AsyncClient, alice_headers: dict, db_session: AsyncSession
    ):
        first = await _submit(client, alice_headers, sleepHours=6, mood="bad", notes="rough night")

        app.dependency_overrides[get_clock] = lambda: FixedClock(FIXED_NOW + timedelta(hours=3))
        response = await client.post(
            "/api/checkin",
            json={"date": TODAY.isoformat(), "sleepHours": 8, "mood": "great"},
            headers=alice_headers,
        )
        assert response.status_code == 200
        second = response.json()

        assert second["id"] == first["id"]
        assert second["sleepHours"] == 8
        assert second["mood"] == "great"
        assert second["notes"] is None
        assert second["createdAt"] == first["createdAt"]
        assert second["updatedAt"] != first["updatedAt"]
        assert await _count(db_session) == 1

    async def test_future_date_rejected(self, client: AsyncClient, alice_headers: dict, db_session: AsyncSession):
        body = {"date": (TODAY + timedelta(days=1)).isoformat(), "sleepHours": 7}
        response = await client.post("/api/checkin", json=body, headers=alice_headers)
        assert response.status_code == 400
        assert "future" in response.json()["message"]
        assert await _count(db_session) == 0

    async def test_today_follows_configured_timezone(
        self, app: FastAPI, client: AsyncClient, alice_headers: dict
    ):
        # 20:30 UTC on the 15th is already the morning of the 16th in Auckland.
        app.dependency_overrides[get_clock] = lambda: FixedClock(FIXED_NOW + timedelta(hours=12), "Pacific/Auckland")
        body = {"date": (TODAY + timedelta(days=1)).isoformat()}
        response = await client.post("/api/checkin", json=body, headers=alice_headers)
        assert response.status_code == 201

    @pytest.mark.parametrize(
        "fields",
        [
            {"sleepQuality": 0},
            {"sleepQuality": 11},
            {"energyMorning": 0},
            {"stressLevel": 11},
            {"exerciseIntensity": -1},
            {"productivityRating": 11},
            {"exerciseDuration": -1},
            {"caffeineMg": -5},
            {"waterGlasses": -1},
            {"screenTimeBeforeBed": -10},
            {"caffeineMg": 2**31},
            {"exerciseDuration": 10**19},
            {"waterGlasses": 2**31},
            {"screenTimeBeforeBed": 2**31},
            {"sleepHours": 24.5},
            {"sleepHours": -0.5},
            {"deepWorkHours": 25},
            {"notes": "x" * 1001},
            {"sleepNotes": "x" * 501},
            {"mood": "x" * 51},
        ],
    )
    async def test_out_of_range_rejected(
        self, client: AsyncClient, alice_headers: dict, db_session: AsyncSession, fields: dict
    ):
        body = {"date": TODAY.isoformat(), "sleepHours": 7, **fields}
        response = await client.post("/api/checkin", json=body, headers=alice_headers)
        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Validation failed"
        assert len(data["details"]) == 1
        assert await _count(db_session) == 0

    async def test_largest_count_accepted(self, client: AsyncClient, alice_headers: dict):
        body = {"date": TODAY.isoformat(), "caffeineMg": 2**31 - 1}
        response = await client.post("/api/checkin", json=body, headers=alice_headers)
        assert response.status_code == 201
        assert response.json()["caffeineMg"] == 2**31 - 1

    async def test_missing_date_rejected(self, client: AsyncClient, alice_headers: dict):
        response = await client.post("/api/checkin", json={"sleepHours": 7}, headers=alice_headers)
        assert response.status_code == 400

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/checkin", json={"date": TODAY.isoformat()})
        assert response.status_code == 401


class TestReads:
    async def test_get_by_date(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers, sleepHours=7)
        response = await client.get(f"/api/checkin/{TODAY.isoformat()}", headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    async def test_get_by_date_missing(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(f"/api/checkin/{_day(3)}", headers=alice_headers)
        assert response.status_code == 404

    async def test_get_by_bad_date(self, client: AsyncClient, alice_headers: dict):
        response = await client.get("/api/checkin/not-a-date", headers=alice_headers)
        assert response.status_code == 400

    async def test_get_by_id(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        response = await client.get(f"/api/checkin/id/{created['id']}", headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["date"] == TODAY.isoformat()

    async def test_list_by_date(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        response = await client.get(f"/api/checkin/date/{TODAY.isoformat()}", headers=alice_headers)
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [created["id"]]

        empty = await client.get(f"/api/checkin/date/{_day(1)}", headers=alice_headers)
        assert empty.json() == []

    async def test_latest_by_date(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        response = await client.get(f"/api/checkin/date/{TODAY.isoformat()}/latest", headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

        missing = await client.get(f"/api/checkin/date/{_day(1)}/latest", headers=alice_headers)
        assert missing.status_code == 404


class TestRecent:
    async def test_recent_window_and_order(self, client: AsyncClient, alice_headers: dict):
        for offset in (0, 3, 7, 8, 20):
            await _submit(client, alice_headers, date=_day(offset))

        response = await client.get("/api/checkin/recent?days=7", headers=alice_headers)
        assert response.status_code == 200
        assert [c["date"] for c in response.json()] == [_day(0), _day(3), _day(7)]

    async def test_recent_defaults_to_seven_days(self, client: AsyncClient, alice_headers: dict):
        await _submit(client, alice_headers, date=_day(7))
        await _submit(client, alice_headers, date=_day(8))
        response = await client.get("/api/checkin/recent", headers=alice_headers)
        assert [c["date"] for c in response.json()] == [_day(7)]

    @pytest.mark.parametrize("days", [0, 91, -1])
    async def test_days_out_of_bounds(self, client: AsyncClient, alice_headers: dict, days: int):
        response = await client.get(f"/api/checkin/recent?days={days}", headers=alice_headers)
        assert response.status_code == 400
        assert "between 1 and 90" in response.json()["message"]

    @pytest.mark.parametrize("days", [1, 90])
    async def test_days_bounds_accepted(self, client: AsyncClient, alice_headers: dict, days: int):
        response = await client.get(f"/api/checkin/recent?days={days}", headers=alice_headers)
        assert response.status_code == 200


class TestRange:
    async def test_inclusive_ascending(self, client: AsyncClient, alice_headers: dict):
        for offset in (1, 2, 5, 9):
            await _submit(client, alice_headers, date=_day(offset))

        response = await client.get(
            "/api/checkin/range", params={"startDate": _day(5), "endDate": _day(1)}, headers=alice_headers
        )
        assert response.status_code == 200
        assert [c["date"] for c in response.json()] == [_day(5), _day(2), _day(1)]

    async def test_inverted_range_rejected(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(
            "/api/checkin/range", params={"startDate": _day(1), "endDate": _day(5)}, headers=alice_headers
        )
        assert response.status_code == 400

    async def test_oversized_range_rejected(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(
            "/api/checkin/range", params={"startDate": _day(400), "endDate": _day(0)}, headers=alice_headers
        )
        assert response.status_code == 400
        assert "366" in response.json()["message"]

    async def test_missing_params_rejected(self, client: AsyncClient, alice_headers: dict):
        response = await client.get("/api/checkin/range", headers=alice_headers)
        assert response.status_code == 400
        assert len(response.json()["details"]) == 2


class TestUpdate:
    async def test_update_overwrites_fields(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers, sleepHours=6, mood="okay")
        body = {"date": TODAY.isoformat(), "sleepHours": 9, "stressLevel": 2}
        response = await client.put(f"/api/checkin/{created['id']}", json=body, headers=alice_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["sleepHours"] == 9
        assert data["stressLevel"] == 2
        assert data["mood"] is None
        assert data["createdAt"] == created["createdAt"]

    async def test_update_moves_date(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        response = await client.put(
            f"/api/checkin/{created['id']}", json={"date": _day(2)}, headers=alice_headers
        )
        assert response.status_code == 200
        assert response.json()["date"] == _day(2)
        assert (await client.get(f"/api/checkin/{_day(2)}", headers=alice_headers)).status_code == 200
        assert (await client.get(f"/api/checkin/{TODAY.isoformat()}", headers=alice_headers)).status_code == 404

    async def test_update_onto_taken_date_conflicts(self, client: AsyncClient, alice_headers: dict):
        await _submit(client, alice_headers, date=_day(1))
        created = await _submit(client, alice_headers)
        response = await client.put(
            f"/api/checkin/{created['id']}", json={"date": _day(1)}, headers=alice_headers
        )
        assert response.status_code == 409

    async def test_update_future_date_rejected(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        body = {"date": (TODAY + timedelta(days=2)).isoformat()}
        response = await client.put(f"/api/checkin/{created['id']}", json=body, headers=alice_headers)
        assert response.status_code == 400

    async def test_update_invalid_value_rejected(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        body = {"date": TODAY.isoformat(), "sleepQuality": 12}
        response = await client.put(f"/api/checkin/{created['id']}", json=body, headers=alice_headers)
        assert response.status_code == 400

    async def test_update_missing(self, client: AsyncClient, alice_headers: dict):
        response = await client.put("/api/checkin/999", json={"date": TODAY.isoformat()}, headers=alice_headers)
        assert response.status_code == 404


class TestDelete:
    async def test_delete(self, client: AsyncClient, alice_headers: dict):
        created = await _submit(client, alice_headers)
        response = await client.delete(f"/api/checkin/{created['id']}", headers=alice_headers)
        assert response.status_code == 204
        assert (await client.get(f"/api/checkin/id/{created['id']}", headers=alice_headers)).status_code == 404

    async def test_delete_missing(self, client: AsyncClient, alice_headers: dict):
        response = await client.delete("/api/checkin/999", headers=alice_headers)
        assert response.status_code == 404


class TestOwnership:
    async def test_other_user_cannot_touch_record(
        self, client: AsyncClient, alice_headers: dict, bob_headers: dict
    ):
        created = await _submit(client, alice_headers, sleepHours=7)
        checkin_id = created["id"]

        missing_get = await client.get("/api/checkin/id/999999", headers=bob_headers)
        foreign_get = await client.get(f"/api/checkin/id/{checkin_id}", headers=bob_headers)
        assert foreign_get.status_code == missing_get.status_code == 404
        assert foreign_get.json()["message"] == missing_get.json()["message"]

        body = {"date": TODAY.isoformat(), "sleepHours": 1}
        missing_put = await client.put("/api/checkin/999999", json=body, headers=bob_headers)
        foreign_put = await client.put(f"/api/checkin/{checkin_id}", json=body, headers=bob_headers)
        assert foreign_put.status_code == missing_put.status_code == 404
        assert foreign_put.json()["message"] == missing_put.json()["message"]

        missing_delete = await client.delete("/api/checkin/999999", headers=bob_headers)
        foreign_delete = await client.delete(f"/api/checkin/{checkin_id}", headers=bob_headers)
        assert foreign_delete.status_code == missing_delete.status_code == 404

        still_there = await client.get(f"/api/checkin/id/{checkin_id}", headers=alice_headers)
        assert still_there.json()["sleepHours"] == 7

    async def test_lists_are_per_user(self, client: AsyncClient, alice_headers: dict, bob_headers: dict):
        await _submit(client, alice_headers)
        await _submit(client, bob_headers)
        response = await client.get("/api/checkin/recent", headers=bob_headers)
        assert len(response.json()) == 1
        by_date = await client.get(f"/api/checkin/date/{TODAY.isoformat()}", headers=bob_headers)
        assert len(by_date.json()) == 1

    async def test_same_date_for_two_users(self, client: AsyncClient, alice_headers: dict, bob_headers: dict):
        alice = await _submit(client, alice_headers)
        bob = await _submit(client, bob_headers)
        assert alice["id"] != bob["id"]


class TestStatsAndAnalytics:
    async def test_stats(self, client: AsyncClient, alice_headers: dict):
        await _submit(client, alice_headers, date=_day(0), sleepHours=8, mood="great", productivityRating=7)
        await _submit(client, alice_headers, date=_day(1), sleepHours=6, mood="good", productivityRating=5)
        await _submit(client, alice_headers, date=_day(4), sleepHours=7)

        response = await client.get("/api/checkin/stats?days=30", headers=alice_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["days"] == 30
        assert data["totalCheckins"] == 3
        assert data["averageSleep"] == 7.0
        assert data["averageMood"] == 4.0
        assert data["averageProductivity"] == 4.0
        assert data["streakDays"] == 2

    async def test_stats_days_validated(self, client: AsyncClient, alice_headers: dict):
        response = await client.get("/api/checkin/stats?days=0", headers=alice_headers)
        assert response.status_code == 400

    async def test_analytics(self, client: AsyncClient, alice_headers: dict):
        for offset in range(8):
            await _submit(
                client,
                alice_headers,
                date=_day(offset),
                sleepHours=7,
                sleepQuality=6,
                energyMorning=6,
                energyAfternoon=6,
                energyEvening=6,
                productivityRating=4 + (offset == 2) * 5,
                mood="good",
            )

        response = await client.get("/api/checkin/analytics?days=30", headers=alice_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["totalCheckins"] == 8
        assert [d["date"] for d in data["daily"]] == [_day(o) for o in range(7, -1, -1)]
        assert [w["period"] for w in data["weeklyTrends"]] == ["Week 1", "Week 2"]
        assert data["bestDay"] == _day(2)
        assert data["improvementArea"] == "Productivity"
        assert data["streakDays"] == 8
        assert data["averages"]["energy"] == 6.0
        assert data["trends"]["sleepHours"]["direction"] == "stable"

    async def test_analytics_empty(self, client: AsyncClient, alice_headers: dict):
        response = await client.get("/api/checkin/analytics", headers=alice_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["totalCheckins"] == 0
        assert data["daily"] == []
        assert data["bestDay"] is None
        assert data["improvementArea"] is None


class TestEndToEnd:
    async def test_register_checkin_recent_delete(self, client: AsyncClient):
        auth = await register(client, ALICE)
        headers = bearer(auth["token"])

        created = await client.post(
            "/api/checkin",
            json={"date": TODAY.isoformat(), "sleepHours": 7.5, "productivityRating": 8},
            headers=headers,
        )
        assert created.status_code == 201
        record = created.json()
        assert record["id"]
        assert record["sleepHours"] == 7.5
        assert record["productivityRating"] == 8

        recent = await client.get("/api/checkin/recent?days=7", headers=headers)
        assert [c["id"] for c in recent.json()] == [record["id"]]

        deleted = await client.delete(f"/api/checkin/{record['id']}", headers=headers)
        assert deleted.status_code == 204

        gone = await client.get(f"/api/checkin/id/{record['id']}", headers=headers)
        assert gone.status_code == 404
