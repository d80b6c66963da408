"""Notification route tests: settings upsert and the upcoming-renewals feed."""

from datetime import datetime, timedelta, timezone


def _in_days(days: int) -> str:
    return (datetime.now(timezone.utc).date() + timedelta(days=days)).isoformat()


async def test_settings_default_before_first_save(client, vault):
    res = await client.get("/api/v1/notifications/settings", headers=vault["headers"])
    assert res.status_code == 200
    assert res.json() == {"enabled": True, "daysBeforeList": "1,3,7"}


async def test_settings_upsert(client, vault):
    res = await client.post(
        "/api/v1/notifications/settings",
        json={"enabled": False, "daysBeforeList": "2,5"},
        headers=vault["headers"],
    )
    assert res.status_code == 200

    res = await client.post(
        "/api/v1/notifications/settings",
        json={"enabled": True, "daysBeforeList": "1"},
        headers=vault["headers"],
    )
    assert res.json() == {"message": "Saved"}

    res = await client.get("/api/v1/notifications/settings", headers=vault["headers"])
    assert res.json() == {"enabled": True, "daysBeforeList": "1"}


async def test_settings_empty_list_falls_back_to_default(client, vault):
    await client.post(
        "/api/v1/notifications/settings", json={"enabled": False},
        headers=vault["headers"],
    )
    res = await client.get("/api/v1/notifications/settings", headers=vault["headers"])
    assert res.json() == {"enabled": False, "daysBeforeList": "1,3,7"}


async def test_upcoming_lists_active_renewals_soonest_first(client, vault):
    headers = vault["headers"]
    for name, days, unit, active in [
        ("Later", 20, "MONTHS", True),
        ("Soon", 3, "MONTHS", True),
        ("Far", 90, "MONTHS", True),
        ("Paused", 2, "MONTHS", False),
        ("Lifetime", 1, "PERMANENT", True),
    ]:
        await client.post(
            "/api/v1/subscriptions",
            json={
                "name": name, "cost": 10, "renewalDate": _in_days(days),
                "frequencyUnit": unit, "active": active,
            },
            headers=headers,
        )

    res = await client.get("/api/v1/notifications/upcoming", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert [r["name"] for r in body] == ["Soon", "Later"]
    assert body[0]["daysLeft"] in (2, 3)
    assert body[0]["renewalDate"] == _in_days(3)


async def test_upcoming_reports_overdue_as_zero(client, vault):
    await client.post(
        "/api/v1/subscriptions",
        json={"name": "Overdue", "cost": 10, "renewalDate": _in_days(-5)},
        headers=vault["headers"],
    )
    res = await client.get("/api/v1/notifications/upcoming", headers=vault["headers"])
    assert res.json()[0]["daysLeft"] == 0


async def test_settings_list_normalised(client, vault):
    await client.post(
        "/api/v1/notifications/settings",
        json={"enabled": True, "daysBeforeList": " 7, 1,3,1 "},
        headers=vault["headers"],
    )
    res = await client.get("/api/v1/notifications/settings", headers=vault["headers"])
    assert res.json()["daysBeforeList"] == "1,3,7"


async def test_settings_reject_malformed_list(client, vault):
    res = await client.post(
        "/api/v1/notifications/settings",
        json={"enabled": True, "daysBeforeList": "1,three"},
        headers=vault["headers"],
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_INPUT"

    res = await client.get("/api/v1/notifications/settings", headers=vault["headers"])
    assert res.json()["daysBeforeList"] == "1,3,7"
