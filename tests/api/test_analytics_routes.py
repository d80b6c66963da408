"""Analytics route tests: totals and breakdowns over active subscriptions."""

import pytest


async def _add(client, headers, **body):
    res = await client.post("/api/v1/subscriptions", json=body, headers=headers)
    assert res.status_code == 201, res.text


async def test_empty_vault_analytics(client, vault):
    res = await client.get("/api/v1/analytics", headers=vault["headers"])
    assert res.status_code == 200
    body = res.json()
    assert body["totalMonthly"] == 0
    assert body["subscriptionCount"] == 0
    assert len(body["monthlySpending"]) == 6


async def test_analytics_totals_skip_inactive(client, vault):
    headers = vault["headers"]
    await _add(client, headers, name="Netflix", cost=30, category="Video")
    await _add(client, headers, name="Office", cost=120, frequencyUnit="YEARS",
               category="Tools", currency="USD")
    await _add(client, headers, name="Old", cost=500, active=False)

    body = (await client.get("/api/v1/analytics", headers=headers)).json()
    assert body["totalMonthly"] == pytest.approx(40.0)
    assert body["totalYearly"] == pytest.approx(480.0)
    assert body["subscriptionCount"] == 2

    categories = {c["category"]: c for c in body["categoryBreakdown"]}
    assert categories["Video"]["percentage"] == pytest.approx(75.0)
    assert categories["Tools"]["amount"] == pytest.approx(10.0)

    currencies = {c["currency"]: c for c in body["currencyBreakdown"]}
    assert currencies["USD"]["amount"] == pytest.approx(120.0)
    assert currencies["CNY"]["count"] == 1


async def test_analytics_is_vault_scoped(client, vault, other_vault):
    await _add(client, other_vault["headers"], name="Elsewhere", cost=99)
    body = (await client.get("/api/v1/analytics", headers=vault["headers"])).json()
    assert body["subscriptionCount"] == 0
