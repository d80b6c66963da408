"""Health probe and rate limit tests.

Invariants:
    - /health answers without a database; /health/ready checks it
    - /unlock allows 10 requests per minute per IP, the 11th gets 429
    - Every other route shares one 60/minute budget per IP
"""

from subvault.config import get_settings
import subvault.infrastructure.database as db_module


async def test_health(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "service": "subvault-api"}


async def test_ready_with_database(client):
    res = await client.get("/health/ready")
    assert res.status_code == 200
    assert res.json()["status"] == "ready"


async def test_unlock_rate_limited_after_ten_attempts(client):
    assert get_settings().rate_limit_unlock == "10/minute"
    for i in range(10):
        res = await client.post("/api/v1/unlock", json={"masterKey": f"guess {i}"})
        assert res.status_code == 200

    res = await client.post("/api/v1/unlock", json={"masterKey": "guess 11"})
    assert res.status_code == 429
    error = res.json()["error"]
    assert error["code"] == "RATE_LIMITED"
    assert error["category"] == "rate_limit"


async def test_unlock_limit_does_not_block_other_routes(client, vault):
    for i in range(10):
        await client.post("/api/v1/unlock", json={"masterKey": f"guess {i}"})

    res = await client.get("/api/v1/verify", headers=vault["headers"])
    assert res.status_code == 200


async def test_ready_reports_unavailable_database(client, monkeypatch):
    async def failing_check():
        return False

    monkeypatch.setattr(db_module.db_manager, "health_check", failing_check)
    res = await client.get("/health/ready")
    assert res.status_code == 503
    assert res.json() == {"status": "not_ready", "reason": "database_unavailable"}


async def test_ready_without_initialized_database(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/health/ready")
    assert res.status_code == 503
    assert res.json()["status"] == "not_ready"


# ─── Default per-IP limit ───────────────────────────────────────

async def test_authenticated_route_limited_after_sixty_requests(client, vault):
    assert get_settings().rate_limit_default == "60/minute"
    for _ in range(60):
        res = await client.get("/api/v1/verify", headers=vault["headers"])
        assert res.status_code == 200

    res = await client.get("/api/v1/verify", headers=vault["headers"])
    assert res.status_code == 429
    assert res.json()["error"]["code"] == "RATE_LIMITED"


async def test_default_limit_shared_across_routes(client, vault):
    for _ in range(30):
        await client.get("/api/v1/tags", headers=vault["headers"])
    for _ in range(30):
        await client.get("/api/v1/subscriptions", headers=vault["headers"])

    res = await client.get("/api/v1/analytics", headers=vault["headers"])
    assert res.status_code == 429
    assert res.json()["error"]["category"] == "rate_limit"


async def test_unlock_does_not_spend_default_budget(client):
    for i in range(10):
        await client.post("/api/v1/unlock", json={"masterKey": f"guess {i}"})

    for _ in range(60):
        res = await client.get("/health")
        assert res.status_code == 200
