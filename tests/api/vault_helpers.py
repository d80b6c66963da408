"""Shared helpers for API tests."""

from httpx import AsyncClient


async def unlock(client: AsyncClient, master_key: str) -> dict:
    """Unlock (or create) a vault and return the unlock response body."""
    res = await client.post("/api/v1/unlock", json={"masterKey": master_key})
    assert res.status_code == 200, res.text
    return res.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
