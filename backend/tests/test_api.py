"""Integration tests for the HTTP surface."""
from decimal import Decimal

import pytest
from httpx import AsyncClient

from factories import COMPANY_CNPJ, DISTRIBUTOR_CNPJ, OWNER_CPF, PASSWORD, STRANGER_CPF


async def register_and_login(client: AsyncClient, email: str, cpf: str, channel: str = "WEB") -> dict:
    response = await client.post(
        "/users",
        json={
            "user_type": "INDIVIDUAL",
            "email": email,
            "password": PASSWORD,
            "first_name": "Ana",
            "last_name": "Souza",
            "cpf": cpf,
        },
    )
    assert response.status_code == 201, response.text
    user = response.json()

    login = await client.post(
        "/auth/login", json={"email": email, "password": PASSWORD, "channel": channel}
    )
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]
    return {"user": user, "headers": {"Authorization": f"Bearer {token}"}, "token": token}


async def build_hierarchy(client: AsyncClient, headers: dict) -> dict:
    distributor = await client.post(
        "/distributors",
        json={
            "name": "Enel SP",
            "cnpj": DISTRIBUTOR_CNPJ,
            "electrical_system": "BIPHASIC",
            "working_voltage": 220,
            "kwh_price": "0.75",
        },
        headers=headers,
    )
    assert distributor.status_code == 201, distributor.text
    prop = await client.post(
        "/properties",
        json={"distributor_id": distributor.json()["id"], "name": "Casa", "state": "SP"},
        headers=headers,
    )
    assert prop.status_code == 201, prop.text
    pid = prop.json()["id"]
    area = await client.post(f"/properties/{pid}/areas", json={"name": "Cozinha"}, headers=headers)
    assert area.status_code == 201, area.text
    aid = area.json()["id"]
    device = await client.post(
        f"/properties/{pid}/areas/{aid}/devices",
        json={"name": "Geladeira", "power_watts": "150"},
        headers=headers,
    )
    assert device.status_code == 201, device.text
    return {
        "distributor_id": distributor.json()["id"],
        "property_id": pid,
        "area_id": aid,
        "device_id": device.json()["id"],
    }


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_register_login_and_consumption_flow(client: AsyncClient) -> None:
    """A user can register, build a hierarchy and record priced consumption."""

    session = await register_and_login(client, "owner@example.com", OWNER_CPF)
    assert "password" not in session["user"] and "password_hash" not in session["user"]
    headers = session["headers"]
    ids = await build_hierarchy(client, headers)
    pid, aid, did = ids["property_id"], ids["area_id"], ids["device_id"]

    created = await client.post(
        f"/properties/{pid}/consumption",
        json={"period": "MONTHLY", "reference_date": "2024-01-01", "kwh_consumed": "10"},
        headers=headers,
    )
    assert created.status_code == 201, created.text
    record = created.json()
    assert Decimal(record["cost_brl"]) == Decimal("7.5")

    duplicate = await client.post(
        f"/properties/{pid}/consumption",
        json={"period": "MONTHLY", "reference_date": "2024-01-01", "kwh_consumed": "3"},
        headers=headers,
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["status"] == "error"

    updated = await client.put(
        f"/properties/{pid}/consumption/{record['id']}",
        json={"kwh_consumed": "20"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["cost_brl"]) == Decimal("15")

    device_record = await client.post(
        f"/properties/{pid}/areas/{aid}/devices/{did}/consumption",
        json={"period": "DAILY", "reference_date": "2024-01-02", "kwh_consumed": "2"},
        headers=headers,
    )
    assert device_record.status_code == 201
    assert device_record.json()["device_id"] == did

    listed = await client.get(
        f"/properties/{pid}/consumption", params={"period": "MONTHLY"}, headers=headers
    )
    assert [r["id"] for r in listed.json()] == [record["id"]]

    by_id = await client.get(
        f"/properties/{pid}/consumption/{device_record.json()['id']}", headers=headers
    )
    assert by_id.status_code == 200

    deleted = await client.delete(f"/properties/{pid}/consumption/{record['id']}", headers=headers)
    assert deleted.status_code == 204
    missing = await client.get(f"/properties/{pid}/consumption/{record['id']}", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_requests_without_valid_token_are_unauthorized(client: AsyncClient) -> None:
    response = await client.get("/properties")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json() == {"status": "error", "message": "Not authenticated"}

    response = await client.get("/properties", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_other_users_resources_are_forbidden(client: AsyncClient) -> None:
    owner = await register_and_login(client, "owner@example.com", OWNER_CPF)
    stranger = await register_and_login(client, "stranger@example.com", STRANGER_CPF)
    ids = await build_hierarchy(client, owner["headers"])
    pid, aid = ids["property_id"], ids["area_id"]

    for url in (
        f"/properties/{pid}",
        f"/properties/{pid}/areas/{aid}",
        f"/properties/{pid}/consumption",
        f"/distributors/{ids['distributor_id']}",
        f"/users/{owner['user']['id']}",
    ):
        response = await client.get(url, headers=stranger["headers"])
        assert response.status_code == 403, url

    missing = await client.get("/properties/nope", headers=stranger["headers"])
    assert missing.status_code == 404
    mismatched = await client.get(f"/properties/{pid}/areas/nope", headers=owner["headers"])
    assert mismatched.status_code == 404


@pytest.mark.asyncio
async def test_strangers_cannot_change_anything_under_a_property(client: AsyncClient) -> None:
    owner = await register_and_login(client, "owner@example.com", OWNER_CPF)
    stranger = await register_and_login(client, "stranger@example.com", STRANGER_CPF)
    ids = await build_hierarchy(client, owner["headers"])
    pid, aid, did = ids["property_id"], ids["area_id"], ids["device_id"]
    area_url = f"/properties/{pid}/areas/{aid}"
    device_url = f"{area_url}/devices/{did}"

    record_ids = []
    for base in (f"/properties/{pid}", area_url, device_url):
        created = await client.post(
            f"{base}/consumption",
            json={
                "period": "MONTHLY",
                "reference_date": "2024-01-01",
                "kwh_consumed": "10",
                "notes": "original",
            },
            headers=owner["headers"],
        )
        assert created.status_code == 201, created.text
        record_ids.append(created.json()["id"])

        listed = await client.get(f"{base}/consumption", headers=stranger["headers"])
        assert listed.status_code == 403, base

    for record_id in record_ids:
        url = f"/properties/{pid}/consumption/{record_id}"
        changed = await client.put(
            url, json={"kwh_consumed": "999", "notes": "tampered"}, headers=stranger["headers"]
        )
        assert changed.status_code == 403
        removed = await client.delete(url, headers=stranger["headers"])
        assert removed.status_code == 403

    for url in (f"/properties/{pid}", area_url, device_url):
        renamed = await client.put(url, json={"name": "Hijacked"}, headers=stranger["headers"])
        assert renamed.status_code == 403, url
        removed = await client.delete(url, headers=stranger["headers"])
        assert removed.status_code == 403, url

    for record_id in record_ids:
        kept = await client.get(
            f"/properties/{pid}/consumption/{record_id}", headers=owner["headers"]
        )
        assert kept.status_code == 200
        body = kept.json()
        assert Decimal(body["kwh_consumed"]) == Decimal("10")
        assert Decimal(body["cost_brl"]) == Decimal("7.5")
        assert body["notes"] == "original"
    for url in (f"/properties/{pid}", area_url, device_url):
        kept = await client.get(url, headers=owner["headers"])
        assert kept.status_code == 200, url
        assert kept.json()["name"] != "Hijacked"


@pytest.mark.asyncio
async def test_distributor_delete_blocked_while_in_use(client: AsyncClient) -> None:
    owner = await register_and_login(client, "owner@example.com", OWNER_CPF)
    ids = await build_hierarchy(client, owner["headers"])

    blocked = await client.delete(f"/distributors/{ids['distributor_id']}", headers=owner["headers"])
    assert blocked.status_code == 409

    await client.delete(f"/properties/{ids['property_id']}", headers=owner["headers"])
    allowed = await client.delete(f"/distributors/{ids['distributor_id']}", headers=owner["headers"])
    assert allowed.status_code == 204


@pytest.mark.asyncio
async def test_invalid_payload_shape(client: AsyncClient) -> None:
    response = await client.post(
        "/users",
        json={
            "user_type": "COMPANY",
            "email": "acme@example.com",
            "password": "weak",
            "company_name": "Acme",
            "cnpj": COMPANY_CNPJ,
        },
    )
    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "Invalid data"
    assert body["issues"]


@pytest.mark.asyncio
async def test_logout_then_token_is_dead(client: AsyncClient) -> None:
    owner = await register_and_login(client, "owner@example.com", OWNER_CPF, channel="MOBILE")

    response = await client.post("/auth/logout", headers=owner["headers"])
    assert response.status_code == 200

    again = await client.post("/auth/logout", headers=owner["headers"])
    assert again.status_code == 401
    assert again.json()["message"] == "Token already revoked"
    assert (await client.get("/properties", headers=owner["headers"])).status_code == 401


@pytest.mark.asyncio
async def test_web_token_expiry_over_http(client: AsyncClient, clock) -> None:
    owner = await register_and_login(client, "owner@example.com", OWNER_CPF)
    assert (await client.get("/properties", headers=owner["headers"])).status_code == 200

    clock.advance(minutes=15)
    assert (await client.get("/properties", headers=owner["headers"])).status_code == 401


@pytest.mark.asyncio
async def test_password_reset_over_http(client: AsyncClient, notifier) -> None:
    await register_and_login(client, "owner@example.com", OWNER_CPF)

    known = await client.post("/auth/forgot-password", json={"email": "owner@example.com"})
    unknown = await client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
    assert known.status_code == unknown.status_code == 202
    assert known.json() == unknown.json()
    assert len(notifier.sent) == 1

    token = notifier.sent[0][1]
    reset = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "Changed123"}
    )
    assert reset.status_code == 200
    reused = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "Changed456"}
    )
    assert reused.status_code == 400

    login = await client.post(
        "/auth/login",
        json={"email": "owner@example.com", "password": "Changed123", "channel": "WEB"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_user_self_service(client: AsyncClient) -> None:
    owner = await register_and_login(client, "owner@example.com", OWNER_CPF)
    user_id = owner["user"]["id"]

    updated = await client.put(
        f"/users/{user_id}", json={"last_name": "Lima"}, headers=owner["headers"]
    )
    assert updated.status_code == 200
    assert updated.json()["last_name"] == "Lima"

    cross_kind = await client.put(
        f"/users/{user_id}", json={"company_name": "Acme"}, headers=owner["headers"]
    )
    assert cross_kind.status_code == 422

    null_name = await client.put(
        f"/users/{user_id}", json={"first_name": None}, headers=owner["headers"]
    )
    assert null_name.status_code == 422

    deleted = await client.delete(f"/users/{user_id}", headers=owner["headers"])
    assert deleted.status_code == 204
    assert (await client.get(f"/users/{user_id}", headers=owner["headers"])).status_code == 401
