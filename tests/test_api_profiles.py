"""
End-to-end tests for the /perfil endpoints through the ASGI app.

Requests go through routing, schema validation, ProfileService and the
in-memory store; domain errors come back as JSON error bodies.
"""
import pytest
from httpx import AsyncClient

NATIONAL_ID = "111.222.333-44"


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_readiness_reports_store_outage(client: AsyncClient, store) -> None:
    assert (await client.get("/health/ready")).status_code == 200

    store.available = False
    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["components"] == {"store": "unavailable"}


@pytest.mark.asyncio
async def test_register_returns_201_then_200(client: AsyncClient) -> None:
    first = await client.post("/perfil", json={"email": "A@B.com", "name": "Ana"})
    assert first.status_code == 201, first.text
    assert first.json()["id"] == "a@b.com"

    second = await client.post("/perfil", json={"email": "a@b.com", "name": "Ana Maria"})
    assert second.status_code == 200
    assert second.json()["name"] == "Ana Maria"


@pytest.mark.asyncio
async def test_register_without_email_is_400(client: AsyncClient) -> None:
    response = await client.post("/perfil", json={"name": "Nobody"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_IDENTITY"


@pytest.mark.asyncio
async def test_register_with_bad_national_id_is_400(client: AsyncClient) -> None:
    response = await client.post("/perfil", json={"email": "a@b.com", "nationalId": "123"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_NATIONAL_ID"


@pytest.mark.asyncio
async def test_duplicate_national_id_is_409_without_raw_value(client: AsyncClient) -> None:
    await client.post("/perfil", json={"email": "a@b.com", "nationalId": NATIONAL_ID})
    await client.post("/perfil", json={"email": "b@b.com"})

    response = await client.put("/perfil/b@b.com", json={"nationalId": NATIONAL_ID})

    assert response.status_code == 409
    body = response.json()
    assert body["error"]["code"] == "DUPLICATE_CLAIM"
    assert body["error"]["details"]["claimant_id"] == "a@b.com"
    assert "11122233344" not in response.text


@pytest.mark.asyncio
async def test_exists_check(client: AsyncClient, store) -> None:
    assert (await client.get("/perfil/__check/exists-cpf", params={"cpf": NATIONAL_ID})).json() == {"exists": False}

    created = await client.post("/perfil", json={"email": "a@b.com", "nationalId": NATIONAL_ID})
    national_id_hash = created.json()["nationalIdHash"]

    assert (await client.get("/perfil/__check/exists-cpf", params={"cpf": NATIONAL_ID})).json() == {"exists": True}
    assert (await client.get("/perfil/__check/exists-cpf", params={"hash": national_id_hash})).json() == {"exists": True}
    assert (await client.get("/perfil/__check/exists-cpf", params={"cpf": "123"})).json() == {"exists": False}
    assert (await client.get("/perfil/__check/exists-cpf")).json() == {"exists": False}

    store.available = False
    response = await client.get("/perfil/__check/exists-cpf", params={"cpf": NATIONAL_ID})
    assert response.status_code == 200
    assert response.json() == {"exists": False}


@pytest.mark.asyncio
async def test_get_profile_heals_legacy_document(client: AsyncClient, store) -> None:
    store.seed({"id": "u123", "email": "a@b.com", "nome": "X"})

    response = await client.get("/perfil/a@b.com")

    assert response.status_code == 200
    assert response.json()["id"] == "a@b.com"
    assert response.json()["nome"] == "X"
    assert [d["id"] for d in store.snapshot()] == ["a@b.com"]


@pytest.mark.asyncio
async def test_get_missing_profile_is_404(client: AsyncClient) -> None:
    response = await client.get("/perfil/nobody@b.com")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_list_profiles(client: AsyncClient) -> None:
    await client.post("/perfil", json={"email": "b@b.com"})
    await client.post("/perfil", json={"email": "a@b.com"})

    response = await client.get("/perfil")

    assert [p["id"] for p in response.json()] == ["a@b.com", "b@b.com"]


@pytest.mark.asyncio
async def test_update_with_stale_if_match_is_409(client: AsyncClient) -> None:
    created = (await client.post("/perfil", json={"email": "a@b.com"})).json()
    await client.put("/perfil/a@b.com", json={"name": "First"})

    response = await client.put(
        "/perfil/a@b.com",
        json={"name": "Second"},
        headers={"If-Match": created["_etag"]},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONCURRENCY_CONFLICT"


@pytest.mark.asyncio
async def test_self_update_uses_body_email(client: AsyncClient) -> None:
    await client.post("/perfil", json={"email": "a@b.com", "name": "Ana"})

    response = await client.put("/perfil/self", json={"email": "a@b.com", "nickname": "Aninha"})

    assert response.status_code == 200
    assert response.json()["nickname"] == "Aninha"
    assert response.json()["name"] == "Ana"

    missing = await client.put("/perfil/self", json={"nickname": "x"})
    assert missing.status_code == 400


@pytest.mark.asyncio
async def test_certificate_flow(client: AsyncClient) -> None:
    await client.post("/perfil", json={"email": "a@b.com", "name": "Ana", "rank": "crua"})

    submitted = await client.post("/perfil/a@b.com/certificados", json={"rank": "verde"})
    assert submitted.status_code == 201
    certificate_id = submitted.json()["id"]

    pending = (await client.get("/perfil/__admin/pendentes")).json()
    assert [(p["email"], p["id"]) for p in pending] == [("a@b.com", certificate_id)]

    reviewed = await client.put(
        f"/perfil/a@b.com/certificados/{certificate_id}",
        json={"status": "approved", "observacao": "ok", "atualizarCorda": True},
    )
    assert reviewed.status_code == 200
    assert reviewed.json() == {"ok": True}

    timeline = (await client.get("/perfil/a@b.com/certificados")).json()
    assert timeline[0]["status"] == "approved"
    assert timeline[0]["review"]["note"] == "ok"

    profile = (await client.get("/perfil/a@b.com")).json()
    assert profile["rank"] == "verde"
    assert profile["rankVerified"] is True
    assert (await client.get("/perfil/__admin/pendentes")).json() == []


@pytest.mark.asyncio
async def test_invalid_review_status_is_400(client: AsyncClient) -> None:
    await client.post("/perfil", json={"email": "a@b.com"})
    submitted = (await client.post("/perfil/a@b.com/certificados", json={"rank": "verde"})).json()

    response = await client.put(
        f"/perfil/a@b.com/certificados/{submitted['id']}",
        json={"status": "maybe"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REVIEW_STATUS"


@pytest.mark.asyncio
async def test_store_outage_is_503(client: AsyncClient, store) -> None:
    store.available = False

    response = await client.get("/perfil/a@b.com")

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_update_by_opaque_id_is_400(client: AsyncClient, store) -> None:
    store.seed({"id": "u123", "email": "a@b.com", "nome": "X"})

    response = await client.put("/perfil/u123", json={"nickname": "Z"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_EMAIL"
    assert store.write_count == 0
