"""Tests for the profile HTTP API."""

import pytest
from httpx import ASGITransport, AsyncClient

from importexport.main import create_application


@pytest.fixture
def app():
    """Create test application."""
    return create_application()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest.mark.anyio
async def test_healthz(client):
    response = await client.get("/healthz")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "default" in data["profiles"]


@pytest.mark.anyio
async def test_list_profiles(client):
    response = await client.get("/v1/profiles")
    assert response.status_code == 200
    names = [p["name"] for p in response.json()]
    assert names == ["aptrust", "beyondtherepository", "default"]


@pytest.mark.anyio
async def test_get_profile(client):
    response = await client.get("/v1/profiles/aptrust")
    assert response.status_code == 200
    data = response.json()
    assert data["base_profile"] == "default"
    assert data["payload_digest_algorithms"] == ["md5"]
    assert data["metadata_fields"]["Access"] == ["Consortia", "Institution", "Restricted"]
    assert data["metadata_fields"]["Title"] is None
    assert "Payload-Oxum" in data["generated_fields"]


@pytest.mark.anyio
async def test_unknown_profile_400(client):
    response = await client.get("/v1/profiles/nonexistent")
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "unknown_profile"
    assert "default" in data["available"]


@pytest.mark.anyio
async def test_validate_against_profile(client):
    response = await client.post(
        "/v1/profiles/default/validate",
        json={
            "fields": {
                "Source-Organization": "Example University",
                "Bagging-Date": "2026-10-18",
                "Payload-Oxum": "1024.3",
            }
        },
    )
    assert response.status_code == 200
    assert response.json() == {"valid": True, "section": "default"}


@pytest.mark.anyio
async def test_pre_export_scope_skips_generated_fields(client):
    response = await client.post(
        "/v1/profiles/default/validate",
        json={
            "fields": {"Source-Organization": "Example University"},
            "scope": "pre-export",
        },
    )
    assert response.status_code == 200


@pytest.mark.anyio
async def test_validation_failure_lists_every_violation(client):
    response = await client.post(
        "/v1/profiles/aptrust/validate",
        json={
            "fields": {"Title": "A bag", "Access": "Public", "Extra": "ignored"},
            "scope": "pre-export",
        },
    )
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "profile_validation_failed"
    assert data["section"] == "aptrust"

    violations = {v["field"]: v for v in data["violations"]}
    assert set(violations) == {"Source-Organization", "Access"}
    assert violations["Source-Organization"]["kind"] == "missing"
    assert violations["Access"]["kind"] == "invalid_value"
    assert violations["Access"]["allowed"] == ["Consortia", "Institution", "Restricted"]
    assert "Extra" not in data["message"]


@pytest.mark.anyio
async def test_validate_arbitrary_rules(client):
    payload = {
        "section": "aptrust-info",
        "rules": {"field1": ["value1", "value2", "value3"], "field2": None},
        "fields": {"field1": "invalidValue", "field3": "any value"},
    }
    response = await client.post("/v1/validate", json=payload)
    assert response.status_code == 422
    message = response.json()["message"]
    assert "field1" in message
    assert "field2" in message
    assert "field3" not in message

    payload["fields"] = {"field1": "value2", "field2": "anything"}
    response = await client.post("/v1/validate", json=payload)
    assert response.status_code == 200
    assert response.json()["valid"] is True


@pytest.mark.anyio
async def test_unknown_request_keys_rejected(client):
    response = await client.post(
        "/v1/profiles/default/validate", json={"fields": {}, "bogus": True}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
