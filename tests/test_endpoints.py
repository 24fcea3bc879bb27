import base64
from typing import List
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from scimpatch.config import Settings, settings
from scimpatch.main import create_app
from scimpatch.services import CompanyService, PatchOperation, hash_token
from scimpatch.utils import encode_token


class RecordingApplier:
    def __init__(self):
        self.calls: List[tuple] = []

    async def apply(self, company, resource_id, operations):
        self.calls.append((company.subdomain, resource_id, list(operations)))


@pytest.fixture
def applier():
    return RecordingApplier()


@pytest.fixture
def app(applier):
    return create_app(patch_applier=applier, init_db=False)


@pytest_asyncio.fixture
async def client(app, db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api_token(db):
    _, token = await CompanyService.create_company("Acme", "acme")
    return token


def patch_body(*operations):
    return {
        "schemas": ["urn:ietf:params:scim:api:messages:2.0:PatchOp"],
        "Operations": list(operations),
    }


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["environment"] == settings.environment


@pytest.mark.asyncio
async def test_patch_with_bearer_token(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body(
            {"op": "Replace", "path": "displayName", "value": "Babs"},
            {"op": "add", "path": 'emails[type eq "work"].value', "value": "babs@example.com"},
            {"op": "remove", "path": "name.givenName"},
        ),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 204

    subdomain, resource_id, operations = applier.calls[0]
    assert subdomain == "acme"
    assert resource_id == "42"
    assert [op.op.value for op in operations] == ["replace", "add", "remove"]
    assert [op.path_sp for op in operations] == [
        ("displayName",),
        ("emails", 0, "value"),
        ("name", "givenName"),
    ]
    assert all(isinstance(op, PatchOperation) for op in operations)


@pytest.mark.asyncio
async def test_patch_with_basic_credentials(client, applier, api_token):
    credentials = base64.b64encode(f"acme:{api_token}".encode()).decode()
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "replace", "path": "active", "value": False}),
        headers={"Authorization": f"Basic {credentials}"},
    )
    assert response.status_code == 204
    operation = applier.calls[0][2][0]
    assert operation.value == "false"
    assert operation.storage_attribute == "active"


@pytest.mark.asyncio
async def test_patch_without_credentials(client, applier):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "replace", "path": "displayName", "value": "Babs"}),
    )
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"]
    data = response.json()
    assert data["status"] == 401
    assert "urn:ietf:params:scim:api:messages:2.0:Error" in data["schemas"]
    assert applier.calls == []


@pytest.mark.asyncio
async def test_patch_with_wrong_password(client, applier, api_token):
    credentials = base64.b64encode(b"acme:wrong").decode()
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "replace", "path": "displayName", "value": "Babs"}),
        headers={"Authorization": f"Basic {credentials}"},
    )
    assert response.status_code == 401
    assert applier.calls == []


@pytest.mark.asyncio
async def test_unsupported_op(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "move", "path": "displayName", "value": "Babs"}),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400
    assert response.json()["scimType"] == "invalidPath"
    assert applier.calls == []


@pytest.mark.asyncio
async def test_missing_path(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "replace", "value": "Babs"}),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400
    assert applier.calls == []


@pytest.mark.asyncio
async def test_malformed_filter(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "add", "path": "emails[type eq work].value", "value": "a@b.com"}),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400
    assert response.json()["scimType"] == "invalidFilter"


@pytest.mark.asyncio
async def test_attribute_not_mutable(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body(
            {"op": "replace", "path": "displayName", "value": "Babs"},
            {"op": "replace", "path": "nickName", "value": "Babs"},
        ),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400
    assert "nickName" in response.json()["detail"]
    assert applier.calls == []


@pytest.mark.asyncio
async def test_wrong_message_schema(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json={"schemas": ["urn:example"], "Operations": [{"op": "replace", "path": "displayName", "value": "x"}]},
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_complex_value_is_rejected(client, applier, api_token):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "replace", "path": "name", "value": {"givenName": "Babs"}}),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400
    assert response.json()["scimType"] == "invalidValue"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["emails.type", 'emails[type eq "home"].type', "value", "type"])
async def test_selector_and_nested_keys_are_not_mutable(client, applier, api_token, path):
    response = await client.patch(
        f"{settings.api_prefix}/Users/42",
        json=patch_body({"op": "replace", "path": path, "value": "home"}),
        headers={"Authorization": f"Bearer {api_token}"},
    )
    assert response.status_code == 400
    assert response.json()["scimType"] == "invalidPath"
    assert applier.calls == []


@pytest.mark.asyncio
async def test_app_uses_its_own_settings(applier, db):
    custom = Settings(api_prefix="/custom/v2", jwt_secret="custom-secret")
    company, _ = await CompanyService.create_company("Acme", "acme")
    token = encode_token("acme", custom)
    company.api_token_hash = hash_token(token)
    await company.save()

    app = create_app(settings=custom, patch_applier=applier, init_db=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        body = patch_body({"op": "replace", "path": "displayName", "value": "Babs"})
        headers = {"Authorization": f"Bearer {token}"}

        response = await client.patch("/custom/v2/Users/42", json=body, headers=headers)
        assert response.status_code == 204

        response = await client.patch(f"{settings.api_prefix}/Users/42", json=body, headers=headers)
        assert response.status_code == 404

    assert len(applier.calls) == 1


@pytest.mark.asyncio
async def test_token_signed_with_another_apps_secret(applier, api_token, db):
    app = create_app(settings=Settings(jwt_secret="custom-secret"), patch_applier=applier, init_db=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.patch(
            f"{settings.api_prefix}/Users/42",
            json=patch_body({"op": "replace", "path": "displayName", "value": "Babs"}),
            headers={"Authorization": f"Bearer {api_token}"},
        )
    assert response.status_code == 401
    assert applier.calls == []
