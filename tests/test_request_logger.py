import pytest
from httpx import ASGITransport, AsyncClient
from scimpatch.config import Settings
from scimpatch.main import create_app
from scimpatch.middleware.request_logger import FILTERED, filter_parameters


def test_secrets_are_masked_at_any_depth():
    params = {
        "userName": "bjensen",
        "password": "t1meMa$heen",
        "Operations": [{"op": "replace", "path": "password", "value": "x", "Token": "abc"}],
    }
    filtered = filter_parameters(params, ["password", "token"])
    assert filtered["userName"] == "bjensen"
    assert filtered["password"] == FILTERED
    assert filtered["Operations"][0]["Token"] == FILTERED
    assert filtered["Operations"][0]["path"] == "password"
    assert params["password"] == "t1meMa$heen"


def test_scalars_pass_through():
    assert filter_parameters("plain", ["password"]) == "plain"


@pytest.mark.asyncio
async def test_masked_keys_come_from_app_settings(caplog):
    app = create_app(settings=Settings(filtered_params=["value"]), init_db=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        await client.patch(
            "/scim/v2/Users/42",
            json={"Operations": [{"op": "replace", "path": "displayName", "value": "Babs"}]},
        )

    logged = "\n".join(record.getMessage() for record in caplog.records)
    assert FILTERED in logged
    assert "Babs" not in logged
