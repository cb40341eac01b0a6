import pytest
from httpx import AsyncClient, ASGITransport
from revalidation_service.core.revalidators import RecordingRevalidator
from revalidation_service.core.config import Settings
from revalidation_service.main import create_app

@pytest.mark.asyncio
async def test_concrete_webhook_scenario():
    revalidator = RecordingRevalidator()
    app = create_app(Settings(revalidate_secret="abc123"), revalidator=revalidator)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        ok = await client.post("/revalidate?secret=abc123")
        assert ok.status_code == 200
        body = ok.json()
        assert body["revalidated"] is True
        assert body["now"] > 0

        wrong = await client.post("/revalidate?secret=wrong")
        assert wrong.status_code == 401
        assert wrong.text == "Invalid secret"

        missing = await client.post("/revalidate")
        assert missing.status_code == 401

    # Only the authorized call left side effects
    assert len(revalidator.get_invalidations()) == 2

@pytest.mark.asyncio
async def test_custom_targets_from_settings():
    revalidator = RecordingRevalidator()
    settings = Settings(revalidate_secret="s3cret", revalidate_path="/resume", revalidate_tag="posts")
    app = create_app(settings, revalidator=revalidator)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/revalidate", params={"secret": "s3cret"})
        assert response.status_code == 200

    assert revalidator.get_invalidations() == [
        {"kind": "path", "value": "/resume"},
        {"kind": "tag", "value": "posts"},
    ]
