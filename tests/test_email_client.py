from unittest.mock import AsyncMock, patch

import httpx
import pytest

from leadintake.services.email_client import EmailSettings, ResendEmailClient

API_URL = "https://api.resend.com/emails"


def _response(status_code: int, json_body) -> httpx.Response:
    return httpx.Response(
        status_code, json=json_body, request=httpx.Request("POST", API_URL)
    )


@pytest.fixture
def client() -> ResendEmailClient:
    return ResendEmailClient(
        EmailSettings(api_key="re_test_key", from_email="leads@example.com")
    )


class TestResendEmailClient:
    def test_unconfigured_without_api_key(self):
        assert ResendEmailClient(EmailSettings(api_key="")).is_configured is False

    @pytest.mark.asyncio
    async def test_unconfigured_send_does_not_call_provider(self):
        client = ResendEmailClient(EmailSettings(api_key=""))
        with patch("httpx.AsyncClient.post", new=AsyncMock()) as post:
            result = await client.send(to="a@x.com", subject="s", text="t")

        assert result.success is False
        assert "not configured" in result.error
        post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_returns_provider_id(self, client):
        post = AsyncMock(return_value=_response(200, {"id": "re_123"}))
        with patch("httpx.AsyncClient.post", new=post):
            result = await client.send(
                to="a@x.com", subject="Hi", text="Hello", html="<p>Hello</p>"
            )

        assert result.success is True
        assert result.message_id == "re_123"
        kwargs = post.await_args.kwargs
        assert kwargs["json"]["from"] == "leads@example.com"
        assert kwargs["json"]["to"] == ["a@x.com"]
        assert kwargs["json"]["html"] == "<p>Hello</p>"
        assert kwargs["headers"]["Authorization"] == "Bearer re_test_key"

    @pytest.mark.asyncio
    async def test_provider_error_is_reported(self, client):
        post = AsyncMock(return_value=_response(422, {"message": "Invalid `to` field"}))
        with patch("httpx.AsyncClient.post", new=post):
            result = await client.send(to="bad", subject="s", text="t")

        assert result.success is False
        assert result.error == "Invalid `to` field"

    @pytest.mark.asyncio
    async def test_network_error_is_reported(self, client):
        post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient.post", new=post):
            result = await client.send(to="a@x.com", subject="s", text="t")

        assert result.success is False
        assert "unreachable" in result.error

    @pytest.mark.asyncio
    async def test_timeout_is_reported(self, client):
        post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with patch("httpx.AsyncClient.post", new=post):
            result = await client.send(to="a@x.com", subject="s", text="t")

        assert result.success is False
        assert result.error == "Email provider timed out"

    @pytest.mark.asyncio
    async def test_empty_recipient(self, client):
        result = await client.send(to="", subject="s", text="t")

        assert result.success is False
