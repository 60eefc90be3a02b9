import json

import httpx
import pytest

from supplier_auth.integrations.whatsapp_notifier import WhatsAppNotifier


def make_notifier(handler, **overrides):
    params = {
        "api_url": "https://graph.example.test/v19.0/",
        "access_token": "wa-token",
        "phone_number_id": "1234567890",
        "timeout": 5,
    }
    params.update(overrides)
    return WhatsAppNotifier(transport=httpx.MockTransport(handler), **params)


@pytest.mark.asyncio
async def test_send_posts_text_message():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    notifier = make_notifier(handler)
    result = await notifier.send("+6281234567890", "Your code is 482913")
    await notifier.close()

    assert result.ok is True
    assert seen["url"] == "https://graph.example.test/v19.0/1234567890/messages"
    assert seen["auth"] == "Bearer wa-token"
    assert seen["body"] == {
        "messaging_product": "whatsapp",
        "to": "6281234567890",
        "type": "text",
        "text": {"body": "Your code is 482913"},
    }


@pytest.mark.asyncio
async def test_non_2xx_is_reported_not_raised():
    notifier = make_notifier(lambda request: httpx.Response(401, json={"error": {"message": "bad token"}}))
    result = await notifier.send("+6281234567890", "hello")
    await notifier.close()

    assert result.ok is False
    assert result.detail == "HTTP 401"


@pytest.mark.asyncio
async def test_transport_error_is_reported_not_raised():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    notifier = make_notifier(handler)
    result = await notifier.send("+6281234567890", "hello")
    await notifier.close()

    assert result.ok is False
    assert "transport error" in result.detail


@pytest.mark.asyncio
async def test_missing_configuration_skips_the_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    notifier = make_notifier(handler, access_token="", phone_number_id="")
    result = await notifier.send("+6281234567890", "hello")
    await notifier.close()

    assert result.ok is False
    assert calls == []
