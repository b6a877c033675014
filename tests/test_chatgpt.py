import json

import httpx
import pytest
import respx

from llmclient.chatgpt import BASE_URL, Chat, ChatGpt, Role, openai_body


def test_openai_body():
    body = openai_body("gpt-4o-mini", [Chat(Role.USER, "Hi"), Chat(Role.ASSISTANT, "Hello")])
    assert body == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
        ],
    }


def test_developer_role_value():
    assert Chat(Role.DEVELOPER, "be brief").to_dict() == {
        "role": "developer",
        "content": "be brief",
    }


@pytest.mark.asyncio
async def test_it_works():
    with respx.mock:
        route = respx.post(BASE_URL).mock(
            return_value=httpx.Response(
                200, json={"choices": [{"message": {"content": "Hello!"}}]}
            )
        )
        data = await ChatGpt("token", "gpt-4o-mini").ask_string("Hi")

    assert data == '"Hello!"'
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer token"
    assert json.loads(request.content) == {
        "model": "gpt-4o-mini",
        "messages": [{"role": "user", "content": "Hi"}],
    }


@pytest.mark.asyncio
async def test_missing_content_is_null():
    with respx.mock:
        respx.post(BASE_URL).mock(return_value=httpx.Response(200, json={"choices": []}))
        data = await ChatGpt("token", "gpt-4o-mini").ask_string("Hi")
    assert data == "null"


@pytest.mark.asyncio
async def test_non_ascii_content_kept():
    with respx.mock:
        respx.post(BASE_URL).mock(
            return_value=httpx.Response(
                200, json={"choices": [{"message": {"content": "héllo\n"}}]}
            )
        )
        data = await ChatGpt("token", "gpt-4o-mini").ask_string("Hi")
    assert data == '"héllo\\n"'


@pytest.mark.asyncio
async def test_invalid_json_reply_raises():
    with respx.mock:
        respx.post(BASE_URL).mock(return_value=httpx.Response(200, text="not json"))
        with pytest.raises(ValueError):
            await ChatGpt("token", "gpt-4o-mini").ask_string("Hi")