import json

import httpx
import pytest
from fastapi.testclient import TestClient

from relay.app import create_app
from relay.settings import Settings


def completion(content):
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


class StubUpstream:
    """Stands in for the chat completion API and records what it was sent."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = completion("e2e4")
        self.error = None
        self.text = None

    def reply(self, content):
        self.status_code = 200
        self.body = completion(content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text, headers={"content-type": "text/html"})
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payload(self):
        return json.loads(self.requests[-1].content)

    @property
    def user_prompt(self):
        return self.payload["messages"][1]["content"]


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def make_client(upstream):
    clients = []

    def _make(**overrides):
        settings = Settings(openai_api_key="test-key", **overrides)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
        client = TestClient(create_app(settings, http_client=http_client))
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
