import json
from types import SimpleNamespace

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from services import ark_client
from services.gateway import MISSING_KEY_MESSAGE, AnalysisGateway, GatewayError


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(role="assistant", content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(content=None, error=None):
    completions = FakeCompletions(content=content, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def _images(n):
    return [f"data:image/jpeg;base64,{i:04d}" for i in range(n)]


def _client(settings=None, content=None, error=None):
    settings = settings or Settings(api_key="test-key")
    fake, completions = _fake_client(content=content, error=error)
    app = create_app(settings, AnalysisGateway(settings, client=fake))
    return TestClient(app), completions


def test_health():
    client, _ = _client()
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_two_images_is_a_client_error():
    client, completions = _client(content="{}")
    r = client.post("/api/analyze", json={"images": _images(2)})
    assert r.status_code == 400
    assert r.json() == {"error": "Please upload at least 3 images for analysis"}
    assert completions.calls == []


def test_missing_images_or_bad_body_is_a_client_error():
    client, _ = _client(content="{}")
    assert client.post("/api/analyze", json={}).status_code == 400
    assert client.post("/api/analyze", json={"images": "nope"}).status_code == 400
    r = client.post("/api/analyze", content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 400


@pytest.mark.parametrize("body", [{"images": _images(2)}, {"images": _images(5)}, {}])
def test_missing_credential_is_a_server_error(body):
    client, completions = _client(settings=Settings(api_key=""), content="{}")
    r = client.post("/api/analyze", json=body)
    assert r.status_code == 500
    assert r.json() == {"error": MISSING_KEY_MESSAGE}
    assert completions.calls == []


@pytest.mark.parametrize("count", [3, 5, 8])
def test_three_to_eight_images_proceed(count):
    client, completions = _client(content='{"raw_text":"ok","structured":{}}')
    r = client.post("/api/analyze", json={"images": _images(count)})
    assert r.status_code == 200
    assert len(completions.calls) == 1


def test_twenty_images_are_truncated_to_eight():
    client, completions = _client(content="plain text")
    images = _images(20)
    r = client.post("/api/analyze", json={"images": images})
    assert r.status_code == 200

    call = completions.calls[0]
    assert call["model"] == "doubao-seed-2-0-pro-260215"
    assert call["reasoning_effort"] == "medium"
    system, user = call["messages"]
    assert system["role"] == "system"
    parts = user["content"]
    assert [p["image_url"]["url"] for p in parts[:-1]] == images[:8]
    assert parts[-1]["type"] == "text"
    assert "raw_text" in parts[-1]["text"]


def test_five_images_strict_json_end_to_end(structured):
    content = json.dumps({"raw_text": "A long narrative.", "structured": structured})
    client, _ = _client(content=content)

    r = client.post("/api/analyze", json={"images": _images(5)})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["raw"] == "A long narrative."
    assert set(body["data"]) == {"personality", "interests", "lifestyle", "values", "emotion", "suggestions"}
    assert body["data"] == structured


def test_non_json_reply_is_narrative_only():
    client, _ = _client(content=["Sorry,", "I can only describe it."])
    body = client.post("/api/analyze", json={"images": _images(3)}).json()
    assert body == {"success": True, "raw": "Sorry,\nI can only describe it.", "data": None}


def test_upstream_status_error_message_is_surfaced():
    request = httpx.Request("POST", "https://ark.example/api/v3/chat/completions")
    response = httpx.Response(429, request=request)
    err = openai.APIStatusError("rate limited", response=response, body={"message": "Quota exceeded"})
    client, _ = _client(error=err)

    r = client.post("/api/analyze", json={"images": _images(3)})

    assert r.status_code == 500
    assert r.json() == {"error": "Quota exceeded"}


def test_nested_upstream_error_and_generic_fallback():
    class NestedError(Exception):
        body = {"error": {"message": "InvalidParameter: image too large"}}

    assert ark_client.upstream_error_message(NestedError("x")) == "InvalidParameter: image too large"
    assert ark_client.upstream_error_message(RuntimeError("boom")) == "Analysis failed: boom"
    assert ark_client.upstream_error_message(RuntimeError()) == "Analysis failed: unknown error"


def test_generic_upstream_failure_is_not_retried():
    client, completions = _client(error=RuntimeError("connection reset"))
    r = client.post("/api/analyze", json={"images": _images(4)})
    assert r.status_code == 500
    assert r.json() == {"error": "Analysis failed: connection reset"}
    assert len(completions.calls) == 1


def test_body_over_ceiling_is_rejected():
    client, completions = _client(settings=Settings(api_key="k", max_body_mb=0), content="{}")
    r = client.post("/api/analyze", json={"images": _images(3)})
    assert r.status_code == 413
    assert "error" in r.json()
    assert completions.calls == []


def test_gateway_raises_typed_errors_directly():
    gw = AnalysisGateway(Settings(api_key="k", min_images=3), client=_fake_client(content="{}")[0])
    with pytest.raises(GatewayError) as ei:
        gw.analyze(_images(1))
    assert ei.value.status_code == 400


def test_make_client_disables_sdk_retries():
    client = ark_client.make_client(Settings(api_key="k", base_url="https://ark.example/api/v3"))
    assert client.max_retries == 0
    assert str(client.base_url).startswith("https://ark.example/api/v3")


def test_chunked_body_over_ceiling_is_rejected_while_reading():
    client, completions = _client(settings=Settings(api_key="k", max_body_mb=0), content="{}")
    body = json.dumps({"images": _images(3)}).encode()
    r = client.post(
        "/api/analyze",
        content=iter([body[:10], body[10:]]),
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 413
    assert r.json() == {"error": "Request body exceeds 0MB"}
    assert completions.calls == []


def test_chunked_body_under_ceiling_is_analyzed():
    client, completions = _client(content="plain text")
    body = json.dumps({"images": _images(3)}).encode()
    r = client.post("/api/analyze", content=iter([body]), headers={"content-type": "application/json"})
    assert r.status_code == 200
    assert len(completions.calls) == 1


def test_error_responses_are_documented():
    client, _ = _client()
    responses = client.get("/openapi.json").json()["paths"]["/api/analyze"]["post"]["responses"]
    for status in ("400", "413", "500"):
        ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")


def test_cors_headers_on_success_and_rejection():
    origin = {"Origin": "http://localhost:5173"}
    client, _ = _client(content="plain text")
    ok = client.get("/health", headers=origin)
    assert ok.headers["access-control-allow-origin"] == "*"

    client, _ = _client(settings=Settings(api_key="k", max_body_mb=0), content="{}")
    rejected = client.post("/api/analyze", json={"images": _images(3)}, headers=origin)
    assert rejected.status_code == 413
    assert rejected.headers["access-control-allow-origin"] == "*"
