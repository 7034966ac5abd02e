import json

import pytest
from fastapi.testclient import TestClient

from design_review.llm.errors import TransportError, TransportErrorKind


@pytest.fixture
def make_client(fast_policy):
    from design_review.api import create_app

    def _factory(gateway):
        return TestClient(create_app(gateway=gateway, policy=fast_policy))

    return _factory


def test_health(make_client, scripted_gateway):
    client = make_client(scripted_gateway("unused"))

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_review_without_file_uses_defaults(
    make_client, scripted_gateway, valid_review, valid_review_json
):
    gateway = scripted_gateway("Sure! " + valid_review_json)
    client = make_client(gateway)

    resp = client.post("/review", data={"prompt": "Evaluate login form accessibility"})

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "result": valid_review}
    assert '"no-file" (unknown)' in gateway.prompts[0]


def test_review_with_file_passes_name_and_type(
    make_client, scripted_gateway, valid_review_json
):
    gateway = scripted_gateway(valid_review_json)
    client = make_client(gateway)

    resp = client.post(
        "/review",
        data={"prompt": "Check contrast"},
        files={"file": ("login.png", b"\x89PNG...", "image/png")},
    )

    assert resp.status_code == 200
    assert '"login.png" (image/png)' in gateway.prompts[0]


def test_review_rejects_oversized_upload(monkeypatch, make_client, scripted_gateway):
    monkeypatch.setattr("design_review.config.MAX_UPLOAD_BYTES", 4)
    gateway = scripted_gateway("unused")
    client = make_client(gateway)

    resp = client.post(
        "/review",
        data={"prompt": "Check contrast"},
        files={"file": ("big.png", b"0123456789", "image/png")},
    )

    assert resp.status_code == 413
    assert resp.json()["ok"] is False
    assert gateway.calls == 0


def test_review_empty_prompt_is_bad_request(make_client, scripted_gateway):
    gateway = scripted_gateway("unused")
    client = make_client(gateway)

    resp = client.post("/review", data={"prompt": ""})

    assert resp.status_code == 400
    assert resp.json()["error"]["kind"] == "InvalidRequest"
    assert gateway.calls == 0


@pytest.mark.parametrize(
    "outcome, status, kind",
    [
        (TransportError(TransportErrorKind.AUTH, "bad key"), 502, "TransportError.Auth"),
        (
            TransportError(TransportErrorKind.RATE_LIMITED, "slow down"),
            429,
            "TransportError.RateLimited",
        ),
        ("no json here", 422, "NoStructuredPayload"),
    ],
)
def test_review_failures_map_to_status_codes(
    make_client, scripted_gateway, outcome, status, kind
):
    client = make_client(scripted_gateway(outcome))

    resp = client.post("/review", data={"prompt": "brief"})

    assert resp.status_code == status
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["kind"] == kind
    assert body["error"]["message"]
    assert body["error"]["retryable_by_caller"] is (kind != "TransportError.Auth")


def test_review_schema_violation_includes_details(
    make_client, scripted_gateway, valid_review
):
    valid_review["priority_fixes"] = ["a", "b"]
    client = make_client(scripted_gateway(json.dumps(valid_review)))

    resp = client.post("/review", data={"prompt": "brief"})

    assert resp.status_code == 422
    [violation] = resp.json()["error"]["details"]["violations"]
    assert violation["field"] == "priority_fixes"
