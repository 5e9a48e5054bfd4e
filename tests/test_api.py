"""
Tests for the HTTP API using FastAPI's TestClient.
"""
import pytest
import requests
from fastapi.testclient import TestClient

from app import api

AUTH = {"Authorization": "Bearer token-123"}

BODY = {
    "text": "cà phê 50k tiền mặt",
    "incomeCategories": ["Lương"],
    "expenseCategories": ["Ăn uống"],
    "accounts": ["Cash"],
}


@pytest.fixture
def client():
    return TestClient(api.app)


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_parse_note_success(client, identity, provider):
    provider.respond({"transactions": [
        {"amount": "50000", "type": "Chi", "category": "Ăn uống", "account": "Cash", "description": "Cà phê"},
        {"amount": "0"},
        {"amount": 12.5, "type": "Transfer", "account": "Cash", "toAccount": "Bank", "datetime": "2024-05-01"},
    ]})

    response = client.post("/parse-note", json=BODY, headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "transactions": [
            {
                "type": "expense",
                "amount": 50000,
                "category": "Ăn uống",
                "account": "Cash",
                "description": "Cà phê",
                "datetime": None,
                "toAccount": None,
            },
            {
                "type": "transfer",
                "amount": 12.5,
                "category": "Khác",
                "account": "Cash",
                "description": "",
                "datetime": "2024-05-01",
                "toAccount": "Bank",
            },
        ],
        "raw_text": "cà phê 50k tiền mặt",
    }


def test_missing_credential_is_401_before_provider_call(client, identity, provider):
    response = client.post("/parse-note", json=BODY)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert identity.calls == []
    assert provider.calls == []


def test_rejected_credential_is_401(client, identity, provider):
    identity.respond({"msg": "bad jwt"}, status_code=403)

    response = client.post("/parse-note", json=BODY, headers=AUTH)

    assert response.status_code == 401
    assert provider.calls == []


def test_blank_text_is_400(client, identity, provider):
    response = client.post("/parse-note", json={**BODY, "text": "  "}, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"error": "Text is required"}
    assert provider.calls == []


@pytest.mark.parametrize("body", [{"text": 42}, {"text": "x", "accounts": "Cash"}, ["text"]])
def test_malformed_body_is_400(client, identity, provider, body):
    response = client.post("/parse-note", json=body, headers=AUTH)

    assert response.status_code == 400
    assert "error" in response.json()


def test_invalid_json_is_400(client, identity, provider):
    response = client.post(
        "/parse-note",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )

    assert response.status_code == 400


def test_null_hint_lists_are_accepted(client, identity, provider):
    response = client.post(
        "/parse-note",
        json={"text": "ăn trưa 40k", "incomeCategories": None, "accounts": None},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert provider.calls[0]["json"]["accounts"] == []


def test_provider_error_is_502(client, identity, provider):
    provider.respond(status_code=500, text="internal")

    response = client.post("/parse-note", json=BODY, headers=AUTH)

    assert response.status_code == 502
    assert response.json() == {"error": "AI error: 500"}


def test_provider_timeout_is_504(client, identity, provider):
    provider.fail(requests.exceptions.Timeout())

    response = client.post("/parse-note", json=BODY, headers=AUTH)

    assert response.status_code == 504
    assert response.json() == {"error": "AI timeout - vui lòng thử lại"}


def test_unexpected_error_is_500(client, identity, monkeypatch):
    def explode(request):
        raise RuntimeError("boom")

    monkeypatch.setattr(api.note_service, "parse", explode)

    response = client.post("/parse-note", json=BODY, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"error": "boom"}


def test_cors_preflight(client):
    response = client.options(
        "/parse-note",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_failure_while_building_response_is_json_500(identity, provider, monkeypatch):
    def explode(result):
        raise RuntimeError("cannot render")

    monkeypatch.setattr(api.ParseNoteResponse, "from_result", explode)
    client = TestClient(api.app, raise_server_exceptions=False)

    response = client.post("/parse-note", json=BODY, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"error": "cannot render"}
