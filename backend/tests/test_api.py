"""HTTP surface"""

import pytest
from fastapi.testclient import TestClient

from flowintent.agents.chat.intent_classifier import IntentClassifier, get_intent_classifier
from flowintent.agents.chat.prompts import INTENT_PROMPT_ADDENDA
from flowintent.agents.chat.router.intent_tool_router import IntentToolRouter
from flowintent.agents.chat.router.rule_router import AgentRouter
from flowintent.agents.shared.errors import ProviderError
from flowintent.api.server import app, get_tool_registry
from flowintent.services.ab_testing import ABTestService, get_ab_testing_service

from tests.fakes import FakeLLM, classification_json

USER = {"X-User-Id": "user-1"}


@pytest.fixture
def ab_service():
    return ABTestService(llm=FakeLLM(error=ProviderError("offline")))


@pytest.fixture
def client(ab_service, tool_registry):
    classifier = IntentClassifier(
        tool_router=IntentToolRouter(llm=FakeLLM(classification_json())),
        agent_router=AgentRouter()
    )

    app.dependency_overrides[get_intent_classifier] = lambda: classifier
    app.dependency_overrides[get_ab_testing_service] = lambda: ab_service
    app.dependency_overrides[get_tool_registry] = lambda: tool_registry

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def create_test(client, **overrides):
    body = {
        "action": "create",
        "name": "Homepage headline",
        "original_content": "Rank higher",
        "variations": ["Rank higher, faster"],
    }
    body.update(overrides)
    response = client.post("/v1/ab-testing", json=body, headers=USER)
    assert response.status_code == 200
    return response.json()["test"]


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "operational"
    assert client.get("/health").json()["status"] == "healthy"


def test_list_agents(client):
    agents = client.get("/v1/agents").json()["agents"]

    assert {a["id"] for a in agents} == {"onboarding", "seo-aeo", "content", "general"}


def test_classify_uses_llm_classification(client):
    response = client.post("/v1/chat/classify", json={"query": "show backlinks for example.com"})

    assert response.status_code == 200
    body = response.json()
    assert body["agent"] == "seo-aeo"
    assert body["confidence"] == 0.92
    assert body["tools"][0] == "n8n_backlinks"
    assert body["all_intents"] == ["backlinks", "domain_metrics"]
    assert body["classification"]["primary_intent"] == "backlinks"
    assert body["system_prompt"].endswith(INTENT_PROMPT_ADDENDA["backlinks"])


def test_classify_onboarding_context(client):
    response = client.post("/v1/chat/classify", json={
        "query": "hi",
        "context": {"page": "onboarding", "onboarding": {"currentStep": 2, "data": {}}},
    })

    body = response.json()
    assert body["agent"] == "onboarding"
    assert body["confidence"] == 1.0
    assert body["classification"] is None
    assert "Current onboarding step: 2 of 6" in body["system_prompt"]


def test_classify_rejects_empty_query(client):
    assert client.post("/v1/chat/classify", json={"query": ""}).status_code == 422


def test_assemble_tools(client):
    body = client.post("/v1/chat/tools", json={"agent": "seo-aeo"}).json()

    assert set(body["tools"]) == {"suggest_keywords", "n8n_backlinks"}
    assert body["count"] == 2


def test_ab_testing_requires_user(client):
    response = client.post("/v1/ab-testing", json={"action": "create"})

    assert response.status_code == 401


def test_ab_testing_flow(client):
    test = create_test(client)
    test_id = test["id"]
    assert test["status"] == "draft"
    assert [v["id"] for v in test["variants"]] == ["control", "variant_1"]

    draft_variant = client.post(
        "/v1/ab-testing", json={"action": "get_variant", "test_id": test_id}, headers=USER
    ).json()
    assert draft_variant["variant"] is None

    started = client.post("/v1/ab-testing", json={"action": "start", "test_id": test_id}, headers=USER)
    assert started.json()["test"]["status"] == "active"

    variant = client.post(
        "/v1/ab-testing", json={"action": "get_variant", "test_id": test_id}, headers=USER
    ).json()["variant"]
    assert variant["id"] in {"control", "variant_1"}

    for action in ("record_impression", "record_click"):
        response = client.post(
            "/v1/ab-testing",
            json={"action": action, "test_id": test_id, "variant_id": variant["id"]},
            headers=USER
        )
        assert response.json() == {"success": True}

    insights = client.get(f"/v1/ab-testing/{test_id}/insights", headers=USER).json()["insights"]
    assert insights["variants"][variant["id"]]["clicks"] == 1

    completed = client.post("/v1/ab-testing", json={"action": "complete", "test_id": test_id}, headers=USER)
    assert completed.json()["test"]["status"] == "completed"


def test_list_ab_tests(client):
    create_test(client, name="First")
    create_test(client, name="Second")

    tests = client.get("/v1/ab-testing", headers=USER).json()["tests"]
    assert {t["name"] for t in tests} == {"First", "Second"}

    assert client.get("/v1/ab-testing?status=active", headers=USER).json()["tests"] == []
    assert client.get("/v1/ab-testing?status=bogus", headers=USER).status_code == 422


def test_invalid_action(client):
    response = client.post("/v1/ab-testing", json={"action": "delete", "test_id": "x"}, headers=USER)

    assert response.status_code == 400


def test_create_requires_name(client):
    response = client.post(
        "/v1/ab-testing", json={"action": "create", "original_content": "Rank higher"}, headers=USER
    )

    assert response.status_code == 400


def test_unknown_test_maps_to_404(client):
    response = client.post("/v1/ab-testing", json={"action": "start", "test_id": "missing"}, headers=USER)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "AB_TEST_NOT_FOUND"


def test_invalid_transition_maps_to_409(client):
    test = create_test(client)

    response = client.post("/v1/ab-testing", json={"action": "pause", "test_id": test["id"]}, headers=USER)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


def test_tracking_draft_test_maps_to_409(client):
    test = create_test(client)

    response = client.post(
        "/v1/ab-testing",
        json={"action": "record_impression", "test_id": test["id"], "variant_id": "control"},
        headers=USER
    )

    assert response.status_code == 409


def test_other_users_test_is_hidden(client):
    test = create_test(client)

    response = client.get(f"/v1/ab-testing/{test['id']}/insights", headers={"X-User-Id": "user-2"})

    assert response.status_code == 404


def test_raw_insights(client):
    response = client.post("/v1/ab-testing/insights", json={
        "variant_results": {
            "A": {"impressions": 1000, "clicks": 20},
            "B": {"impressions": 1000, "clicks": 80},
        },
    })

    insights = response.json()["insights"]
    assert insights["is_significant"] is True
    assert insights["best_variant"] == "B"


def test_raw_insights_rejects_negative_counts(client):
    response = client.post("/v1/ab-testing/insights", json={
        "variant_results": {"A": {"impressions": -1, "clicks": 0}},
    })

    assert response.status_code == 422


def test_raw_insights_rejects_more_clicks_than_impressions(client):
    response = client.post("/v1/ab-testing/insights", json={
        "variant_results": {
            "A": {"impressions": 1, "clicks": 2},
            "B": {"impressions": 1, "clicks": 0},
        },
    })

    assert response.status_code == 422


def test_stored_insights_with_more_clicks_than_impressions(client, ab_service):
    test_id = create_test(client)["id"]
    ab_service.start_test(test_id, "user-1")
    ab_service.record_impression(test_id, "control")
    ab_service.record_click(test_id, "control")
    ab_service.record_click(test_id, "control")
    ab_service.record_impression(test_id, "variant_1")

    response = client.get(f"/v1/ab-testing/{test_id}/insights", headers=USER)

    assert response.status_code == 200
    assert response.json()["insights"]["variants"]["control"]["ctr"] == 1.0

    completed = client.post("/v1/ab-testing", json={"action": "complete", "test_id": test_id}, headers=USER)
    assert completed.status_code == 200
    assert completed.json()["test"]["status"] == "completed"
