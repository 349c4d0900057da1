import re

import pytest
from fastapi.testclient import TestClient

from main import app

DETAIL_ANSWERS = (
    "dashboard with regional sales",
    "CRM and billing",
    "Regional managers",
    "Every Monday",
)


@pytest.fixture
def client():
    # Entering the client runs the lifespan, which creates fresh in-memory stores.
    with TestClient(app) as test_client:
        yield test_client


def _walk_to_confirmation(client, request_type="reporting"):
    response = client.post(
        "/api/conversation/start",
        json={"userId": "u-42", "userName": "Dana"},
    )
    assert response.status_code == 200
    conversation_id = response.json()["conversationId"]

    response = client.post(
        "/api/conversation/select-type",
        json={"conversationId": conversation_id, "requestType": request_type},
    )
    assert response.status_code == 200

    for answer in DETAIL_ANSWERS:
        response = client.post(
            "/api/conversation/respond",
            json={"conversationId": conversation_id, "response": answer},
        )
        assert response.status_code == 200
    assert response.json()["currentStep"] == "impact_timeline"

    response = client.post(
        "/api/conversation/impact-timeline",
        json={
            "conversationId": conversation_id,
            "responses": {
                "impact": "Regional dashboard stale",
                "timeline": "Needed soon",
                "frequency": "Ongoing",
            },
        },
    )
    assert response.status_code == 200
    return conversation_id, response.json()


def _create_ticket(client):
    conversation_id, _ = _walk_to_confirmation(client)
    response = client.post(
        "/api/conversation/confirm",
        json={"conversationId": conversation_id, "confirmed": True},
    )
    assert response.status_code == 200
    return conversation_id, response.json()


def test_root_and_health(client):
    assert client.get("/").json()["service"] == "BI Triage Agent"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["checks"]["storage_backend"] == "memory"


def test_start_returns_catalog(client):
    response = client.post(
        "/api/conversation/start",
        json={"userId": "u-42", "userName": "Dana"},
    )

    data = response.json()
    assert data["currentStep"] == "request_type_selection"
    assert [t["id"] for t in data["requestTypes"]] == [
        "troubleshooting", "reporting", "automation", "access", "tools"
    ]
    assert "X-Correlation-ID" in response.headers


def test_first_question_after_type_selection(client):
    conversation_id = client.post(
        "/api/conversation/start",
        json={"userId": "u-42", "userName": "Dana"},
    ).json()["conversationId"]

    response = client.post(
        "/api/conversation/select-type",
        json={"conversationId": conversation_id, "requestType": "automation"},
    )

    data = response.json()
    assert data["currentStep"] == "collecting_details"
    assert data["question"] == "What process would you like to automate?"
    assert data["questionIndex"] == 0
    assert data["totalQuestions"] == 4


def test_classified_summary_and_suggestions(client):
    _, data = _walk_to_confirmation(client)

    assert data["currentStep"] == "confirmation"
    summary = data["summary"]
    assert summary["requestType"] == "Reporting/Dashboard"
    assert summary["priority"] == "P1"
    assert summary["difficulty"] == "Medium"
    assert summary["summary"].startswith("Reporting/Dashboard request: No description provided.")
    assert "Refreshing a Power BI dashboard" in [s["title"] for s in data["suggestions"]]


def test_impact_timeline_accepts_empty_answers(client):
    conversation_id = client.post(
        "/api/conversation/start",
        json={"userId": "u-42", "userName": "Dana"},
    ).json()["conversationId"]
    client.post(
        "/api/conversation/select-type",
        json={"conversationId": conversation_id, "requestType": "access"},
    )
    for answer in DETAIL_ANSWERS:
        client.post(
            "/api/conversation/respond",
            json={"conversationId": conversation_id, "response": answer},
        )

    response = client.post(
        "/api/conversation/impact-timeline",
        json={"conversationId": conversation_id, "responses": {}},
    )

    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["summary"] == (
        "User Access request: No description provided. "
        "Impact: Not specified. "
        "Timeline: Not specified. "
        "Requirements: None specified."
    )


def test_full_flow_creates_ticket(client):
    _, data = _create_ticket(client)

    assert data["currentStep"] == "completed"
    ticket_number = data["ticket"]["ticketNumber"]
    assert re.match(r"^BI-\d{6}$", ticket_number)
    assert data["ticket"]["status"] == "New"
    assert data["duplicates"] == 0

    response = client.get(f"/api/ticket/{ticket_number}")
    assert response.status_code == 200
    ticket = response.json()
    assert ticket["status"] == "New"
    assert ticket["priority"] == "P1"
    assert ticket["requestType"] == "Reporting/Dashboard"

    listed = client.get("/api/admin/tickets").json()
    assert [t["ticketNumber"] for t in listed] == [ticket_number]
    assert listed[0]["requesterName"] == "Dana"


def test_second_confirmation_is_conflict(client):
    conversation_id, _ = _create_ticket(client)

    response = client.post(
        "/api/conversation/confirm",
        json={"conversationId": conversation_id, "confirmed": True},
    )

    assert response.status_code == 409
    assert response.json()["type"] == "InvalidStateTransitionException"
    assert len(client.get("/api/admin/tickets").json()) == 1


def test_similar_request_is_flagged(client):
    _create_ticket(client)
    _, data = _create_ticket(client)

    assert data["duplicates"] == 1
    assert "similar ticket(s)" in data["message"]


def test_reject_offers_restart(client):
    conversation_id, _ = _walk_to_confirmation(client)

    response = client.post(
        "/api/conversation/confirm",
        json={"conversationId": conversation_id, "confirmed": False},
    )

    assert response.status_code == 200
    assert response.json()["currentStep"] == "restart_option"
    assert client.get("/api/admin/tickets").json() == []


def test_error_statuses(client):
    response = client.post(
        "/api/conversation/select-type",
        json={"conversationId": "missing", "requestType": "reporting"},
    )
    assert response.status_code == 404
    assert response.json()["type"] == "ConversationNotFoundException"

    conversation_id = client.post(
        "/api/conversation/start",
        json={"userId": "u-42", "userName": "Dana"},
    ).json()["conversationId"]

    response = client.post(
        "/api/conversation/select-type",
        json={"conversationId": conversation_id, "requestType": "payroll"},
    )
    assert response.status_code == 422
    assert response.json()["type"] == "ValidationException"

    response = client.post(
        "/api/conversation/respond",
        json={"conversationId": conversation_id, "response": "too early"},
    )
    assert response.status_code == 409

    assert client.get("/api/ticket/BI-000000").status_code == 404


def test_admin_update_keeps_omitted_fields(client):
    _create_ticket(client)
    ticket_id = client.get("/api/admin/tickets").json()[0]["id"]

    response = client.put(
        f"/api/admin/ticket/{ticket_id}",
        json={"status": "In Progress", "ticketOwner": "Priya", "estimatedStartDate": "2024-06-03"},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Ticket updated successfully"

    response = client.put(
        f"/api/admin/ticket/{ticket_id}",
        json={"estimatedEndDate": "2024-06-14", "ticketOwner": None},
    )
    ticket = response.json()["ticket"]
    assert ticket["status"] == "In Progress"
    assert ticket["ticketOwner"] == "Priya"
    assert ticket["estimatedStartDate"] == "2024-06-03"
    assert ticket["estimatedEndDate"] == "2024-06-14"


def test_admin_update_rejects_unknown_status_and_ticket(client):
    _create_ticket(client)
    ticket_id = client.get("/api/admin/tickets").json()[0]["id"]

    assert client.put(f"/api/admin/ticket/{ticket_id}", json={"status": "Done"}).status_code == 422
    assert client.put("/api/admin/ticket/nope", json={"status": "Closed"}).status_code == 404


def test_admin_stats(client):
    _create_ticket(client)
    _create_ticket(client)
    ticket_id = client.get("/api/admin/tickets").json()[0]["id"]
    client.put(f"/api/admin/ticket/{ticket_id}", json={"status": "Closed"})

    stats = client.get("/api/admin/stats").json()

    assert stats == {
        "total": 2,
        "new": 1,
        "inProgress": 0,
        "completed": 1,
        "highPriority": 2,
    }
