from __future__ import annotations

from datetime import timedelta

from smartfinance.models.base import utcnow


def _future(days: int = 90) -> str:
    return (utcnow() + timedelta(days=days)).isoformat()


def _create(client, **overrides):
    payload = {
        "title": "New laptop",
        "type": "purchase",
        "targetAmount": 1000,
        "targetDate": _future(),
        "category": "Tech",
        "milestones": [{"amount": 900, "description": "Nearly there"}],
    }
    payload.update(overrides)
    return client.post("/api/goals", json=payload)


def test_create_goal_with_defaults(auth_client):
    response = _create(auth_client)

    assert response.status_code == 201
    goal = response.get_json()["goal"]
    assert goal["priority"] == "medium"
    assert goal["currentAmount"] == 0.0
    assert goal["isCompleted"] is False
    assert goal["progressPercentage"] == 0.0
    assert goal["amountRemaining"] == 1000.0
    assert goal["daysRemaining"] >= 89
    assert goal["milestones"][0]["amount"] == 900.0
    assert goal["milestones"][0]["achieved"] is False
    assert goal["contributions"] == []


def test_create_goal_validation(auth_client):
    missing = auth_client.post("/api/goals", json={"title": "x"})
    assert missing.status_code == 400
    assert missing.get_json()["error"] == (
        "Title, type, target amount, target date, and category are required"
    )
    assert _create(auth_client, targetAmount=0).get_json()["error"] == (
        "Target amount must be greater than 0"
    )
    assert _create(auth_client, targetDate=_future(-1)).get_json()["error"] == (
        "Target date must be in the future"
    )
    assert _create(auth_client, type="lottery").status_code == 400
    assert _create(auth_client, priority="urgent").status_code == 400


def test_contribute_endpoint_tracks_milestones_and_completion(auth_client):
    goal = _create(auth_client).get_json()["goal"]
    url = f"/api/goals/{goal['id']}/contribute"

    first = auth_client.post(url, json={"amount": 950, "source": "Salary"})
    assert first.status_code == 200
    body = first.get_json()
    assert body["message"] == "Contribution added successfully"
    assert body["goal"]["currentAmount"] == 950.0
    assert body["goal"]["milestones"][0]["achieved"] is True
    assert body["contribution"]["source"] == "Salary"
    assert body["contribution"]["description"] == ""
    assert [m["amount"] for m in body["milestonesAchieved"]] == [900.0]

    second = auth_client.post(url, json={"amount": 100, "source": "Bonus", "description": "Q2"})
    assert second.get_json()["message"] == "Goal completed!"
    assert second.get_json()["goal"]["isCompleted"] is True

    rejected = auth_client.post(url, json={"amount": 10, "source": "Cash"})
    assert rejected.status_code == 400
    assert rejected.get_json()["error"] == "Cannot contribute to a completed goal"

    stored = auth_client.get(f"/api/goals/{goal['id']}").get_json()["goal"]
    assert stored["currentAmount"] == 1050.0
    assert len(stored["contributions"]) == 2


def test_contribute_validation_and_missing_goal(auth_client):
    goal = _create(auth_client).get_json()["goal"]
    url = f"/api/goals/{goal['id']}/contribute"

    assert auth_client.post(url, json={"amount": 0, "source": "Cash"}).get_json()["error"] == (
        "Valid contribution amount is required"
    )
    assert auth_client.post(url, json={"amount": 5}).get_json()["error"] == (
        "Contribution source is required"
    )
    assert auth_client.post("/api/goals/9999/contribute", json={"amount": 5, "source": "Cash"}).status_code == 404


def test_list_orders_by_priority_then_target_date(auth_client):
    _create(auth_client, title="Low", priority="low", targetDate=_future(10))
    _create(auth_client, title="High later", priority="high", targetDate=_future(200))
    _create(auth_client, title="High soon", priority="high", targetDate=_future(20))
    _create(auth_client, title="Medium", priority="medium", targetDate=_future(5))

    titles = [g["title"] for g in auth_client.get("/api/goals").get_json()["goals"]]
    assert titles == ["High soon", "High later", "Medium", "Low"]

    high = auth_client.get("/api/goals?priority=high").get_json()["goals"]
    assert len(high) == 2
    assert auth_client.get("/api/goals?isCompleted=true").get_json()["goals"] == []


def test_update_replaces_milestones_and_ignores_progress_fields(auth_client):
    goal = _create(auth_client).get_json()["goal"]

    response = auth_client.put(
        f"/api/goals/{goal['id']}",
        json={
            "title": "Gaming laptop",
            "currentAmount": 5000,
            "milestones": [
                {"amount": 250, "description": "Quarter"},
                {"amount": 500, "description": "Half"},
            ],
            "autoContribution": {"enabled": True, "amount": 50, "frequency": "weekly", "source": "Salary"},
        },
    )

    assert response.status_code == 200
    updated = response.get_json()["goal"]
    assert updated["title"] == "Gaming laptop"
    assert updated["currentAmount"] == 0.0
    assert [m["description"] for m in updated["milestones"]] == ["Quarter", "Half"]
    assert updated["autoContribution"]["frequency"] == "weekly"


def test_delete_goal(auth_client):
    goal = _create(auth_client).get_json()["goal"]

    assert auth_client.delete(f"/api/goals/{goal['id']}").status_code == 200
    assert auth_client.get(f"/api/goals/{goal['id']}").status_code == 404
