from types import SimpleNamespace

import pytest

from app.domain.quality_control.scoring import compute_score, suggest_status


def item(status, weight=1, is_required=True):
    return SimpleNamespace(status=status, weight=weight, is_required=is_required)


def defect(severity="minor", status="open"):
    return SimpleNamespace(severity=severity, status=status)


@pytest.fixture
def check(client, make_order):
    """A check with one required and one optional item."""
    order = make_order(order_number="LV240307-001", status="IN_PRODUCTION")
    response = client.post(
        "/api/quality-control/checks",
        json={
            "order_id": order.id,
            "product_name": "Camiseta personalizada",
            "inspector": "Marta",
            "items": [
                {"description": "Print aligned", "is_required": True, "weight": 3},
                {"description": "Seams finished", "is_required": False, "weight": 1},
            ],
        },
    )
    assert response.status_code == 201
    return response.json()


def evaluate(client, check, *statuses):
    data = check
    for checklist_item, status in zip(check["items"], statuses):
        data = client.patch(
            f"/api/quality-control/checks/{check['id']}/items/{checklist_item['id']}",
            json={"status": status},
        ).json()
    return data


def test_compute_score_is_weighted():
    assert compute_score([item("passed", 3), item("failed", 1)]) == 75
    assert compute_score([item("passed"), item("not_applicable")]) == 100
    assert compute_score([item("pending")]) == 0


def test_suggest_status():
    assert suggest_status([], []) == "pending"
    assert suggest_status([item("pending"), item("passed")], []) == "in_progress"
    assert suggest_status([item("passed"), item("failed", is_required=True)], []) == "rejected"
    assert suggest_status([item("passed"), item("failed", is_required=False)], []) == "needs_review"
    assert suggest_status([item("passed")], [defect("critical")]) == "rejected"
    assert suggest_status([item("passed")], [defect("minor")]) == "needs_review"
    assert suggest_status([item("passed")], [defect("critical", "resolved")]) == "approved"


def test_create_check_from_order(check):
    assert check["order_number"] == "LV240307-001"
    assert check["customer"] == "Guest"
    assert check["status"] == "pending"
    assert [i["status"] for i in check["items"]] == ["pending", "pending"]


def test_create_check_requires_items_or_template(client):
    response = client.post(
        "/api/quality-control/checks",
        json={"order_number": "LV1", "product_name": "Taza"},
    )

    assert response.status_code == 422


def test_create_check_from_default_template(client):
    templates = client.get("/api/quality-control/templates").json()
    general = next(t for t in templates if t["category"] == "General")

    response = client.post(
        "/api/quality-control/checks",
        json={"order_number": "LV1", "product_name": "Taza", "template_id": general["id"]},
    )

    assert response.status_code == 201
    assert response.json()["category"] == "General"
    assert len(response.json()["items"]) == 3


def test_item_updates_score_and_status(client, check):
    data = evaluate(client, check, "passed", "failed")

    assert data["overall_score"] == 75
    assert data["status"] == "needs_review"


def test_failed_required_item_rejects(client, check):
    data = evaluate(client, check, "failed", "passed")

    assert data["status"] == "rejected"
    response = client.post(
        f"/api/quality-control/checks/{check['id']}/approve", json={"approved_by": "Marta"}
    )
    assert response.status_code == 400


def test_approve_requires_evaluated_items(client, check):
    response = client.post(
        f"/api/quality-control/checks/{check['id']}/approve", json={"approved_by": "Marta"}
    )

    assert response.status_code == 400


def test_approve_check(client, check):
    evaluate(client, check, "passed", "passed")

    response = client.post(
        f"/api/quality-control/checks/{check['id']}/approve",
        json={"approved_by": "Marta", "comments": "Perfect"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "approved"
    assert data["approved_by"] == "Marta"
    assert data["overall_score"] == 100


def test_status_cannot_be_set_to_approved_directly(client, check):
    response = client.patch(
        f"/api/quality-control/checks/{check['id']}", json={"status": "approved"}
    )

    assert response.status_code == 400


def test_defect_on_approved_check_reopens_review(client, check):
    evaluate(client, check, "passed", "passed")
    client.post(f"/api/quality-control/checks/{check['id']}/approve", json={"approved_by": "Marta"})

    data = client.post(
        f"/api/quality-control/checks/{check['id']}/defects",
        json={"type": "Stain", "severity": "critical"},
    ).json()

    assert data["status"] == "rejected"
    assert data["approved_by"] is None

    resolved = client.patch(
        f"/api/quality-control/checks/{check['id']}/defects/{data['defects'][0]['id']}",
        json={"status": "resolved"},
    ).json()
    assert resolved["status"] == "approved"
    assert resolved["suggested_status"] == "approved"


def test_quality_stats(client, check):
    evaluate(client, check, "passed", "failed")
    client.post(
        f"/api/quality-control/checks/{check['id']}/defects",
        json={"type": "Loose thread"},
    )

    stats = client.get("/api/quality-control/stats").json()

    assert stats["total_checks"] == 1
    assert stats["by_status"]["needs_review"] == 1
    assert stats["pass_rate"] == 0
    assert stats["defect_rate"] == 100
    assert stats["top_defects"] == [{"type": "Loose thread", "count": 1}]
    assert stats["inspector_performance"][0]["name"] == "Marta"


def test_check_not_found(client):
    assert client.get("/api/quality-control/checks/999").status_code == 404
