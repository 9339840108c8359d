from datetime import datetime, time

from app.domain.notifications.schemas import NotificationSettings
from app.domain.notifications.service import deep_merge, is_quiet_time


def quiet_settings(start="22:00", end="08:00", enabled=True):
    return NotificationSettings.model_validate(
        {"preferences": {"quiet_hours": {"enabled": enabled, "start": start, "end": end}}}
    )


def test_deep_merge_keeps_untouched_keys():
    base = {"email": {"enabled": True, "low_stock": True}, "thresholds": {"low_stock_threshold": 10}}

    merged = deep_merge(base, {"email": {"low_stock": False}})

    assert merged == {
        "email": {"enabled": True, "low_stock": False},
        "thresholds": {"low_stock_threshold": 10},
    }
    assert base["email"]["low_stock"] is True


def test_quiet_hours_across_midnight():
    settings = quiet_settings()

    assert is_quiet_time(settings, time(23, 30))
    assert is_quiet_time(settings, time(7, 59))
    assert not is_quiet_time(settings, time(8, 0))
    assert not is_quiet_time(settings, datetime(2024, 1, 1, 12, 0))


def test_quiet_hours_same_day_window():
    settings = quiet_settings("13:00", "15:00")

    assert is_quiet_time(settings, time(14, 0))
    assert not is_quiet_time(settings, time(15, 0))


def test_quiet_hours_disabled_or_empty():
    assert not is_quiet_time(quiet_settings(enabled=False), time(23, 0))
    assert not is_quiet_time(quiet_settings("10:00", "10:00"), time(10, 0))


def test_default_settings(client):
    settings = client.get("/api/settings/notifications").json()

    assert settings["email"]["new_orders"] is True
    assert settings["whatsapp"]["enabled"] is False
    assert settings["preferences"]["quiet_hours"] == {"enabled": False, "start": "22:00", "end": "08:00"}
    assert settings["preferences"]["categories"]["orders"]["priority"] == "high"
    assert settings["preferences"]["categories"]["system"]["priority"] == "low"
    assert settings["thresholds"] == {
        "low_stock_threshold": 10,
        "high_value_order_threshold": 500,
        "payment_failure_threshold": 3,
        "response_time_threshold": 24,
    }


def test_partial_update_is_merged_and_persisted(client):
    response = client.put(
        "/api/settings/notifications",
        json={
            "email": {"daily_reports": True},
            "whatsapp": {"enabled": True, "phone_number": "612 345 678"},
            "thresholds": {"low_stock_threshold": 5},
        },
    )

    assert response.status_code == 200
    assert response.json()["success"] is True

    settings = client.get("/api/settings/notifications").json()
    assert settings["email"]["daily_reports"] is True
    assert settings["email"]["new_orders"] is True
    assert settings["whatsapp"]["phone_number"] == "+34612345678"
    assert settings["thresholds"]["low_stock_threshold"] == 5
    assert settings["thresholds"]["payment_failure_threshold"] == 3


def test_invalid_update_is_rejected(client):
    response = client.put(
        "/api/settings/notifications",
        json={"preferences": {"quiet_hours": {"start": "25:00"}}},
    )

    assert response.status_code == 422
    assert client.get("/api/settings/notifications").json()["preferences"]["quiet_hours"]["start"] == "22:00"


def test_negative_threshold_is_rejected(client):
    response = client.put("/api/settings/notifications", json={"thresholds": {"low_stock_threshold": -1}})

    assert response.status_code == 422


def test_send_test_notification(client, sent_emails):
    response = client.post("/api/settings/notifications/test", json={"email": "admin@example.com"})

    assert response.status_code == 200
    assert response.json()["message"] == "Test notification sent to admin@example.com"
    kwargs = sent_emails.call_args.kwargs
    assert kwargs["to"] == "admin@example.com"
    assert "{{siteUrl}}" not in kwargs["html"]


def test_send_test_defaults_to_sender_address(client, smtp_settings, sent_emails):
    response = client.post("/api/settings/notifications/test")

    assert response.status_code == 200
    assert sent_emails.call_args.kwargs["to"] == "shop@example.com"


def test_send_test_without_recipient(client, sent_emails):
    response = client.post("/api/settings/notifications/test")

    assert response.status_code == 400
    sent_emails.assert_not_called()


def test_send_test_delivery_failure(client, sent_emails):
    sent_emails.return_value = False

    response = client.post("/api/settings/notifications/test", json={"email": "admin@example.com"})

    assert response.status_code == 502
