"""Tests for the notification center."""
from memesense.notifier import Notification, NotificationCenter, Severity


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestNotification:
    def test_expiry(self):
        notification = Notification("x", Severity.ERROR, auto_close_ms=3000, created_at=10.0)

        assert notification.expires_at == 13.0
        assert not notification.expired(12.9)
        assert notification.expired(13.0)

    def test_to_dict(self):
        data = Notification("boom", Severity.ERROR, 2000, created_at=1.0).to_dict()
        assert data == {
            "message": "boom",
            "severity": "error",
            "auto_close_ms": 2000,
            "created_at": 1.0,
        }


class TestNotificationCenter:
    def test_notify_records_message(self):
        center = NotificationCenter(clock=FakeClock())

        center.notify("Error: service unavailable", Severity.ERROR, 3000)

        active = center.active()
        assert len(active) == 1
        assert active[0].message == "Error: service unavailable"
        assert active[0].severity is Severity.ERROR

    def test_expired_notifications_pruned(self):
        clock = FakeClock()
        center = NotificationCenter(clock=clock)
        center.notify("short", Severity.ERROR, 2000)
        center.notify("long", Severity.ERROR, 3000)

        clock.now += 2.5

        assert [n.message for n in center.active()] == ["long"]
        assert len(center) == 1

    def test_dismiss_all(self):
        center = NotificationCenter(clock=FakeClock())
        center.notify("x", Severity.INFO, 1000)

        center.dismiss_all()

        assert center.active() == []
