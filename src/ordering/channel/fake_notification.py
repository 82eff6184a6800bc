"""Fake notification adapter — records confirmations for testing."""

from ordering.channel.notification_port import NotificationSender


class FakeNotificationSender(NotificationSender):
    """Notification adapter that records confirmations in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
        self.raise_error = False

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification delivery failed",
        raise_error: bool = False,
    ):
        """Configure the fake adapter behavior for testing.

        ``raise_error`` makes ``send`` raise instead of returning a failure,
        like a transport that blows up mid-call.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    def send(self, confirmation: dict) -> dict:
        if self.raise_error:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return {"success": False, "error": self.failure_reason}

        self.sent.append(confirmation)
        return {"success": True}

    def reset(self):
        """Clear sent confirmations (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
        self.raise_error = False
