"""Notification port — abstract interface for order confirmations."""

from abc import ABC, abstractmethod


class NotificationSender(ABC):
    """Abstract interface for order-confirmation dispatch adapters."""

    @abstractmethod
    def send(self, confirmation: dict) -> dict:
        """Send an order confirmation.

        Args:
            confirmation: dict with keys order_id, customer, lines, totals, voucher

        Returns:
            dict with keys: success (bool), error (optional)
        """
        ...
