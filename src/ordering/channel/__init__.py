"""Adapter registry for the ordering core's outbound ports.

Provides singleton access to the notification sender and the media store.
Uses the fake notification sender and the local media store by default;
tests swap or reset them through this module.
"""

from ordering.channel.media_port import MediaStore
from ordering.channel.notification_port import NotificationSender
from ordering.settings import media_root

_instances: dict[str, object] = {}


def get_notification_sender() -> NotificationSender:
    """Return the configured notification sender (singleton)."""
    if "notification" not in _instances:
        from ordering.channel.fake_notification import FakeNotificationSender

        _instances["notification"] = FakeNotificationSender()
    return _instances["notification"]


def get_media_store() -> MediaStore:
    """Return the configured media store (singleton).

    Defaults to a ``LocalMediaStore`` rooted at ``ORDERING_MEDIA_ROOT``.
    """
    if "media" not in _instances:
        from ordering.channel.local_media import LocalMediaStore

        _instances["media"] = LocalMediaStore(media_root())
    return _instances["media"]


def configure_notification_sender(sender: NotificationSender):
    _instances["notification"] = sender


def configure_media_store(store: MediaStore):
    _instances["media"] = store


def reset_channels():
    """Reset all adapter singletons (useful for testing)."""
    _instances.clear()
