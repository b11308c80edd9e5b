from __future__ import annotations

from packages.shared.schemas.notification_v1 import NotificationKindV1
from services.storefront.app.services.notifier import RecordingNotifier


def test_keyed_message_replaces_pending_one() -> None:
    notifier = RecordingNotifier()
    notifier.loading("Processing payment...", key="payment")
    notifier.success("Added to cart")
    notifier.error("Payment timeout - please try again", key="payment")

    assert [(n.kind, n.message) for n in notifier.pending] == [
        (NotificationKindV1.SUCCESS, "Added to cart"),
        (NotificationKindV1.ERROR, "Payment timeout - please try again"),
    ]


def test_undrained_messages_are_capped() -> None:
    notifier = RecordingNotifier(max_pending=3)
    for i in range(5):
        notifier.success(f"msg {i}")

    assert [n.message for n in notifier.pending] == ["msg 2", "msg 3", "msg 4"]
    assert len(notifier.drain()) == 3
    assert notifier.pending == []
