"""
Unit tests for the timed notification queue.
"""
import pytest

from stockroom_sync.notifications import ERROR, KINDS, NotificationQueue


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def queue(clock):
    return NotificationQueue(ttl=5, clock=clock)


def test_items_expire_independently(queue, clock):
    a = queue.notify("info", "A")
    clock.now = 2
    b = queue.notify("info", "B")

    clock.now = 4.9
    assert [n.message for n in queue.active()] == ["A", "B"]
    clock.now = 5
    assert [n.message for n in queue.active()] == ["B"]
    clock.now = 6.9
    assert [n.message for n in queue.active()] == ["B"]
    clock.now = 7
    assert queue.active() == []
    assert b.expires_at - a.expires_at == 2


def test_repeated_messages_do_not_coalesce(queue):
    queue.error("Same text")
    queue.error("Same text")

    items = queue.active()
    assert len(items) == 2
    assert items[0].id != items[1].id


@pytest.mark.parametrize("kind", list(KINDS))
def test_known_kinds_have_label_and_style(queue, kind):
    item = queue.notify(kind, "hello")

    assert item.kind == kind
    assert (item.label, item.style) == KINDS[kind]


def test_unknown_kind_falls_back_to_error(queue):
    item = queue.notify("critical", "hello")

    assert item.kind == ERROR
    assert item.label == "Error"


def test_subscribers_see_new_items(queue):
    seen = []
    unsubscribe = queue.subscribe(seen.append)
    queue.success("Saved")
    unsubscribe()
    queue.info("Not seen")

    assert [n.message for n in seen] == ["Saved"]


def test_dismiss(queue):
    item = queue.warning("Low stock")
    queue.dismiss(item.id)

    assert queue.active() == []
