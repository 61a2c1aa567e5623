"""Tests for after-commit event publication."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class SomethingHappened(DomainEvent):
    name: str


def test_bus_isolates_failing_handlers():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, seen.append)
    bus.register_event_handler(SomethingHappened, seen.append)

    bus.publish_events([SomethingHappened(name="x")])

    assert [event.name for event in seen] == ["x"]


@pytest.mark.django_db
def test_events_are_published_only_after_commit(django_capture_on_commit_callbacks, monkeypatch):
    published = []
    monkeypatch.setattr(DjangoUnitOfWork, "_publish_events", lambda self, events: published.extend(events))

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with DjangoUnitOfWork() as uow:
            uow.add_event(SomethingHappened(name="committed"))
        assert published == []

    assert len(callbacks) == 1
    assert [event.name for event in published] == ["committed"]


@pytest.mark.django_db
def test_events_are_discarded_on_rollback(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(ValueError):
            with DjangoUnitOfWork() as uow:
                uow.add_event(SomethingHappened(name="lost"))
                raise ValueError("abort")

    assert callbacks == []
