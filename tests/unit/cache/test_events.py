# tests/unit/cache/test_events.py — v1
"""Tests for cache/events.py."""

from __future__ import annotations

import logging

import pytest

from docindex.cache.events import CacheEventBus, DocumentEvent, DocumentEventKind


class TestCacheEventBus:
    @pytest.mark.asyncio
    async def test_delivers_in_subscription_order(self):
        bus = CacheEventBus()
        seen = []

        async def first(event):
            seen.append(("first", event.path))

        async def second(event):
            seen.append(("second", event.path))

        bus.subscribe(first)
        bus.subscribe(second)
        await bus.publish(DocumentEvent(DocumentEventKind.CHANGED, "/a.md"))
        assert seen == [("first", "/a.md"), ("second", "/a.md")]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = CacheEventBus()
        seen = []

        async def listener(event):
            seen.append(event)

        unsubscribe = bus.subscribe(listener)
        assert bus.listener_count == 1
        unsubscribe()
        unsubscribe()
        assert bus.listener_count == 0
        await bus.publish(DocumentEvent(DocumentEventKind.ADDED, "/a.md"))
        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_delivery(self, caplog):
        bus = CacheEventBus()
        seen = []

        async def broken(event):
            raise RuntimeError("boom")

        async def healthy(event):
            seen.append(event.kind)

        bus.subscribe(broken)
        bus.subscribe(healthy)
        with caplog.at_level(logging.ERROR, logger="docindex"):
            await bus.publish(DocumentEvent(DocumentEventKind.DELETED, "/gone.md"))
        assert seen == [DocumentEventKind.DELETED]
        assert "Listener failed for deleted event on /gone.md" in caplog.text
