"""
Tests for the refresh signal and the debouncer.
"""
import asyncio

import pytest

from components.events import COMPONENTS_UPDATED, Debouncer, Signal


class TestSignal:
    """Tests for subscriber notification."""

    def test_default_name(self):
        assert Signal().name == COMPONENTS_UPDATED

    def test_subscription_order(self):
        signal = Signal()
        calls = []
        signal.subscribe(lambda: calls.append("first"))
        signal.subscribe(lambda: calls.append("second"))
        signal.emit()
        assert calls == ["first", "second"]
        assert signal.emit_count == 1

    def test_unsubscribe_is_idempotent(self):
        signal = Signal()
        calls = []
        subscription = signal.subscribe(lambda: calls.append(1))
        subscription.unsubscribe()
        subscription.unsubscribe()
        signal.emit()
        assert calls == []
        assert len(signal) == 0
        assert not subscription.active

    def test_unsubscribe_during_emit(self):
        signal = Signal()
        calls = []
        second = None

        def first():
            calls.append("first")
            second.unsubscribe()

        signal.subscribe(first)
        second = signal.subscribe(lambda: calls.append("second"))
        signal.emit()
        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_coroutine_subscribers_scheduled(self):
        signal = Signal()
        calls = []

        async def subscriber():
            await asyncio.sleep(0)
            calls.append("done")

        signal.subscribe(subscriber)
        tasks = signal.emit()
        assert len(tasks) == 1
        assert calls == []
        await signal.wait_idle()
        assert calls == ["done"]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_stop_others(self):
        signal = Signal()
        calls = []

        async def failing():
            raise RuntimeError("boom")

        async def working():
            calls.append("ok")

        signal.subscribe(failing)
        signal.subscribe(working)
        signal.emit()
        await signal.wait_idle()
        assert calls == ["ok"]

    def test_failing_plain_subscriber_does_not_stop_others(self, capsys):
        signal = Signal()
        calls = []

        def failing():
            raise RuntimeError("boom")

        signal.subscribe(failing)
        signal.subscribe(lambda: calls.append("ok"))
        assert signal.emit() == []
        assert calls == ["ok"]
        assert "RuntimeError" in capsys.readouterr().err


class TestDebouncer:
    """Tests for the single-flight timer."""

    @pytest.mark.asyncio
    async def test_fires_once_after_delay(self):
        calls = []
        debouncer = Debouncer(0.05, lambda: calls.append(1))
        debouncer.request()
        assert debouncer.pending
        await asyncio.sleep(0.15)
        assert calls == [1]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_requests_reset_timer(self):
        calls = []
        debouncer = Debouncer(0.1, lambda: calls.append(1))
        for _ in range(5):
            debouncer.request()
            await asyncio.sleep(0.03)
        assert calls == []
        await asyncio.sleep(0.2)
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_cancel(self):
        calls = []
        debouncer = Debouncer(0.05, lambda: calls.append(1))
        debouncer.request()
        debouncer.cancel()
        await asyncio.sleep(0.1)
        assert calls == []
        assert not debouncer.pending

    def test_request_needs_running_loop(self):
        debouncer = Debouncer(0.05, lambda: None)
        with pytest.raises(RuntimeError):
            debouncer.request()
