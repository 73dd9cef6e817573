"""
Refresh notification: an ordered set of subscribers and a single-flight timer.
"""
import asyncio
import inspect

from components.console import debug_log, warn

COMPONENTS_UPDATED = "components-updated"


class Subscription:
    """Handle returned by Signal.subscribe()."""

    def __init__(self, signal, callback):
        self._signal = signal
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self._signal._remove(self)


class Signal:
    """
    Process-wide notification delivered to subscribers in subscription order.

    Coroutine subscribers are scheduled as tasks; emit() does not wait for
    them, so their completion order is not guaranteed.
    """

    def __init__(self, name=COMPONENTS_UPDATED):
        self.name = name
        self.emit_count = 0
        self._subscriptions = []
        self._tasks = set()

    def subscribe(self, callback):
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription):
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def __len__(self):
        return len(self._subscriptions)

    def emit(self):
        """Notify every subscriber; returns the tasks created for coroutine subscribers."""
        self.emit_count += 1
        debug_log(f"{self.name}: notifying {len(self._subscriptions)} subscriber(s)")
        tasks = []
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                result = subscription.callback()
            except Exception as e:
                warn(f"{self.name} subscriber failed: {e!r}")
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._task_done)
                tasks.append(task)
        return tasks

    def _task_done(self, task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            warn(f"{self.name} subscriber failed: {task.exception()!r}")

    async def wait_idle(self):
        """Wait until every subscriber task scheduled so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class Debouncer:
    """
    Runs `callback` once `delay` seconds after the last request().

    A new request cancels the pending timer instead of stacking another one.
    """

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self._handle = None

    @property
    def pending(self):
        return self._handle is not None

    def request(self):
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self):
        self._handle = None
        self.callback()
