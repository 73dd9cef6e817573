"""
Mount tracking: live render targets kept in sync with the registry.

Every attached handle is rendered once immediately and again on each refresh
notification. A handle the surface no longer shows is unmounted and
forgotten the next time a notification reaches it, or on sweep_detached().
"""
from components.console import debug_log
from components.errors import ComponentError
from components.namespace import GLOBAL_NAMESPACE
from components.runtime import ErrorComponent, RenderContext, rendering


class MountTracker:
    """
    Args:
        surface: object with render(handle, value), unmount(handle) and
            is_attached(handle)
        signal: refresh Signal the mount points subscribe to
        evaluate: coroutine function (source, namespace) -> renderable
    """

    def __init__(self, surface, signal, evaluate):
        self.surface = surface
        self.signal = signal
        self.evaluate = evaluate
        self.mount_points = set()
        self._contexts = {}
        self._sources = {}
        self._subscriptions = {}

    def context_of(self, handle):
        return self._contexts.get(handle)

    def source_of(self, handle):
        return self._sources.get(handle)

    async def attach(self, source, handle, context=None):
        """Render `source` into `handle` now and on every refresh."""
        previous = self._subscriptions.pop(handle, None)
        if previous is not None:
            previous.unsubscribe()

        self._sources[handle] = source
        self._contexts[handle] = context if context is not None else RenderContext()
        await self.render(handle)
        self.mount_points.add(handle)
        self._subscriptions[handle] = self.signal.subscribe(lambda: self._on_refresh(handle))

    async def render(self, handle):
        """Tear down the current rendering of `handle` and render it again."""
        source = self._sources[handle]
        context = self._contexts[handle]
        self.surface.unmount(handle)
        with rendering(context):
            try:
                value = await self.evaluate(source, context.namespace or GLOBAL_NAMESPACE)
                if callable(value):
                    # A bare component reference renders like <Name />
                    value = value()
            except ComponentError as e:
                debug_log(f"Rendering {source!r} failed: {e}")
                value = ErrorComponent({"component_name": e.component_name or source, "error": e})
            self.surface.render(handle, value)

    async def _on_refresh(self, handle):
        if handle not in self._sources:
            return
        if self.surface.is_attached(handle):
            await self.render(handle)
        else:
            debug_log(f"Mount point {handle!r} left the surface")
            self._forget(handle)

    def _forget(self, handle):
        self.surface.unmount(handle)
        self.mount_points.discard(handle)
        self._contexts.pop(handle, None)
        self._sources.pop(handle, None)
        subscription = self._subscriptions.pop(handle, None)
        if subscription is not None:
            subscription.unsubscribe()

    def sweep_detached(self):
        """Forget every mount point no longer on the surface. Returns how many were removed."""
        detached = [handle for handle in self.mount_points if not self.surface.is_attached(handle)]
        for handle in detached:
            self._forget(handle)
        return len(detached)

    def detach_all(self):
        for handle in list(self.mount_points):
            self._forget(handle)
