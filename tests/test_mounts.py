"""
Tests for mount tracking: live render targets and their retirement.
"""
import asyncio

import pytest

from components.host import MemorySurface
from components.mounts import MountTracker
from components.registry import ComponentRegistry
from components.runtime import ErrorElement, RenderContext
from components.runtime.config import Settings

DELAY = 0.05


@pytest.fixture
def registry():
    return ComponentRegistry(Settings(refresh_delay=DELAY), notify=lambda message: None)


@pytest.fixture
def surface():
    return MemorySurface()


@pytest.fixture
def mounts(registry, surface):
    return MountTracker(surface, registry.signal, registry.evaluate_inline)


class TestAttach:
    """Tests for the first render."""

    @pytest.mark.asyncio
    async def test_renders_immediately(self, registry, surface, mounts):
        await registry.register_component("<span>hi</span>", "Foo")
        handle = surface.open("h1")
        await mounts.attach("Foo", handle, RenderContext())
        assert surface.html(handle) == "<span>hi</span>"
        assert handle in mounts.mount_points

    @pytest.mark.asyncio
    async def test_markup_snippet(self, registry, surface, mounts):
        await registry.register_component("<b>{props['name']}</b>", "Name")
        handle = surface.open("h1")
        await mounts.attach('<Name name="Ada" />', handle)
        assert surface.html(handle) == "<b>Ada</b>"

    @pytest.mark.asyncio
    async def test_context_namespace_used(self, registry, surface, mounts):
        await registry.register_component("'projects card'", "Card", "Projects")
        await registry.register_component("'global card'", "Card", "Global")
        handle = surface.open("h1")
        await mounts.attach("Card()", handle, RenderContext(namespace="Projects"))
        assert surface.html(handle) == "projects card"

    @pytest.mark.asyncio
    async def test_context_visible_to_snippet(self, surface, mounts):
        handle = surface.open("h1")
        await mounts.attach("use_context().source_path", handle, RenderContext(source_path="notes/a.md"))
        assert surface.html(handle) == "notes/a.md"
        assert mounts.context_of(handle).source_path == "notes/a.md"

    @pytest.mark.asyncio
    async def test_failure_renders_error_element(self, surface, mounts):
        handle = surface.open("h1")
        await mounts.attach("Missing()", handle)
        assert isinstance(surface.rendered[handle], ErrorElement)
        assert "Error in component" in surface.html(handle)

    @pytest.mark.asyncio
    async def test_compile_error_renders_error_element(self, surface, mounts):
        handle = surface.open("h1")
        await mounts.attach("<span>", handle)
        assert isinstance(surface.rendered[handle], ErrorElement)

    @pytest.mark.asyncio
    async def test_reattach_replaces_subscription(self, registry, surface, mounts):
        handle = surface.open("h1")
        await mounts.attach("'a'", handle)
        await mounts.attach("'b'", handle)
        assert len(registry.signal) == 1
        assert len(mounts.mount_points) == 1
        assert surface.html(handle) == "b"
        assert mounts.source_of(handle) == "'b'"


class TestRefresh:
    """Tests for re-rendering on refresh notifications."""

    @pytest.mark.asyncio
    async def test_rerenders_after_source_change(self, registry, surface, mounts):
        await registry.register_component("<b>one</b>", "Foo")
        handle = surface.open("h1")
        await mounts.attach("<Foo />", handle)

        await registry.register_component("<b>two</b>", "Foo")
        await asyncio.sleep(DELAY * 3)
        await registry.signal.wait_idle()
        assert surface.html(handle) == "<b>two</b>"

    @pytest.mark.asyncio
    async def test_every_mount_point_rerendered(self, registry, surface, mounts):
        await registry.register_component("'one'", "Foo", suppress_notification=True)
        handles = [surface.open(f"h{i}") for i in range(3)]
        for handle in handles:
            await mounts.attach("Foo()", handle)

        registry.signal.emit()
        await registry.signal.wait_idle()
        assert all(surface.render_counts[handle] == 2 for handle in handles)

    @pytest.mark.asyncio
    async def test_previous_rendering_torn_down(self, surface, mounts):
        torn_down = []
        unmount = surface.unmount

        def recording_unmount(handle):
            torn_down.append((handle, surface.rendered.get(handle)))
            unmount(handle)

        surface.unmount = recording_unmount
        handle = surface.open("h1")
        await mounts.attach("'x'", handle)
        mounts.signal.emit()
        await mounts.signal.wait_idle()
        assert torn_down[-1] == (handle, "x")

    @pytest.mark.asyncio
    async def test_detached_handle_unsubscribes(self, registry, surface, mounts):
        handle = surface.open("h1")
        await mounts.attach("'x'", handle)
        surface.detach(handle)

        registry.signal.emit()
        await registry.signal.wait_idle()
        assert handle not in mounts.mount_points
        assert mounts.context_of(handle) is None
        assert handle not in surface.rendered
        assert len(registry.signal) == 0


class TestSweep:
    """Tests for explicit retirement of detached mount points."""

    @pytest.mark.asyncio
    async def test_sweep_detached(self, registry, surface, mounts):
        kept = surface.open("kept")
        gone = surface.open("gone")
        await mounts.attach("'a'", kept)
        await mounts.attach("'b'", gone)
        surface.detach(gone)

        assert mounts.sweep_detached() == 1
        assert mounts.mount_points == {kept}
        assert gone not in surface.rendered
        assert len(registry.signal) == 1

    @pytest.mark.asyncio
    async def test_sweep_with_nothing_detached(self, surface, mounts):
        await mounts.attach("'a'", surface.open("h1"))
        assert mounts.sweep_detached() == 0

    @pytest.mark.asyncio
    async def test_detach_all(self, registry, surface, mounts):
        await mounts.attach("'a'", surface.open("h1"))
        await mounts.attach("'b'", surface.open("h2"))
        mounts.detach_all()
        assert mounts.mount_points == set()
        assert len(registry.signal) == 0
