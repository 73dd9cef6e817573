# ==========================================
# RENDER CONTEXT
# ==========================================
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Optional

from pydantic import BaseModel


class RenderContext(BaseModel):
    """Where a snippet is being rendered."""
    source_path: str = ""
    mode: str = "preview"
    namespace: Optional[str] = None
    container: Any = None


_current_context: ContextVar[Optional[RenderContext]] = ContextVar("render_context", default=None)


@contextmanager
def rendering(context):
    """Make `context` visible to use_context() for the duration of a render."""
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


def use_context():
    return _current_context.get()


def use_is_preview():
    ctx = _current_context.get()
    return ctx is not None and "preview" in ctx.mode
