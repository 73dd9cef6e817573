# Component Runtime
"""
Runtime objects visible to snippet code.

Built-ins are exposed through every Scope and always shadow components of the
same name. The preamble is seeded into the globals of every generated module.
"""

from components.runtime.blocks import evaluate_block
from components.runtime.context import RenderContext, rendering, use_context, use_is_preview
from components.runtime.elements import (
    Element,
    ErrorComponent,
    ErrorElement,
    Fragment,
    Markdown,
    h,
    render_to_string,
)


def get_builtins(note_header=None):
    """
    Fixed bindings of every scope.

    Args:
        note_header: zero-argument callable returning the current note header
            component, or None if there is none.
    """
    def NoteHeader(props=None):
        component = note_header() if note_header is not None else None
        if not callable(component):
            return None
        return component(props or {})

    return {
        "h": h,
        "Element": Element,
        "Fragment": Fragment,
        "Markdown": Markdown,
        "ErrorComponent": ErrorComponent,
        "NoteHeader": NoteHeader,
        "use_context": use_context,
        "use_is_preview": use_is_preview,
    }


def get_preamble():
    """Globals injected into each generated module before it executes."""
    return {
        "_evaluate_block": evaluate_block,
    }


__all__ = [
    'Element',
    'ErrorElement',
    'ErrorComponent',
    'Fragment',
    'Markdown',
    'RenderContext',
    'evaluate_block',
    'get_builtins',
    'get_preamble',
    'h',
    'render_to_string',
    'rendering',
    'use_context',
    'use_is_preview',
]
