# ==========================================
# RENDERING PRIMITIVES
# ==========================================
import sys
import traceback
from html import escape
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from components.runtime.context import use_context

FRAGMENT = "#fragment"
MARKDOWN = "#markdown"
VOID_TAGS = {"br", "hr", "img", "input", "meta", "link", "source", "wbr"}


class Element(BaseModel):
    """A rendered markup node produced by `h`."""
    tag: str
    props: Dict[str, Any] = Field(default_factory=dict)
    children: List[Any] = Field(default_factory=list)


class ErrorElement(Element):
    """Placeholder rendered in place of a failing component."""
    component_name: str = ""
    error: Any = None

    def show_in_console(self):
        """Print the underlying error with its traceback to stderr."""
        error = self.error
        if isinstance(error, BaseException):
            cause = getattr(error, "cause", None) or error
            text = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
        else:
            text = str(error)
        print(f"Error in component \"{self.component_name}\":\n{text}", file=sys.stderr)
        return text


def _flatten(children):
    flat = []
    for child in children:
        if child is None or isinstance(child, bool):
            continue
        if isinstance(child, (list, tuple)) or _is_generator(child):
            flat.extend(_flatten(child))
        else:
            flat.append(child)
    return flat


def _is_generator(value):
    return hasattr(value, "__next__") and hasattr(value, "__iter__") and not isinstance(value, (str, bytes))


def h(tag, props=None, *children):
    """
    Create a renderable.

    String tags build an Element. Callable tags are components: they are
    invoked with the props (children passed under "children") and their
    result is returned.
    """
    props = dict(props or {})
    flat = _flatten(children)
    if callable(tag):
        if flat:
            props["children"] = flat
        return tag(props)
    return Element(tag=tag, props=props, children=flat)


def Fragment(props=None):
    props = props or {}
    return Element(tag=FRAGMENT, children=_flatten(props.get("children", [])))


def Markdown(props=None):
    """Markdown text rendered by the surface relative to the current document."""
    props = props or {}
    ctx = use_context()
    source_path = ctx.source_path if ctx is not None else ""
    return Element(tag=MARKDOWN, props={"src": props.get("src", ""), "source_path": source_path})


def ErrorComponent(props):
    component_name = props.get("component_name", "")
    error = props.get("error")
    return ErrorElement(
        tag="span",
        props={"class": "component-error", "style": {"color": "red"}},
        children=[f'Error in component "{component_name}": {error}'],
        component_name=component_name,
        error=error,
    )


def _render_attribute(name, value):
    if isinstance(value, dict):
        value = "; ".join(f"{k}: {v}" for k, v in value.items())
    if value is True:
        return f" {name}"
    return f' {name}="{escape(str(value))}"'


def render_to_string(value: Optional[Any]) -> str:
    """Serialize a renderable to HTML."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, Element):
        inner = "".join(render_to_string(child) for child in value.children)
        if value.tag == FRAGMENT:
            return inner
        if value.tag == MARKDOWN:
            return f'<div class="markdown">{escape(str(value.props.get("src", "")), quote=False)}</div>'
        attrs = "".join(
            _render_attribute(name, prop)
            for name, prop in value.props.items()
            if name != "children" and prop is not None and prop is not False and not callable(prop)
        )
        if value.tag in VOID_TAGS and not value.children:
            return f"<{value.tag}{attrs} />"
        return f"<{value.tag}{attrs}>{inner}</{value.tag}>"
    if isinstance(value, (list, tuple)):
        return "".join(render_to_string(item) for item in value)
    return escape(str(value), quote=False)
