"""
Namespace tree: dotted paths mapped to nodes holding components.

Each node keeps the live compiled value of every component defined directly in
it (`bindings`) and the source it was compiled from (`source_registry`).
Nodes are created on first resolution, since documents may register
components in a namespace nobody has created yet.
"""
from typing import Callable, Dict, Iterator, Optional

from components.compiled import CompiledValue
from components.console import debug_log
from components.errors import NamespaceConflict

GLOBAL_NAMESPACE = "Global"
SEPARATOR = "."


class CodeEntry:
    """One component's compilation record."""

    def __init__(self, raw_source: str, wrapper: Callable[[str], str]):
        self.raw_source = raw_source
        self._wrapper = wrapper
        self.last_wrapped_source: Optional[str] = None

    def wrapped_source(self, raw_source: Optional[str] = None) -> str:
        """Regenerate the definition wrapper from `raw_source` (default: the current one)."""
        return self._wrapper(self.raw_source if raw_source is None else raw_source)

    def __repr__(self):
        return f"CodeEntry({self.raw_source[:40]!r})"


class NamespaceNode:
    """One segment of a dotted namespace path."""

    def __init__(self, name: str):
        self._name = name
        self.children: Dict[str, "NamespaceNode"] = {}
        self.bindings: Dict[str, CompiledValue] = {}
        self.source_registry: Dict[str, CodeEntry] = {}

    @property
    def name(self) -> str:
        """Fully-qualified dotted path, fixed at creation."""
        return self._name

    def child(self, segment: str) -> Optional["NamespaceNode"]:
        """Return (creating if needed) the child namespace, or None if `segment` is a component."""
        if segment in self.bindings:
            return None
        node = self.children.get(segment)
        if node is None:
            path = f"{self._name}{SEPARATOR}{segment}" if self._name else segment
            node = NamespaceNode(path)
            self.children[segment] = node
        return node

    def bind(self, identifier: str, value: CompiledValue):
        if identifier in self.children:
            raise NamespaceConflict(
                f"'{identifier}' is already a namespace in '{self._name or '<root>'}'",
                component_name=identifier,
            )
        self.bindings[identifier] = value

    def lookup(self, identifier: str):
        """Current value of a binding or child namespace, as snippet code sees it."""
        if identifier in self.bindings:
            return self.bindings[identifier].resolve(identifier)
        if identifier in self.children:
            return NamespaceView(self.children[identifier])
        raise KeyError(identifier)

    def names(self):
        return list(self.bindings) + [c for c in self.children if c not in self.bindings]

    def __repr__(self):
        return f"NamespaceNode({self._name!r}, bindings={sorted(self.bindings)}, children={sorted(self.children)})"


class NamespaceView:
    """Attribute access to a namespace from snippet code: `Global.Card`."""
    __slots__ = ("_node",)

    def __init__(self, node: NamespaceNode):
        self._node = node

    def __getattr__(self, identifier):
        try:
            return self._node.lookup(identifier)
        except KeyError:
            raise AttributeError(f"Namespace '{self._node.name}' has no member '{identifier}'") from None

    def __dir__(self):
        return sorted(self._node.names())

    def __repr__(self):
        return f"<namespace {self._node.name}>"


class NamespaceTree:
    """Owned registry of namespaces. Discarded and rebuilt on a full reload."""

    def __init__(self):
        self.root = NamespaceNode("")

    def resolve(self, path: str) -> Optional[NamespaceNode]:
        """
        Resolve a dotted path, creating missing segments.

        A blank path is the root. Returns None when the path runs through a
        component ("no namespace here"); never raises.
        """
        node = self.root
        path = (path or "").strip()
        if not path:
            return node
        for segment in path.split(SEPARATOR):
            node = node.child(segment.strip())
            if node is None:
                debug_log(f"No namespace at '{path}': '{segment.strip()}' is a component")
                return None
        return node

    def bind(self, path: str, identifier: str, value: CompiledValue):
        node = self.resolve(path)
        if node is None:
            raise NamespaceConflict(f"'{path}' is not a namespace", component_name=identifier)
        node.bind(identifier, value)

    def lookup_source(self, path: str, identifier: str) -> Optional[CodeEntry]:
        node = self.resolve(path)
        if node is None:
            return None
        return node.source_registry.get(identifier)

    def walk(self) -> Iterator[NamespaceNode]:
        """All nodes, depth first, root included."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children.values())))
