"""
Scope construction for code compiled in a namespace.

A Scope holds the fixed built-ins plus *references* to components: a
reference remembers the node a name lives in and reads that node's current
binding every time it is looked up. Components are routinely redefined after
other components captured a scope, and references keep those callers from
holding an outdated version.
"""
from collections.abc import Mapping

from components.identifiers import is_identifier
from components.namespace import GLOBAL_NAMESPACE


class Scope(Mapping):
    """Read-only mapping of every name visible to one evaluation."""

    def __init__(self, builtins, references):
        self._builtins = builtins
        self._references = references

    def __getitem__(self, key):
        if key in self._builtins:
            return self._builtins[key]
        node = self._references[key]
        return node.lookup(key)

    def __iter__(self):
        yield from self._builtins
        yield from self._references

    def __len__(self):
        return len(self._builtins) + len(self._references)

    def is_builtin(self, key):
        return key in self._builtins

    def source_of(self, key):
        """Namespace path a dynamic name resolves through, or None for built-ins and unknown names."""
        node = self._references.get(key)
        return node.name if node is not None else None

    def __repr__(self):
        return f"Scope(builtins={len(self._builtins)}, references={sorted(self._references)})"


class ScopeBuilder:
    """
    Builds the Scope for a namespace.

    Precedence, highest first: built-ins, the requested namespace, Global,
    the tree root. A name already taken, or that is not a valid identifier,
    is skipped.
    """

    def __init__(self, tree, builtins):
        self.tree = tree
        self.builtins = dict(builtins)

    def build(self, namespace):
        builtins = dict(self.builtins)
        references = {}
        sources = (
            self.tree.resolve(namespace),
            self.tree.resolve(GLOBAL_NAMESPACE),
            self.tree.root,
        )
        for node in sources:
            if node is None:
                continue
            for name in node.names():
                if name in builtins or name in references or not is_identifier(name):
                    continue
                references[name] = node
        return Scope(builtins, references)
