# notecomp - Component Registry & Live Evaluation
"""
Core modules for the component engine:
- identifiers: Which names can be bound in generated code
- namespace: Dotted namespace tree holding compiled components
- scope: Built-ins plus live references to components
- grammar / transformer: Lark grammar and markup to `h()` conversion
- pipeline: Wrapping templates and the executable transform
- evaluator: In-memory module loading and failure containment
- registry: Change detection, recompilation and refresh requests
- events / mounts: Refresh signal and live render targets
- snippets / host: Finding snippets in documents, store and surface boundary
"""

from .errors import CompileError, ComponentError, HostError
from .namespace import NamespaceTree
from .pipeline import to_executable, wrap_for_definition, wrap_for_inline_use
from .registry import ComponentRegistry
from .mounts import MountTracker

__all__ = [
    'CompileError',
    'ComponentError',
    'HostError',
    'NamespaceTree',
    'to_executable',
    'wrap_for_definition',
    'wrap_for_inline_use',
    'ComponentRegistry',
    'MountTracker',
]
