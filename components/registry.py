"""
Component registry: change detection, (re)compilation and refresh requests.

register_component() compares the freshly wrapped source of a component with
the snapshot taken at its last registration. Identical text means nothing to
do: no compilation, no notification. Anything else recompiles the component,
recompiles every other component (their wrappers bind one local per visible
name, so a new sibling is only reachable after they are rebuilt), and asks
for a debounced refresh.
"""
from components.compiled import Failed, Pending, Ready
from components.console import debug_log, notice, warn
from components.errors import ComponentError, InvalidIdentifier, NamespaceConflict
from components.evaluator import Evaluator
from components.events import Debouncer, Signal
from components.identifiers import is_identifier
from components.namespace import GLOBAL_NAMESPACE, CodeEntry, NamespaceTree
from components.pipeline import to_executable, wrap_for_definition, wrap_for_inline_use
from components.runtime import get_builtins
from components.runtime.config import Settings
from components.scope import ScopeBuilder


class ComponentRegistry:
    """Owns the namespace tree and everything that compiles into it."""

    def __init__(self, settings=None, builtins=None, signal=None, notify=notice):
        self.settings = settings if settings is not None else Settings()
        self.signal = signal if signal is not None else Signal()
        self.tree = NamespaceTree()
        self.scopes = ScopeBuilder(self.tree, builtins if builtins is not None else get_builtins())
        self.evaluator = Evaluator(self.scopes)
        self.debouncer = Debouncer(self.settings.refresh_delay, self.signal.emit)
        self.compile_count = 0
        self._notify = notify

    def reset(self):
        """Discard every namespace and binding (full reload)."""
        self.debouncer.cancel()
        self.tree = NamespaceTree()
        self.scopes.tree = self.tree

    # --- Lookup ---

    def get(self, namespace, name):
        """CompiledValue bound to `name` in `namespace`, or None."""
        node = self.tree.resolve(namespace)
        if node is None:
            return None
        return node.bindings.get(name)

    def components(self):
        """(namespace, name, compiled value) for every bound component."""
        for node in self.tree.walk():
            for name, compiled in node.bindings.items():
                yield node.name, name, compiled

    def _wrapper_for(self, node):
        def wrap(raw_source):
            return wrap_for_definition(raw_source, node.name, self.scopes.build(node.name))
        return wrap

    # --- Mutation ---

    async def register_component(self, raw_source, name, namespace=GLOBAL_NAMESPACE,
                                 suppress_notification=False):
        """
        Register (or re-register) a component's source.

        Returns:
            True if the component changed and was recompiled, False otherwise.
        """
        if not is_identifier(name):
            self._notify(str(InvalidIdentifier(f'"{name}" is not a valid component name')))
            return False

        node = self.tree.resolve(namespace)
        if node is None:
            self._notify(str(NamespaceConflict(f'"{namespace}" is not a namespace: one of its segments is a component')))
            return False
        if name in node.children:
            self._notify(str(NamespaceConflict(f'"{name}" is already a namespace in "{node.name}"')))
            return False

        entry = node.source_registry.get(name)
        if entry is None:
            entry = CodeEntry(raw_source, self._wrapper_for(node))
            node.source_registry[name] = entry
            # Visible to scopes (its own included) before the first compile finishes
            node.bind(name, Pending())

        wrapped = entry.wrapped_source(raw_source)
        if entry.last_wrapped_source == wrapped:
            debug_log(f"{node.name}.{name} unchanged, skipping compilation")
            return False

        entry.raw_source = raw_source
        debug_log(f"Registering {node.name}.{name}")

        await self.compile_component(node, name)
        await self.refresh_component_scope(skip=(node.name, name))

        if self.settings.auto_refresh and not suppress_notification:
            self.request_component_update()
        return True

    async def compile_component(self, node, name):
        """Compile and evaluate one component, binding Ready or Failed."""
        entry = node.source_registry[name]
        self.compile_count += 1
        # Snapshot the text actually compiled
        entry.last_wrapped_source = entry.wrapped_source()
        try:
            executable = to_executable(entry.last_wrapped_source, filename=f"<component {name}>")
            compiled = Ready(await self.evaluator.evaluate(executable, node.name, component_name=name))
        except ComponentError as e:
            if e.component_name is None:
                e.component_name = name
            warn(f"{node.name}.{name}: {e}")
            compiled = Failed(e)
        try:
            node.bind(name, compiled)
        except NamespaceConflict as e:
            warn(str(e))
        return compiled

    async def refresh_component_scope(self, skip=None):
        """Recompile every registered component (except `skip`, a (namespace, name) pair)."""
        for node in list(self.tree.walk()):
            for name in list(node.bindings):
                if name not in node.source_registry or (node.name, name) == skip:
                    continue
                await self.compile_component(node, name)

    def request_component_update(self):
        """Ask for a refresh notification once registrations go quiet."""
        self.debouncer.delay = self.settings.refresh_delay
        self.debouncer.request()

    # --- Inline snippets ---

    async def evaluate_inline(self, source, namespace=GLOBAL_NAMESPACE):
        """
        Evaluate an inline snippet in `namespace`.

        Raises:
            ComponentError: the snippet does not compile or evaluate
        """
        wrapped = wrap_for_inline_use(source, namespace, self.scopes.build(namespace))
        executable = to_executable(wrapped, filename="<inline>")
        return await self.evaluator.evaluate(executable, namespace, component_name=source)
