"""
Evaluator: runs executable module text and returns what its `build` produces.

The text becomes a module through an importlib loader over an in-memory
string; nothing is written to disk or added to sys.modules. Loading is the
one suspend point of the pipeline.
"""
import asyncio
import functools
import importlib.abc
import importlib.util
import itertools
import linecache

from components.console import debug_log
from components.errors import ComponentError, EvaluationError, InvocationError
from components.pipeline import BUILD_FUNCTION, to_executable
from components.runtime import ErrorComponent, get_preamble

_module_counter = itertools.count(1)


class InMemoryLoader(importlib.abc.Loader):
    """Loader executing module source held in memory."""

    def __init__(self, source, filename, preamble=None):
        self.source = source
        self.filename = filename
        self.preamble = preamble or {}

    def create_module(self, spec):
        return None  # default module creation

    def exec_module(self, module):
        module.__dict__.update(self.preamble)
        exec(compile(self.source, self.filename, "exec"), module.__dict__)

    def get_source(self, fullname):
        return self.source


async def load_module(source, component_name="component"):
    """Build a module object from `source` and execute it."""
    module_name = f"notecomp_generated_{next(_module_counter)}"
    filename = f"<component {component_name}>"
    loader = InMemoryLoader(source, filename, get_preamble())
    spec = importlib.util.spec_from_loader(module_name, loader, origin=filename)
    module = importlib.util.module_from_spec(spec)
    # Tracebacks show generated lines; the entry is replaced on each recompile
    linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)
    await asyncio.sleep(0)
    spec.loader.exec_module(module)
    return module


def guard(component, component_name):
    """Wrap a component so a failing invocation renders an error placeholder."""

    @functools.wraps(component)
    def guarded(*args, **kwargs):
        try:
            return component(*args, **kwargs)
        except Exception as e:
            error = InvocationError(f"{type(e).__name__}: {e}", component_name=component_name, cause=e)
            debug_log(str(error))
            return ErrorComponent({"component_name": component_name, "error": error})

    guarded.component_name = component_name
    return guarded


class Evaluator:
    """Evaluates executable text against the scope of a namespace."""

    def __init__(self, scope_builder, transform=to_executable):
        self.scope_builder = scope_builder
        self.transform = transform

    async def evaluate(self, executable, namespace, component_name="evaluated code"):
        """
        Load `executable` and call its build function with (scope, transform).

        Returns the produced value; callables come back guarded.

        Raises:
            EvaluationError: loading or executing the module failed
            ComponentError: raised unchanged when build() itself reports one
        """
        scope = self.scope_builder.build(namespace)
        try:
            module = await load_module(executable, component_name)
            evaluated = getattr(module, BUILD_FUNCTION)(scope, self.transform)
        except ComponentError as e:
            if e.component_name is None:
                e.component_name = component_name
            raise
        except Exception as e:
            raise EvaluationError(f"{type(e).__name__}: {e}", component_name=component_name, cause=e) from e

        if callable(evaluated):
            return guard(evaluated, component_name)
        return evaluated
