"""
Compiled values: the state of one binding in a namespace.

    Pending  - registered, not yet evaluated
    Ready    - evaluated to a value or a callable component
    Failed   - compilation or evaluation failed; renders as an error placeholder
"""
from components.runtime.elements import ErrorComponent


class CompiledValue:
    """Base class for Pending / Ready / Failed."""

    def is_ready(self) -> bool:
        return isinstance(self, Ready)

    def is_failed(self) -> bool:
        return isinstance(self, Failed)

    def is_pending(self) -> bool:
        return isinstance(self, Pending)

    def resolve(self, name):
        """What snippet code sees when it reads this binding."""
        raise NotImplementedError

    def unwrap(self):
        """Get value or raise error."""
        if isinstance(self, Ready):
            return self.value
        if isinstance(self, Failed):
            raise self.error
        raise RuntimeError("Called unwrap() on a pending component")


class Pending(CompiledValue):

    def resolve(self, name):
        return _render_nothing

    def __repr__(self):
        return "Pending()"


class Ready(CompiledValue):

    def __init__(self, value):
        self.value = value

    def resolve(self, name):
        return self.value

    def __repr__(self):
        return f"Ready({self.value!r})"


class Failed(CompiledValue):

    def __init__(self, error):
        self.error = error

    def resolve(self, name):
        error = self.error

        def failed_component(props=None):
            return ErrorComponent({"component_name": name, "error": error})

        return failed_component

    def __repr__(self):
        return f"Failed({self.error!r})"


def _render_nothing(props=None):
    return None
