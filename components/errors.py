"""
Error kinds for component compilation, evaluation and host boundary calls.

Component errors never escape a registration or render call: the registry and
the mount tracker catch them and degrade the affected component to an error
placeholder. Only HostError reaches callers.
"""
import re


class ComponentError(Exception):
    """Base class for failures contained to a single component."""
    kind = "ComponentError"

    def __init__(self, message, component_name=None):
        self.message = message
        self.component_name = component_name
        super().__init__(self._format_error())

    def __str__(self):
        # component_name may be filled in after construction
        return self._format_error()

    def _format_error(self):
        if self.component_name:
            return f"{self.kind} in component \"{self.component_name}\": {self.message}"
        return f"{self.kind}: {self.message}"


class InvalidIdentifier(ComponentError):
    """Component name is not usable as a binding name."""
    kind = "InvalidIdentifier"


class NamespaceConflict(ComponentError):
    """A name is already used as a namespace (or as a component)."""
    kind = "NamespaceConflict"


class CompileError(ComponentError):
    """Markup conversion or transform failure, with line numbers and hints."""
    kind = "CompileError"

    def __init__(self, message, line_number=None, column=None, context=None, suggestion=None,
                 component_name=None):
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(message, component_name=component_name)

    def _format_error(self):
        """Format the error message with context and suggestion."""
        lines = ["Compilation Error"]
        if self.component_name:
            lines.append(f" in component \"{self.component_name}\"")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   hint: {self.suggestion}\n")

        return "".join(lines)


class EvaluationError(ComponentError):
    """Module load or top-level execution of compiled code failed."""
    kind = "EvaluationError"

    def __init__(self, message, component_name=None, cause=None):
        self.cause = cause
        super().__init__(message, component_name=component_name)


class InvocationError(ComponentError):
    """A compiled component raised when invoked with props."""
    kind = "InvocationError"

    def __init__(self, message, component_name=None, cause=None):
        self.cause = cause
        super().__init__(message, component_name=component_name)


class HostError(Exception):
    """Malformed input at the host boundary (missing folder, non-markdown file)."""


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


def detect_common_error_patterns(source_code):
    """Detect common snippet mistakes and return a helpful suggestion."""
    # Unmatched braces inside markup
    open_braces = source_code.count('{')
    close_braces = source_code.count('}')
    if open_braces != close_braces:
        return f"Unmatched braces: found {open_braces} '{{' but {close_braces} '}}'"

    open_parens = source_code.count('(')
    close_parens = source_code.count(')')
    if open_parens != close_parens:
        return f"Unmatched parentheses: found {open_parens} '(' but {close_parens} ')'"

    # Markup tag opened but never closed
    opened = re.findall(r'<([A-Za-z][\w.\-]*)[^>/]*>', source_code)
    closed = re.findall(r'</([A-Za-z][\w.\-]*)\s*>', source_code)
    for tag in opened:
        if opened.count(tag) > closed.count(tag):
            return f"Element <{tag}> is never closed: add </{tag}> or write <{tag} />"

    return None
