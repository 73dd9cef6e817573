"""
Source transform pipeline: snippet text -> executable module text.

    extract_imports      hoist top-level imports out of the snippet body
    wrap_for_definition  build(scope) -> render(props) -> renderable
    wrap_for_inline_use  build(scope, transform) -> renderable
    to_executable        markup -> h() calls, erase annotations, implicit return

Wrapped output is deterministic for a given (source, namespace, scope names)
so that registrations can be compared as plain strings.
"""
import ast
import re
import textwrap

from components.errors import CompileError, detect_common_error_patterns, get_line_context
from components.transformer import convert_markup

BUILD_FUNCTION = "build"
RENDER_FUNCTION = "render"

# Names the templates use themselves; components with these names are not bound locally.
RESERVED_NAMES = {"props", "__scope__", "__transform__"}

_IMPORT_RE = re.compile(
    r"^(?:from[ \t]+[\w.]+[ \t]+import[ \t]+(?:\([^)]*\)|[^\n]*)|import[ \t]+[^\n]+)[ \t]*$",
    re.MULTILINE,
)

DEFINITION_TEMPLATE = """{imports}

def build(__scope__, __transform__=None):

    def render(props=None):
        props = {{}} if props is None else props
{bindings}
{body}
    return render
"""

INLINE_TEMPLATE = """{imports}

def build(__scope__, __transform__):
{bindings}
    return _evaluate_block(__transform__({literal}), {{**globals(), **locals()}})
"""


def extract_imports(source):
    """
    Remove top-level import statements from `source`.

    Returns (imports, body). Indented imports stay where they are.
    """
    imports = []

    def collect(match):
        imports.append(match.group().strip())
        return ""

    body = _IMPORT_RE.sub(collect, source)
    return imports, body


def _binding_lines(names, indent):
    pad = " " * indent
    return "\n".join(
        f"{pad}{name} = __scope__.get({name!r})"
        for name in sorted(set(names))
        if name not in RESERVED_NAMES
    )


def wrap_for_definition(raw_source, namespace, names):
    """
    Wrap a component definition.

    Args:
        raw_source: snippet text as written in the document
        namespace: dotted namespace the component belongs to
        names: every name visible in the namespace's scope
    """
    imports, body = extract_imports(raw_source)
    body = textwrap.dedent(body).strip("\n")
    header = [f"# component module for namespace {namespace or '<root>'}"] + imports
    return DEFINITION_TEMPLATE.format(
        imports="\n".join(header),
        bindings=_binding_lines(names, 8),
        body=textwrap.indent(body, " " * 8) if body.strip() else "        pass",
    )


def wrap_for_inline_use(raw_source, namespace, names):
    """Wrap an inline snippet. Its body stays a string until build() runs."""
    imports, body = extract_imports(raw_source)
    header = [f"# inline module for namespace {namespace or '<root>'}"] + imports
    return INLINE_TEMPLATE.format(
        imports="\n".join(header),
        bindings=_binding_lines(names, 4) or "    pass",
        literal=repr(textwrap.dedent(body).strip()),
    )


# ==========================================
# AST PASSES
# ==========================================

class EraseAnnotations(ast.NodeTransformer):
    """
    Drop type-only constructs: parameter and return annotations, annotated
    assignments outside class bodies, and `type` aliases.

    Class-level annotations stay because dataclasses and pydantic models
    read them at runtime.
    """

    def __init__(self):
        self._scopes = []

    def visit_ClassDef(self, node):
        self._scopes.append("class")
        self.generic_visit(node)
        self._scopes.pop()
        return node

    def _visit_function(self, node):
        node.returns = None
        self._scopes.append("function")
        self.generic_visit(node)
        self._scopes.pop()
        return node

    visit_FunctionDef = _visit_function
    visit_AsyncFunctionDef = _visit_function

    def visit_arg(self, node):
        node.annotation = None
        return node

    def visit_AnnAssign(self, node):
        if self._scopes and self._scopes[-1] == "class":
            self.generic_visit(node)
            return node
        if node.value is None:
            return ast.copy_location(ast.Pass(), node)
        assign = ast.Assign(targets=[node.target], value=self.visit(node.value))
        return ast.copy_location(assign, node)

    def visit_TypeAlias(self, node):
        return ast.copy_location(ast.Pass(), node)


class ImplicitReturn(ast.NodeTransformer):
    """Return the last expression statement of the generated render function."""

    def visit_Module(self, node):
        for stmt in node.body:
            if isinstance(stmt, ast.FunctionDef) and stmt.name == BUILD_FUNCTION:
                for inner in stmt.body:
                    if isinstance(inner, ast.FunctionDef) and inner.name == RENDER_FUNCTION:
                        self._return_last(inner)
        return node

    def _return_last(self, function):
        last = function.body[-1]
        if isinstance(last, ast.Expr):
            function.body[-1] = ast.copy_location(ast.Return(value=last.value), last)


def to_executable(source_text, filename="<component>"):
    """
    Convert snippet syntax into plain executable Python.

    Raises:
        CompileError: markup or Python syntax is invalid
    """
    converted = convert_markup(source_text)
    try:
        tree = ast.parse(converted, filename=filename)
    except SyntaxError as e:
        suggestion = detect_common_error_patterns(source_text) or "Check syntax around this line"
        raise CompileError(
            message=f"Syntax error: {e.msg}",
            line_number=e.lineno,
            column=e.offset,
            context=get_line_context(source_text, e.lineno),
            suggestion=suggestion,
        )
    tree = EraseAnnotations().visit(tree)
    tree = ImplicitReturn().visit(tree)
    ast.fix_missing_locations(tree)
    return ast.unparse(tree)
