"""
Markup Transformer - converts markup embedded in snippet code to `h` calls.

`convert_markup` scans Python source, skipping strings and comments, and
replaces every markup element found in expression position with the
equivalent `h(tag, props, *children)` call. Each element is parsed with the
Lark grammar in components/grammar.py and turned into code by
MarkupTransformer.
"""
import re
from collections import namedtuple

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput, VisitError

from components.console import debug_log
from components.errors import CompileError, get_line_context
from components.grammar import markup_grammar

# Keywords after which an expression (and so markup) may start.
EXPRESSION_KEYWORDS = {
    "return", "yield", "else", "elif", "if", "in", "and", "or", "not", "is",
    "await", "assert", "while", "lambda", "case", "from",
}
STRING_PREFIXES = {"r", "b", "f", "u", "rb", "br", "fr", "rf"}

Embedded = namedtuple("Embedded", "code")

_WORD = re.compile(r"\w+")
_NUMBER = re.compile(r"[\w.]+")

_parser = None


def get_parser():
    """Markup parser, built once."""
    global _parser
    if _parser is None:
        # Earley handles the overlap between text, whitespace and tag tokens
        _parser = Lark(markup_grammar, parser='earley')
    return _parser


class MarkupTransformer(Transformer):
    """
    Transforms a parsed markup element into a Python call expression.

    Lowercase tags become string tags (`h('span', ...)`); capitalised or
    dotted tags are references to components (`h(Card, ...)`). Code inside
    `{...}` is converted recursively so it may itself contain markup.
    """

    def __init__(self, convert=None):
        super().__init__()
        self._convert = convert if convert is not None else convert_markup

    def start(self, items):
        return items[0]

    def self_closing(self, args):
        tag, attributes = args
        return f"h({_tag_expression(tag)}, {attributes})"

    def paired(self, args):
        tag, attributes, *children, closing_tag = args
        if tag != closing_tag:
            raise CompileError(
                f"Closing tag </{closing_tag}> does not match <{tag}>",
                suggestion=f"Close the element with </{tag}>",
            )
        return self._call(_tag_expression(tag), attributes, children)

    def fragment(self, args):
        return self._call("Fragment", "None", args)

    def _call(self, tag_expression, attributes, children):
        parts = [tag_expression, attributes]
        for child in children:
            code = self._child_code(child)
            if code is not None:
                parts.append(code)
        return f"h({', '.join(parts)})"

    def _child_code(self, child):
        if isinstance(child, Embedded):
            return self._embedded_code(child.code)
        return child

    def _embedded_code(self, code):
        converted = self._convert(code).strip()
        lines = [line for line in converted.splitlines() if line.strip() and not line.strip().startswith("#")]
        if not lines:
            return None
        return f"({converted}\n)"

    def tag_name(self, args):
        return str(args[0])

    def attributes(self, args):
        if not args:
            return "None"
        return "{" + ", ".join(args) + "}"

    def string_attribute(self, args):
        name, value = args
        return f"{str(name)!r}: {str(value)[1:-1]!r}"

    def expression_attribute(self, args):
        name, embedded = args
        code = self._embedded_code(embedded.code)
        return f"{str(name)!r}: {code if code is not None else 'None'}"

    def flag_attribute(self, args):
        return f"{str(args[0])!r}: True"

    def spread_attribute(self, args):
        code = args[0].code.strip()
        if not code.startswith("..."):
            raise CompileError(
                f"Unexpected attribute {{{code}}}",
                suggestion="Use {...props} to spread a mapping into attributes",
            )
        return f"**({self._convert(code[3:]).strip()}\n)"

    def text(self, args):
        value = _clean_text(str(args[0]))
        return repr(value) if value else None

    def embed(self, args):
        # args: LBRACE, parts..., RBRACE
        return Embedded("".join(str(a) for a in args[1:-1]).strip())

    def nested(self, args):
        return "".join(str(a) for a in args)


def _tag_expression(tag):
    if "." not in tag and (tag[0].islower() or "-" in tag):
        return repr(tag)
    return tag


def _clean_text(value):
    """Collapse text the way JSX does: whitespace-only lines with a newline vanish."""
    lines = value.split("\n")
    if len(lines) == 1:
        return value
    parts = []
    last = len(lines) - 1
    for i, line in enumerate(lines):
        if i > 0:
            line = line.lstrip()
        if i < last:
            line = line.rstrip()
        if line:
            parts.append(line)
    return " ".join(parts)


# ==========================================
# SCANNER
# ==========================================

def _line_of(source, index):
    return source.count("\n", 0, index) + 1


def _string_end(source, start):
    """Index just past the string literal whose opening quote is at `start`."""
    quote = source[start:start + 3] if source[start:start + 3] in ("'''", '"""') else source[start]
    i = start + len(quote)
    n = len(source)
    while i < n:
        if source[i] == "\\":
            i += 2
            continue
        if source.startswith(quote, i):
            return i + len(quote)
        if len(quote) == 1 and source[i] == "\n":
            break
        i += 1
    line = _line_of(source, start)
    raise CompileError(
        "Unterminated string literal",
        line_number=line,
        context=get_line_context(source, line),
        suggestion=f"Close the string with {quote}",
    )


def _skip_braces(source, start):
    """Index just past the brace matching the one at `start`."""
    depth = 0
    i = start
    n = len(source)
    while i < n:
        c = source[i]
        if c in "'\"":
            i = _string_end(source, i)
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    line = _line_of(source, start)
    raise CompileError(
        "Unbalanced '{' in markup",
        line_number=line,
        context=get_line_context(source, line),
        suggestion="Close every {expression} with '}'",
    )


def _opens_tag(source, index):
    """True if the character after a '<' can start a tag or a fragment."""
    if index >= len(source):
        return False
    c = source[index]
    return c.isalpha() or c == "_" or c == ">"


def _tag_end(source, start):
    """(index past the '>' closing the tag at `start`, whether it self-closes)."""
    i = start + 1
    n = len(source)
    while i < n:
        c = source[i]
        if c in "'\"":
            i = _string_end(source, i)
            continue
        if c == "{":
            i = _skip_braces(source, i)
            continue
        if c == ">":
            return i + 1, source[i - 1] == "/"
        i += 1
    line = _line_of(source, start)
    raise CompileError(
        "Unterminated tag",
        line_number=line,
        context=get_line_context(source, line),
        suggestion="Close the tag with '>' or '/>'",
    )


def _markup_extent(source, start):
    """Index just past the markup element starting at `start`."""
    depth = 0
    i = start
    n = len(source)
    while i < n:
        if source.startswith("</", i):
            close = source.find(">", i)
            if close == -1:
                break
            depth -= 1
            i = close + 1
            if depth <= 0:
                return i
        elif source[i] == "<" and _opens_tag(source, i + 1):
            i, self_closing = _tag_end(source, i)
            if not self_closing:
                depth += 1
            elif depth == 0:
                return i
        elif source[i] == "{" and depth > 0:
            i = _skip_braces(source, i)
        else:
            i += 1
    line = _line_of(source, start)
    raise CompileError(
        "Unterminated markup element",
        line_number=line,
        context=get_line_context(source, line),
        suggestion="Every <tag> needs a matching </tag>",
    )


def parse_markup(fragment, first_line=1):
    """Convert one markup element to a call expression."""
    try:
        tree = get_parser().parse(fragment)
        code = MarkupTransformer().transform(tree)
    except UnexpectedInput as e:
        line = first_line + e.line - 1 if e.line and e.line > 0 else first_line
        raise CompileError(
            "Invalid markup",
            line_number=line,
            column=e.column if e.column and e.column > 0 else None,
            context=get_line_context(fragment, e.line) if e.line and e.line > 0 else fragment.split("\n")[0],
            suggestion="Check tag names, attribute syntax and {expressions}",
        )
    except VisitError as e:
        if isinstance(e.orig_exc, CompileError):
            e.orig_exc.line_number = e.orig_exc.line_number or first_line
            raise e.orig_exc
        raise CompileError(f"Markup transformation error: {e.orig_exc}", line_number=first_line)
    # Keep the line count so later diagnostics point at the right line
    newlines = fragment.count("\n")
    if newlines:
        code = code[:-1] + "\n" * newlines + ")"
    return code


def convert_markup(source):
    """Replace every markup element in `source` with an `h(...)` call."""
    out = []
    i = 0
    n = len(source)
    operand = False  # True when the previous token ends an expression
    depth = 0
    while i < n:
        c = source[i]
        if c == "#":
            end = source.find("\n", i)
            end = n if end == -1 else end
            out.append(source[i:end])
            i = end
        elif c.isalpha() or c == "_":
            m = _WORD.match(source, i)
            word = m.group()
            end = m.end()
            if word.lower() in STRING_PREFIXES and end < n and source[end] in "'\"":
                end = _string_end(source, end)
                operand = True
            else:
                operand = word not in EXPRESSION_KEYWORDS
            out.append(source[i:end])
            i = end
        elif c in "'\"":
            end = _string_end(source, i)
            out.append(source[i:end])
            operand = True
            i = end
        elif c.isdigit():
            m = _NUMBER.match(source, i)
            out.append(m.group())
            operand = True
            i = m.end()
        elif c == "<" and not operand and _opens_tag(source, i + 1):
            end = _markup_extent(source, i)
            debug_log(f"Converting markup at line {_line_of(source, i)}")
            out.append(parse_markup(source[i:end], first_line=_line_of(source, i)))
            operand = True
            i = end
        else:
            if c in "([{":
                depth += 1
                operand = False
            elif c in ")]}":
                depth = max(depth - 1, 0)
                operand = True
            elif c == "\n":
                if depth == 0:
                    operand = False
            elif not c.isspace() and c != "\\":
                operand = False
            out.append(c)
            i += 1
    return "".join(out)
