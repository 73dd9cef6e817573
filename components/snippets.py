"""
Locating snippets in markdown documents.

    ```py:component:Card        component definition (document namespace)
    ```py:  /  ```py-           inline snippet, body runs as-is
    ```py::Card                 body handed to Card as props["src"]
    `py: Card()`                inline code span
"""
import re
from typing import Dict, List, Tuple

import yaml

from components.console import warn
from components.identifiers import is_identifier

DEFINITION_MARKER = "py:component:"
INLINE_MARKERS = ("py:", "py-")
SOURCE_MARKER = "py::"

_DASH_LINE_RE = re.compile(r"^\s*---\s*$")
_LINK_RE = re.compile(r"^\[.*\]\((.*)\)$")

_DEFINITION_RE = re.compile(
    r"^[ \t]*```py:component:(?P<label>[^\n]*)\n(?P<body>.*?)^[ \t]*```[ \t]*$",
    re.MULTILINE | re.DOTALL,
)

# Fenced blocks first so their bodies are never scanned for code spans
_SNIPPET_RE = re.compile(
    r"^[ \t]*```(?P<info>[^\n`]*)\n(?P<body>.*?)^[ \t]*```[ \t]*$"
    r"|`(?P<span>[^`\n]+)`",
    re.MULTILINE | re.DOTALL,
)


def _block_body(body):
    return body[:-1] if body.endswith("\n") else body


def extract_component_blocks(text: str) -> List[Tuple[str, str]]:
    """(name, source) for every definition block, in document order."""
    blocks = []
    for match in _DEFINITION_RE.finditer(text):
        name = match.group("label").split(":")[0].strip()
        if not is_identifier(name):
            continue
        blocks.append((name, _block_body(match.group("body"))))
    return blocks


def find_inline_snippets(text: str) -> List[str]:
    """Source of every inline snippet, in document order."""
    snippets = []
    for match in _SNIPPET_RE.finditer(text):
        if match.group("span") is not None:
            span = match.group("span").strip()
            if span.startswith(INLINE_MARKERS):
                snippets.append(span[len("py:"):].strip())
            continue

        info = match.group("info").strip()
        body = _block_body(match.group("body"))
        if info.startswith(SOURCE_MARKER):
            name = info[len(SOURCE_MARKER):].strip()
            if name and all(is_identifier(part) for part in name.split(".")):
                snippets.append(f"h({name}, {{'src': {body!r}}})")
        elif info in INLINE_MARKERS:
            snippets.append(body)
    return snippets


def _split_front_matter(text):
    lines = text.replace("\r\n", "\n").lstrip("\ufeff").split("\n")
    if not lines or not _DASH_LINE_RE.match(lines[0]):
        return None, text
    for end in range(1, len(lines)):
        if _DASH_LINE_RE.match(lines[end]):
            return "\n".join(lines[1:end]), "\n".join(lines[end + 1:])
    return None, text


def parse_front_matter(text: str) -> Dict:
    """
    Document properties from a leading YAML block delimited by '---' lines.

    Returns an empty dict when there is no block or it is not a mapping.
    """
    header, _ = _split_front_matter(text)
    if not header or not header.strip():
        return {}
    try:
        properties = yaml.safe_load(header)
    except yaml.YAMLError as e:
        warn(f"Invalid front matter: {e}")
        return {}
    if not isinstance(properties, dict):
        return {}
    return properties


def remove_front_matter(text: str) -> str:
    _, body = _split_front_matter(text)
    return body


def property_value(properties, name):
    """Property `name`, with markdown links `[text](target)` reduced to their target."""
    value = properties.get(name)
    if isinstance(value, str):
        match = _LINK_RE.match(value.strip())
        if match:
            return match.group(1)
    return value
