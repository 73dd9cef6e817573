"""
Tests for locating snippets and properties in markdown documents.
"""
import pytest

from components.snippets import (
    extract_component_blocks,
    find_inline_snippets,
    parse_front_matter,
    property_value,
    remove_front_matter,
)

DOCUMENT = """---
defines-components: true
components-namespace: Projects
---

# Components

```py:component:Card
<div class="card">{props.get("children")}</div>
```

Some text with `inline code` and `py: <Card>x</Card>`.

```py:component:Row:extra:fields
<li>{props["text"]}</li>
```

```py:component:not-valid
'ignored'
```

```python
print("not a snippet")
```
"""


class TestComponentBlocks:
    """Tests for definition blocks."""

    def test_blocks_found_in_order(self):
        names = [name for name, _ in extract_component_blocks(DOCUMENT)]
        assert names == ["Card", "Row"]

    def test_block_source(self):
        blocks = dict(extract_component_blocks(DOCUMENT))
        assert blocks["Card"] == '<div class="card">{props.get("children")}</div>'

    def test_extra_fields_ignored(self):
        blocks = dict(extract_component_blocks(DOCUMENT))
        assert blocks["Row"] == '<li>{props["text"]}</li>'

    def test_multiline_body(self):
        text = "```py:component:Multi\na = 1\n\nb = 2\n```\n"
        assert extract_component_blocks(text) == [("Multi", "a = 1\n\nb = 2")]

    def test_indented_fence(self):
        text = "  ```py:component:Card\n  'x'\n  ```\n"
        assert extract_component_blocks(text) == [("Card", "  'x'")]


class TestInlineSnippets:
    """Tests for inline snippet markers."""

    def test_code_span(self):
        assert find_inline_snippets(DOCUMENT) == ["<Card>x</Card>"]

    def test_dash_marker(self):
        assert find_inline_snippets("`py- Card()`") == ["Card()"]

    def test_fenced_inline_block(self):
        text = "```py:\nx = 1\nx + 1\n```\n\n```py-\n<b>y</b>\n```\n"
        assert find_inline_snippets(text) == ["x = 1\nx + 1", "<b>y</b>"]

    def test_source_block_passes_body_as_src(self):
        text = "```py::Markdown\n# Title\n```\n"
        assert find_inline_snippets(text) == ["h(Markdown, {'src': '# Title'})"]

    def test_source_block_dotted_name(self):
        text = "```py::Projects.Card\nbody\n```\n"
        assert find_inline_snippets(text) == ["h(Projects.Card, {'src': 'body'})"]

    @pytest.mark.parametrize("label", ["Foo); x(", "my-card", "Projects..Card", "class"])
    def test_source_block_invalid_name_skipped(self, label):
        text = f"```py::{label}\nbody\n```\n"
        assert find_inline_snippets(text) == []

    def test_document_order(self):
        text = "`py: A()`\n\n```py:\nB()\n```\n\n`py: C()`\n"
        assert find_inline_snippets(text) == ["A()", "B()", "C()"]

    def test_code_inside_fence_not_a_span(self):
        text = "```\n`py: Hidden()`\n```\n"
        assert find_inline_snippets(text) == []

    def test_definition_blocks_are_not_inline(self):
        text = "```py:component:Card\n'x'\n```\n"
        assert find_inline_snippets(text) == []


class TestFrontMatter:
    """Tests for document properties."""

    def test_parse(self):
        properties = parse_front_matter(DOCUMENT)
        assert properties == {"defines-components": True, "components-namespace": "Projects"}

    def test_no_front_matter(self):
        assert parse_front_matter("# Just a title") == {}

    def test_unclosed_front_matter(self):
        assert parse_front_matter("---\na: 1\n") == {}

    def test_invalid_yaml(self):
        assert parse_front_matter("---\na: [1\n---\n") == {}

    def test_non_mapping(self):
        assert parse_front_matter("---\n- a\n- b\n---\n") == {}

    def test_remove(self):
        assert remove_front_matter("---\na: 1\n---\n<b>x</b>\n") == "<b>x</b>\n"

    def test_remove_without_front_matter(self):
        assert remove_front_matter("<b>x</b>") == "<b>x</b>"


class TestPropertyValue:
    """Tests for property lookup."""

    def test_plain_value(self):
        assert property_value({"a": "Projects"}, "a") == "Projects"

    def test_link_reduced_to_target(self):
        assert property_value({"a": "[Projects](Projects.Tasks)"}, "a") == "Projects.Tasks"

    def test_missing(self):
        assert property_value({}, "a") is None

    def test_non_string(self):
        assert property_value({"a": True}, "a") is True
