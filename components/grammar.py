"""
Markup Grammar Definition.

This module contains the Lark grammar for one markup element embedded in
snippet code: `<Card title="x" {...rest}>Hello {name}</Card>`. The scanner in
components/transformer.py finds the extent of each element; this grammar
parses it.
"""

markup_grammar = r"""
    start: element

    ?element: self_closing | paired | fragment

    self_closing: "<" tag_name attributes _WS? "/>"
    paired: "<" tag_name attributes _WS? ">" _child* "</" _WS? tag_name _WS? ">"
    fragment: "<>" _child* "</>"

    tag_name: TAG_NAME
    attributes: (_WS attribute)*

    attribute: ATTR_NAME _WS? "=" _WS? STRING    -> string_attribute
             | ATTR_NAME _WS? "=" _WS? embed     -> expression_attribute
             | ATTR_NAME                          -> flag_attribute
             | embed                              -> spread_attribute

    _child: text | embed | element
    text: TEXT

    // --- Embedded code ---
    embed: LBRACE _embed_part* RBRACE
    nested: LBRACE _embed_part* RBRACE
    _embed_part: EMBED_TEXT | nested

    // --- Terminals ---
    TAG_NAME: /[A-Za-z_][\w\-]*(\.[A-Za-z_]\w*)*/
    ATTR_NAME: /[A-Za-z_][\w\-:]*/
    STRING: /"[^"]*"|'[^']*'/
    TEXT: /[^<>{}]+/
    EMBED_TEXT: /[^{}]+/
    LBRACE: "{"
    RBRACE: "}"
    _WS: /\s+/
"""
