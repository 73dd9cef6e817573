"""
Identifier validation for component and namespace names.
"""
import keyword


def is_identifier(name):
    """Return True if `name` can be used as a local binding in generated code."""
    if not isinstance(name, str) or not name.isidentifier():
        return False
    return not keyword.iskeyword(name)
