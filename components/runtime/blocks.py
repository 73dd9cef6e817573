# ==========================================
# BLOCK EVALUATION
# ==========================================
import ast


def evaluate_block(code, bindings, filename="<inline>"):
    """
    Run a block of statements and return the value of its last expression.

    Returns None when the block does not end in an expression statement.
    """
    tree = ast.parse(code, filename=filename, mode="exec")
    namespace = dict(bindings)
    if not tree.body or not isinstance(tree.body[-1], ast.Expr):
        exec(compile(tree, filename, "exec"), namespace)
        return None

    last = ast.Expression(body=tree.body.pop().value)
    if tree.body:
        exec(compile(tree, filename, "exec"), namespace)
    return eval(compile(last, filename, "eval"), namespace)
