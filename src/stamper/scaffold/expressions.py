"""Boolean expression evaluation for conditional configuration keys.

Expressions are Jinja2 expressions evaluated against an explicit,
read-only snapshot of resolved variables. Identifiers that are not in
the snapshot are undefined: an expression that refers to a value
that is not known yet is simply false rather than an error. The
script-style operators ``&&``, ``||`` and ``!`` are accepted as aliases
of ``and``, ``or`` and ``not``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from jinja2 import Environment, TemplateError, meta

from stamper.models.slots import Value
from stamper.scaffold.rendering import mangle, rewrite_hyphenated_names

# Unknown names are rejected up front, so the default Undefined is fine here
_ENV = Environment(autoescape=False)

_OPERATOR_RE = re.compile(
    r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'"
    r"|(?P<op>&&|\|\||!(?!=))"
)
_OPERATOR_WORDS = {"&&": " and ", "||": " or ", "!": " not "}


def translate_operators(expression: str) -> str:
    """Rewrite ``&&``, ``||`` and ``!`` into Jinja's keyword operators.

    >>> translate_operators('!is_wasm && crate_type != "lib"')
    ' not is_wasm  and  crate_type != "lib"'
    """

    def _replace(match: re.Match[str]) -> str:
        op = match.group("op")
        if op is None:
            return match.group(0)
        return _OPERATOR_WORDS[op]

    return _OPERATOR_RE.sub(_replace, expression)


def scalar_view(value: Value) -> Value:
    """Expose booleans as booleans and everything else as its string form."""
    if isinstance(value, bool):
        return value
    return str(value)


def evaluate(expression: str, snapshot: Mapping[str, Value]) -> bool:
    """Evaluate a conditional expression against a variable snapshot.

    Args:
        expression: Expression text, e.g. ``is_wasm == true``.
        snapshot: Resolved variables visible to the expression.

    Returns:
        The truth value of the expression. Malformed expressions and
        evaluation errors yield False.
    """
    hyphenated = [name for name in snapshot if "-" in name]
    code = rewrite_hyphenated_names(translate_operators(expression), hyphenated)
    variables: dict[str, Value] = {}
    for name, value in snapshot.items():
        variables[mangle(name)] = scalar_view(value)

    try:
        referenced = meta.find_undeclared_variables(_ENV.parse("{{ (" + code + ") }}"))
        if not referenced <= variables.keys():
            return False
        compiled = _ENV.compile_expression(code)
        result = compiled(**variables)
    except (TemplateError, TypeError, ValueError, ArithmeticError):
        return False
    # Only a genuine boolean true counts; strings and undefined do not
    return result is True
