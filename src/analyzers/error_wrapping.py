"""Detects returned errors that drop their cause or their context.

Only functions declaring an ``error`` result are inspected. Three shapes are
flagged on ``return`` statements:

- ``return err``: the error leaves unwrapped (``bare_return``, critical)
- ``fmt.Errorf("...: %v", err)``: the cause is formatted, not wrapped
  (``format_verb_v_instead_of_w``, critical)
- ``fmt.Errorf("failed: %w", err)``: wrapped without a useful message
  (``no_context``, warning)

Error variables are recognised by name only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from artifacts.models.artifacts.diagnostics import (
    ErrorWrappingSeverity,
    ErrorWrappingViolation,
    ErrorWrappingViolationType,
)
from parse.treesitter_go import (
    FUNCTION_TYPES,
    expression_list,
    function_name,
    node_text,
    walk,
)

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace

DEFAULT_SEVERITY: ErrorWrappingSeverity = "critical"

_GENERIC_MESSAGES = frozenset(
    {
        "",
        "error",
        "err",
        "failed",
        "failure",
        "fail",
        "something went wrong",
        "unexpected error",
    }
)

_SEVERITY_FILTER: dict[ErrorWrappingSeverity, frozenset[ErrorWrappingSeverity]] = {
    "critical": frozenset({"critical"}),
    "warning": frozenset({"critical", "warning"}),
    "info": frozenset({"critical", "warning", "info"}),
}

_STRING_LITERAL_TYPES = frozenset({"interpreted_string_literal", "raw_string_literal"})


def is_error_var_name(name: str) -> bool:
    """Return True when ``name`` reads like an error variable.

    Examples:
        >>> is_error_var_name("err")
        True
        >>> is_error_var_name("errNotFound")
        True
        >>> is_error_var_name("parseError")
        True
        >>> is_error_var_name("result")
        False
    """
    lower = name.lower()
    return (
        lower.endswith("err") or lower.endswith("error") or lower.startswith("err")
    )


def is_generic_message(message: str) -> bool:
    return message.lower() in _GENERIC_MESSAGES


def suggest_context(function: str) -> str:
    """Split a function name into lower-case words for an error message.

    Examples:
        >>> suggest_context("CreateOrder")
        'create order'
        >>> suggest_context("getUser")
        'get user'
        >>> suggest_context("")
        ''
    """
    words: list[str] = []
    current = ""
    for index, char in enumerate(function):
        if index > 0 and "A" <= char <= "Z" and current:
            words.append(current.lower())
            current = ""
        current += char
    if current:
        words.append(current.lower())
    return " ".join(words)


def returns_error(declaration: Node) -> bool:
    result = declaration.child_by_field_name("result")
    if result is None:
        return False
    if result.type == "parameter_list":
        return any(
            node_text(param.child_by_field_name("type")) == "error"
            for param in result.named_children
            if param.type == "parameter_declaration"
        )
    return result.type == "type_identifier" and node_text(result) == "error"


def _errorf_call(expr: Node) -> tuple[str, list[Node]] | None:
    """Return the format literal and arguments of a ``fmt.Errorf`` call."""
    if expr.type != "call_expression":
        return None
    function = expr.child_by_field_name("function")
    if function is None or function.type != "selector_expression":
        return None
    operand = function.child_by_field_name("operand")
    if (
        operand is None
        or operand.type != "identifier"
        or node_text(operand) != "fmt"
        or node_text(function.child_by_field_name("field")) != "Errorf"
    ):
        return None

    arguments = expr.child_by_field_name("arguments")
    args = [
        a for a in (arguments.named_children if arguments else []) if a.type != "comment"
    ]
    if len(args) < 2 or args[0].type not in _STRING_LITERAL_TYPES:
        return None
    return node_text(args[0]), args


class ErrorWrappingAnalyzer:
    """Flags ``return`` statements that hand back poorly wrapped errors.

    ``severity`` filters results: ``critical`` keeps bare returns and ``%v``
    formatting, ``warning`` adds missing context, ``info`` keeps everything.
    """

    def __init__(self, severity: str = DEFAULT_SEVERITY) -> None:
        self.severity: ErrorWrappingSeverity = (
            cast("ErrorWrappingSeverity", severity)
            if severity in _SEVERITY_FILTER
            else DEFAULT_SEVERITY
        )

    def _violation(
        self,
        file: File,
        function: str,
        statement: Node,
        kind: ErrorWrappingViolationType,
        severity: ErrorWrappingSeverity,
    ) -> ErrorWrappingViolation | None:
        if severity not in _SEVERITY_FILTER[self.severity]:
            return None
        position = file.position(statement.start_byte)
        return ErrorWrappingViolation(
            file=file.path,
            line=position.line,
            column=position.column,
            function=function,
            violation_type=kind,
            current_code=file.text(statement).strip(),
            context_suggestion=suggest_context(function),
            severity=severity,
        )

    def _check_expression(
        self, file: File, function: str, statement: Node, expr: Node
    ) -> ErrorWrappingViolation | None:
        if expr.type == "identifier":
            if not is_error_var_name(node_text(expr)):
                return None
            return self._violation(file, function, statement, "bare_return", "critical")

        call = _errorf_call(expr)
        if call is None:
            return None
        fmt_text, args = call

        if "%v" in fmt_text and "%w" not in fmt_text:
            last = args[-1]
            if last.type == "identifier" and is_error_var_name(node_text(last)):
                return self._violation(
                    file, function, statement, "format_verb_v_instead_of_w", "critical"
                )

        if "%w" in fmt_text:
            message = fmt_text.strip('"').replace("%w", "", 1).strip().rstrip(": ")
            if is_generic_message(message):
                return self._violation(
                    file, function, statement, "no_context", "warning"
                )
        return None

    def analyze_file(self, file: File) -> list[ErrorWrappingViolation]:
        violations: list[ErrorWrappingViolation] = []
        for declaration in file.root.named_children:
            if declaration.type not in FUNCTION_TYPES or not returns_error(declaration):
                continue
            body = declaration.child_by_field_name("body")
            if body is None:
                continue
            name = function_name(declaration)
            for node in walk(body):
                if node.type != "return_statement":
                    continue
                results = next(
                    (c for c in node.named_children if c.type != "comment"), None
                )
                for expr in expression_list(results):
                    violation = self._check_expression(file, name, node, expr)
                    if violation is not None:
                        violations.append(violation)
        return violations

    def analyze_package(self, pkg: Package) -> list[ErrorWrappingViolation]:
        violations: list[ErrorWrappingViolation] = []
        for file in pkg.files.values():
            violations.extend(self.analyze_file(file))
        return violations

    def analyze_workspace(self, ws: Workspace) -> list[ErrorWrappingViolation]:
        violations: list[ErrorWrappingViolation] = []
        for pkg in ws.packages.values():
            violations.extend(self.analyze_package(pkg))
        return violations


__all__ = [
    "DEFAULT_SEVERITY",
    "ErrorWrappingAnalyzer",
    "is_error_var_name",
    "is_generic_message",
    "returns_error",
    "suggest_context",
]
