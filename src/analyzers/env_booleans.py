"""Detects environment flags (``isTest``, ``debug``, ...) passed as bool params.

A flag parameter is reported once it is forwarded to at least ``max_depth``
calls inside the function body; the call chain lists the callees in source
order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.artifacts.diagnostics import EnvBooleanViolation, EnvPattern
from parse.treesitter_go import FUNCTION_TYPES, function_name, node_text, walk

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File, Package, Workspace

DEFAULT_MAX_DEPTH = 1

ENV_BOOL_NAMES = frozenset(
    {
        "istest",
        "isprod",
        "isproduction",
        "isdev",
        "isdevelopment",
        "islocal",
        "isstaging",
        "isdebug",
        "testmode",
        "devmode",
        "debugmode",
        "prodmode",
        "production",
        "debug",
        "testing",
    }
)

_INTERFACE_HINTS = ("mode", "prod", "test", "dev", "staging", "local")


def is_env_bool_name(name: str) -> bool:
    return name.lower() in ENV_BOOL_NAMES


def suggest_env_pattern(name: str) -> EnvPattern:
    """Pick the replacement pattern for an environment flag.

    Examples:
        >>> suggest_env_pattern("isProd")
        'interface_implementation'
        >>> suggest_env_pattern("debug")
        'concrete_value'
        >>> suggest_env_pattern("debugMode")
        'interface_implementation'
    """
    lower = name.lower()
    if any(hint in lower for hint in _INTERFACE_HINTS):
        return "interface_implementation"
    if "debug" in lower:
        return "concrete_value"
    return "interface_implementation"


def build_env_suggestion(name: str, pattern: EnvPattern) -> str:
    if pattern == "concrete_value":
        return (
            f"Replace '{name}' parameter with the concrete value it controls. "
            "Resolve the value at initialization time"
        )
    return (
        f"Replace '{name}' parameter with an interface. Define separate "
        "implementations for each environment (e.g., ProdService, TestService)"
    )


def _call_name(call: Node) -> str:
    function = call.child_by_field_name("function")
    if function is None:
        return ""
    if function.type == "identifier":
        return node_text(function)
    if function.type == "selector_expression":
        operand = function.child_by_field_name("operand")
        field = node_text(function.child_by_field_name("field"))
        if operand is not None and operand.type == "identifier":
            return f"{node_text(operand)}.{field}"
        return field
    return ""


def trace_propagation(body: Node | None, name: str) -> list[str]:
    """Callees that receive ``name`` as a direct argument, in source order."""
    callees: list[str] = []
    if body is None:
        return callees
    for node in walk(body):
        if node.type != "call_expression":
            continue
        arguments = node.child_by_field_name("arguments")
        if arguments is None:
            continue
        for arg in arguments.named_children:
            if arg.type == "identifier" and node_text(arg) == name:
                callee = _call_name(node)
                if callee:
                    callees.append(callee)
    return callees


def _bool_params(declaration: Node) -> list[Node]:
    params = declaration.child_by_field_name("parameters")
    if params is None:
        return []
    names: list[Node] = []
    for param in params.named_children:
        if param.type != "parameter_declaration":
            continue
        type_node = param.child_by_field_name("type")
        if type_node is None or type_node.type != "type_identifier":
            continue
        if node_text(type_node) == "bool":
            names.extend(param.children_by_field_name("name"))
    return names


class EnvBooleanAnalyzer:
    """Reports environment bool parameters that spread through call chains."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth if max_depth >= 0 else DEFAULT_MAX_DEPTH

    def analyze_file(self, file: File) -> list[EnvBooleanViolation]:
        violations: list[EnvBooleanViolation] = []
        for declaration in file.root.named_children:
            if declaration.type not in FUNCTION_TYPES:
                continue
            function = function_name(declaration)
            body = declaration.child_by_field_name("body")
            for name_node in _bool_params(declaration):
                name = node_text(name_node)
                if not is_env_bool_name(name):
                    continue
                chain = [function, *trace_propagation(body, name)]
                depth = len(chain) - 1
                if depth < self.max_depth:
                    continue

                pattern = suggest_env_pattern(name)
                position = file.position(name_node.start_byte)
                violations.append(
                    EnvBooleanViolation(
                        file=file.path,
                        line=position.line,
                        column=position.column,
                        function=function,
                        parameter_name=name,
                        propagation_depth=depth,
                        call_chain=chain,
                        suggested_pattern=pattern,
                        suggestion=build_env_suggestion(name, pattern),
                    )
                )
        return violations

    def analyze_package(self, pkg: Package) -> list[EnvBooleanViolation]:
        violations: list[EnvBooleanViolation] = []
        for file in pkg.files.values():
            violations.extend(self.analyze_file(file))
        return violations

    def analyze_workspace(self, ws: Workspace) -> list[EnvBooleanViolation]:
        violations: list[EnvBooleanViolation] = []
        for pkg in ws.packages.values():
            violations.extend(self.analyze_package(pkg))
        return violations


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "ENV_BOOL_NAMES",
    "EnvBooleanAnalyzer",
    "build_env_suggestion",
    "is_env_bool_name",
    "suggest_env_pattern",
    "trace_propagation",
]
