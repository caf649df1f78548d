"""Scope-based package checker for Go syntax trees.

The checker binds every identifier of a package to the object it denotes,
walking tree-sitter trees with Go's lexical scopes nested from the universe
scope down to block scopes. It does not infer expression types beyond literals, comparisons and
declared types; what it records is enough for definition/use queries.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from parse.go_imports import default_package_name, extract_imports, package_clause_name
from parse.treesitter_go import (
    block_statements,
    expression_list,
    iter_specs,
    node_text,
    receiver_type_name,
)
from typecheck.objects import UNIVERSE, Object, Scope, TypedPackage, TypeInfo
from workspace.errors import AnalysisError, TypeCheckError

if TYPE_CHECKING:
    from tree_sitter import Node

    from workspace.model import File


ErrorHandler = Callable[[TypeCheckError], None]

COMPARISON_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">="})
LOGICAL_OPERATORS = frozenset({"&&", "||"})

_LITERAL_TYPES = {
    "int_literal": "int",
    "float_literal": "float64",
    "imaginary_literal": "complex128",
    "rune_literal": "rune",
    "interpreted_string_literal": "string",
    "raw_string_literal": "string",
    "true": "bool",
    "false": "bool",
}

_CASE_TYPES = frozenset(
    {"expression_case", "default_case", "communication_case", "type_case"}
)

_SKIPPED_TYPES = frozenset(
    {
        "comment",
        "field_identifier",
        "import_declaration",
        "label_name",
        "package_clause",
    }
)


class Importer(Protocol):
    def import_(self, path: str) -> TypedPackage: ...


def _has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def _operator(node: Node) -> str:
    op = node.child_by_field_name("operator")
    return node_text(op)


class PackageChecker:
    """Checks packages against one importer.

    A single checker is shared by every check in a workspace. Each package
    is registered as an incomplete placeholder before its check starts, so a
    package importing (directly or transitively) a package still under check
    receives the placeholder instead of recursing forever. Packages whose
    check failed stay registered in their partial state.
    """

    def __init__(self) -> None:
        self._packages: dict[str, TypedPackage] = {}

    def lookup(self, import_path: str) -> TypedPackage | None:
        return self._packages.get(import_path)

    def check(
        self,
        import_path: str,
        files: list[File],
        importer: Importer,
        error_handler: ErrorHandler,
        info: TypeInfo,
    ) -> TypedPackage:
        """Check ``files`` as the package ``import_path``.

        Every error is passed to ``error_handler``; ``info`` is filled as far
        as the check gets.

        Raises:
            TypeCheckError: If any error was reported.
        """
        name = package_clause_name(files[0].root) if files else ""
        package = TypedPackage(
            path=import_path, name=name, scope=Scope(parent=UNIVERSE)
        )
        self._packages[import_path] = package
        check = _PackageCheck(self, package, importer, error_handler, info)
        check.run(files)

        if check.errors:
            first = check.errors[0]
            msg = f"{len(check.errors)} error(s) checking {import_path}: {first.message}"
            raise TypeCheckError(msg, file=first.file, line=first.line, column=first.column)

        package.complete = True
        return package


class _PackageCheck:
    """State of a single package check."""

    def __init__(
        self,
        checker: PackageChecker,
        package: TypedPackage,
        importer: Importer,
        error_handler: ErrorHandler,
        info: TypeInfo,
    ) -> None:
        self.checker = checker
        self.package = package
        self.importer = importer
        self.error_handler = error_handler
        self.info = info
        self.errors: list[TypeCheckError] = []
        self._file: File | None = None
        self._dot_imports: list[TypedPackage] = []
        self._handlers: dict[str, Callable[[Node, Scope], None]] = {
            "block": self._visit_block,
            "func_literal": self._visit_func_literal,
            "short_var_declaration": self._visit_short_var,
            "var_declaration": self._visit_value_declaration,
            "const_declaration": self._visit_value_declaration,
            "type_declaration": self._visit_type_declaration,
            "if_statement": self._visit_in_new_scope,
            "for_statement": self._visit_in_new_scope,
            "expression_switch_statement": self._visit_in_new_scope,
            "select_statement": self._visit_in_new_scope,
            "type_switch_statement": self._visit_type_switch,
            "range_clause": self._visit_range_clause,
            "receive_statement": self._visit_receive,
            "parameter_declaration": self._visit_type_only,
            "variadic_parameter_declaration": self._visit_type_only,
            "keyed_element": self._visit_keyed_element,
            "selector_expression": self._visit_selector,
            "qualified_type": self._visit_qualified_type,
            "binary_expression": self._visit_binary,
        }
        for case_type in _CASE_TYPES:
            self._handlers[case_type] = self._visit_in_new_scope

    # -- driver ------------------------------------------------------------

    def run(self, files: list[File]) -> None:
        file_scopes: list[tuple[File, Scope, list[TypedPackage]]] = []

        for file in files:
            self._file = file
            self._collect_package_names(file)
        for file in files:
            self._file = file
            self._collect_methods(file)
        for file in files:
            self._file = file
            scope, dot_imports = self._build_file_scope(file)
            file_scopes.append((file, scope, dot_imports))

        for file, scope, dot_imports in file_scopes:
            self._file = file
            self._dot_imports = dot_imports
            for declaration in file.root.named_children:
                self._check_top_level(declaration, scope)

        self._file = None
        self._dot_imports = []

    # -- package level -----------------------------------------------------

    def _collect_package_names(self, file: File) -> None:
        scope = self.package.scope
        for declaration in file.root.named_children:
            if declaration.type == "function_declaration":
                name_node = declaration.child_by_field_name("name")
                if name_node is None:
                    continue
                obj = self._new_object(name_node, "func", self._signature(declaration))
                if obj.name != "init":
                    scope.insert(obj)
            elif declaration.type == "type_declaration":
                for spec in self._type_specs(declaration):
                    name_node = spec.child_by_field_name("name")
                    if name_node is not None:
                        self._insert(self._new_object(name_node, "type"), scope)
            elif declaration.type in ("var_declaration", "const_declaration"):
                kind = "var" if declaration.type == "var_declaration" else "const"
                spec_type = "var_spec" if kind == "var" else "const_spec"
                for spec in iter_specs(declaration, spec_type):
                    for name_node, type_str in self._spec_bindings(spec):
                        self._insert(self._new_object(name_node, kind, type_str), scope)

    def _collect_methods(self, file: File) -> None:
        for declaration in file.root.named_children:
            if declaration.type != "method_declaration":
                continue
            name_node = declaration.child_by_field_name("name")
            if name_node is None:
                continue
            method = self._new_object(name_node, "method", self._signature(declaration))
            receiver = self.package.scope.names.get(receiver_type_name(declaration))
            if receiver is not None and receiver.kind == "type":
                receiver.methods.setdefault(method.name, method)

    def _build_file_scope(self, file: File) -> tuple[Scope, list[TypedPackage]]:
        scope = Scope(parent=self.package.scope)
        dot_imports: list[TypedPackage] = []
        for spec in extract_imports(file.root):
            if spec.alias == "_":
                continue
            imported = self._import(spec.path, file, spec.line)
            if spec.alias == ".":
                dot_imports.append(imported)
                continue
            scope.insert(
                Object(
                    name=spec.alias or imported.name or default_package_name(spec.path),
                    kind="package",
                    package=spec.path,
                    imported=imported,
                )
            )
        return scope, dot_imports

    def _import(self, path: str, file: File, line: int) -> TypedPackage:
        placeholder = self.checker.lookup(path)
        if placeholder is not None and not placeholder.complete:
            return placeholder
        try:
            return self.importer.import_(path)
        except AnalysisError as exc:
            self._report(
                TypeCheckError(
                    f"could not import {path}: {exc.message}",
                    file=file.path,
                    line=line,
                    column=1,
                    cause=exc,
                )
            )
            return TypedPackage(
                path=path,
                name=default_package_name(path),
                complete=True,
                opaque=True,
            )

    def _check_top_level(self, declaration: Node, scope: Scope) -> None:
        if declaration.type in ("function_declaration", "method_declaration"):
            self._visit_function(declaration, scope)
        elif declaration.type == "type_declaration":
            for spec in self._type_specs(declaration):
                self._check_type_spec(spec, scope)
        elif declaration.type in ("var_declaration", "const_declaration"):
            spec_type = (
                "var_spec" if declaration.type == "var_declaration" else "const_spec"
            )
            for spec in iter_specs(declaration, spec_type):
                self._visit_fields(spec, scope, ("type", "value"))

    # -- declarations ------------------------------------------------------

    @staticmethod
    def _type_specs(declaration: Node) -> list[Node]:
        specs: list[Node] = []
        for child in declaration.named_children:
            if child.type in ("type_spec", "type_alias"):
                specs.append(child)
            elif child.type.endswith("_list"):
                specs.extend(
                    c for c in child.named_children if c.type in ("type_spec", "type_alias")
                )
        return specs

    def _check_type_spec(self, spec: Node, scope: Scope) -> None:
        inner = Scope(parent=scope)
        self._declare_type_parameters(spec.child_by_field_name("type_parameters"), inner)
        type_node = spec.child_by_field_name("type")
        if type_node is not None:
            self._visit(type_node, inner)

    def _spec_bindings(self, spec: Node) -> list[tuple[Node, str | None]]:
        type_node = spec.child_by_field_name("type")
        values = expression_list(spec.child_by_field_name("value"))
        bindings: list[tuple[Node, str | None]] = []
        for index, name_node in enumerate(spec.children_by_field_name("name")):
            if type_node is not None:
                type_str: str | None = node_text(type_node)
            elif len(values) > index:
                type_str = self._default_type(values[index])
            else:
                type_str = None
            bindings.append((name_node, type_str))
        return bindings

    def _declare_type_parameters(self, params: Node | None, scope: Scope) -> None:
        if params is None:
            return
        declarations = [
            c for c in params.named_children if c.type == "type_parameter_declaration"
        ]
        for declaration in declarations:
            for name_node in declaration.children_by_field_name("name"):
                self._define(name_node, scope, "type")
        for declaration in declarations:
            constraint = declaration.child_by_field_name("type")
            if constraint is not None:
                self._visit(constraint, scope)

    def _declare_parameters(self, params: Node | None, scope: Scope) -> None:
        if params is None:
            return
        if params.type != "parameter_list":
            self._visit(params, scope)
            return
        for param in params.named_children:
            if param.type not in (
                "parameter_declaration",
                "variadic_parameter_declaration",
            ):
                continue
            type_node = param.child_by_field_name("type")
            type_str = None
            if type_node is not None:
                self._visit(type_node, scope)
                type_str = node_text(type_node)
                if param.type == "variadic_parameter_declaration":
                    type_str = f"...{type_str}"
            for name_node in param.children_by_field_name("name"):
                self._define(name_node, scope, "var", type_str)

    def _declare_receiver(self, receiver: Node | None, scope: Scope) -> None:
        if receiver is None:
            return
        for param in receiver.named_children:
            if param.type != "parameter_declaration":
                continue
            type_node = param.child_by_field_name("type")
            base = type_node
            while base is not None and base.type in ("pointer_type", "parenthesized_type"):
                base = next(iter(base.named_children), None)
            if base is not None and base.type == "generic_type":
                self._visit_receiver_type_arguments(base, scope)
            elif base is not None:
                self._visit(base, scope)
            for name_node in param.children_by_field_name("name"):
                self._define(name_node, scope, "var", node_text(type_node))

    def _visit_receiver_type_arguments(self, generic: Node, scope: Scope) -> None:
        base_type = generic.child_by_field_name("type")
        if base_type is not None:
            self._visit(base_type, scope)
        arguments = generic.child_by_field_name("type_arguments")
        if arguments is None:
            return
        for argument in arguments.named_children:
            target = argument
            if target.type == "type_elem":
                target = next(iter(target.named_children), target)
            if target.type == "type_identifier":
                self._define(target, scope, "type")

    def _visit_function(self, node: Node, outer: Scope) -> None:
        scope = Scope(parent=outer)
        self._declare_type_parameters(node.child_by_field_name("type_parameters"), scope)
        if node.type == "method_declaration":
            self._declare_receiver(node.child_by_field_name("receiver"), scope)
        self._declare_parameters(node.child_by_field_name("parameters"), scope)
        self._declare_parameters(node.child_by_field_name("result"), scope)
        body = node.child_by_field_name("body")
        for statement in block_statements(body):
            self._visit(statement, scope)

    # -- traversal ---------------------------------------------------------

    def _visit(self, node: Node, scope: Scope) -> None:
        if node.type in _SKIPPED_TYPES:
            return
        handler = self._handlers.get(node.type)
        if handler is not None:
            handler(node, scope)
            return
        if node.type in ("identifier", "type_identifier"):
            self._use(node, scope)
            return
        if node.type in _LITERAL_TYPES:
            self._record_type(node, f"untyped {_LITERAL_TYPES[node.type]}")
        for child in node.named_children:
            self._visit(child, scope)

    def _visit_fields(self, node: Node, scope: Scope, fields: tuple[str, ...]) -> None:
        for name in fields:
            for child in node.children_by_field_name(name):
                self._visit(child, scope)

    def _visit_block(self, node: Node, scope: Scope) -> None:
        inner = Scope(parent=scope)
        for statement in block_statements(node):
            self._visit(statement, inner)

    def _visit_in_new_scope(self, node: Node, scope: Scope) -> None:
        inner = Scope(parent=scope)
        for child in node.named_children:
            self._visit(child, inner)

    def _visit_func_literal(self, node: Node, scope: Scope) -> None:
        self._visit_function(node, scope)

    def _visit_short_var(self, node: Node, scope: Scope) -> None:
        right = expression_list(node.child_by_field_name("right"))
        for expr in right:
            self._visit(expr, scope)
        left = expression_list(node.child_by_field_name("left"))
        for index, target in enumerate(left):
            if target.type != "identifier":
                self._visit(target, scope)
                continue
            name = node_text(target)
            if name in scope.names:
                self._use(target, scope)
                continue
            type_str = None
            if len(left) == len(right):
                type_str = self._default_type(right[index])
            self._define(target, scope, "var", type_str)

    def _visit_value_declaration(self, node: Node, scope: Scope) -> None:
        kind = "var" if node.type == "var_declaration" else "const"
        spec_type = "var_spec" if kind == "var" else "const_spec"
        for spec in iter_specs(node, spec_type):
            self._visit_fields(spec, scope, ("type", "value"))
            for name_node, type_str in self._spec_bindings(spec):
                self._define(name_node, scope, kind, type_str)

    def _visit_type_declaration(self, node: Node, scope: Scope) -> None:
        specs = self._type_specs(node)
        for spec in specs:
            name_node = spec.child_by_field_name("name")
            if name_node is not None:
                self._define(name_node, scope, "type")
        for spec in specs:
            self._check_type_spec(spec, scope)

    def _visit_type_switch(self, node: Node, scope: Scope) -> None:
        inner = Scope(parent=scope)
        self._visit_fields(node, inner, ("initializer", "value"))
        aliases = expression_list(node.child_by_field_name("alias"))
        for child in node.named_children:
            if child.type not in _CASE_TYPES:
                continue
            clause = Scope(parent=inner)
            for alias in aliases:
                if alias.type == "identifier":
                    self._define(alias, clause, "var")
            for part in child.named_children:
                self._visit(part, clause)

    def _visit_range_clause(self, node: Node, scope: Scope) -> None:
        self._visit_fields(node, scope, ("right",))
        left = expression_list(node.child_by_field_name("left"))
        defining = _has_token(node, ":=")
        for target in left:
            if defining and target.type == "identifier":
                self._define(target, scope, "var")
            else:
                self._visit(target, scope)

    def _visit_receive(self, node: Node, scope: Scope) -> None:
        self._visit_fields(node, scope, ("right",))
        left = expression_list(node.child_by_field_name("left"))
        defining = _has_token(node, ":=")
        for target in left:
            if defining and target.type == "identifier":
                self._define(target, scope, "var")
            else:
                self._visit(target, scope)

    def _visit_type_only(self, node: Node, scope: Scope) -> None:
        self._visit_fields(node, scope, ("type",))

    def _visit_keyed_element(self, node: Node, scope: Scope) -> None:
        parts = node.named_children
        if not parts:
            return
        key = parts[0]
        if key.type == "literal_element" and key.named_children:
            key = key.named_children[0]
        if key.type == "identifier":
            # struct field keys are not in any scope
            self._use(key, scope, soft=True)
        else:
            self._visit(key, scope)
        for value in parts[1:]:
            self._visit(value, scope)

    def _visit_selector(self, node: Node, scope: Scope) -> None:
        operand = node.child_by_field_name("operand")
        field_node = node.child_by_field_name("field")
        if operand is None:
            return
        self._visit(operand, scope)
        if operand.type != "identifier" or field_node is None:
            return
        obj = self.info.uses.get(self._key(operand))
        if obj is not None and obj.kind == "package":
            self._use_member(obj, field_node)

    def _visit_qualified_type(self, node: Node, scope: Scope) -> None:
        package_node = node.child_by_field_name("package")
        name_node = node.child_by_field_name("name")
        if package_node is None or name_node is None:
            return
        obj = scope.lookup(node_text(package_node))
        if obj is None or obj.kind != "package":
            self._error(package_node, f"undefined: {node_text(package_node)}")
            return
        self._record_use(package_node, obj)
        self._use_member(obj, name_node)

    def _visit_binary(self, node: Node, scope: Scope) -> None:
        op = _operator(node)
        if op in COMPARISON_OPERATORS or op in LOGICAL_OPERATORS:
            self._record_type(node, "untyped bool")
        for child in node.named_children:
            self._visit(child, scope)

    # -- binding helpers ---------------------------------------------------

    def _key(self, node: Node) -> tuple[str, int]:
        assert self._file is not None
        return (self._file.path, node.start_byte)

    def _new_object(self, name_node: Node, kind: str, type_str: str | None = None) -> Object:
        assert self._file is not None
        obj = Object(
            name=node_text(name_node),
            kind=kind,  # type: ignore[arg-type]
            package=self.package.path,
            file=self._file.path,
            offset=name_node.start_byte,
            type=type_str,
        )
        self.info.defs[self._key(name_node)] = obj
        return obj

    def _insert(self, obj: Object, scope: Scope) -> None:
        if obj.name != "_":
            scope.insert(obj)

    def _define(
        self, name_node: Node, scope: Scope, kind: str, type_str: str | None = None
    ) -> None:
        if node_text(name_node) == "_":
            return
        obj = self._new_object(name_node, kind, type_str)
        scope.names[obj.name] = obj

    def _use(self, node: Node, scope: Scope, *, soft: bool = False) -> None:
        name = node_text(node)
        if name == "_":
            return
        obj = scope.lookup(name)
        if obj is None:
            for imported in self._dot_imports:
                obj = imported.lookup(name)
                if obj is not None:
                    break
        if obj is not None:
            self._record_use(node, obj)
        elif not soft:
            self._error(node, f"undefined: {name}")

    def _use_member(self, package_obj: Object, name_node: Node) -> None:
        imported = package_obj.imported
        if imported is None:
            return
        member = imported.lookup(node_text(name_node))
        if member is not None:
            self._record_use(name_node, member)
        elif imported.complete:
            self._error(
                name_node, f"undefined: {package_obj.name}.{node_text(name_node)}"
            )

    def _record_use(self, node: Node, obj: Object) -> None:
        self.info.uses[self._key(node)] = obj
        if obj.type:
            self._record_type(node, obj.type)

    def _record_type(self, node: Node, type_str: str) -> None:
        assert self._file is not None
        self.info.types[(self._file.path, node.start_byte, node.end_byte)] = type_str

    def _default_type(self, expr: Node) -> str | None:
        if expr.type in _LITERAL_TYPES:
            return _LITERAL_TYPES[expr.type]
        if expr.type == "binary_expression":
            op = _operator(expr)
            if op in COMPARISON_OPERATORS or op in LOGICAL_OPERATORS:
                return "bool"
        if expr.type == "unary_expression" and _operator(expr) == "!":
            return "bool"
        if expr.type == "composite_literal":
            type_node = expr.child_by_field_name("type")
            return node_text(type_node) if type_node is not None else None
        if expr.type == "func_literal":
            return "func"
        return None

    def _signature(self, declaration: Node) -> str:
        params = node_text(declaration.child_by_field_name("parameters"))
        result = declaration.child_by_field_name("result")
        if result is None:
            return f"func{params}"
        return f"func{params} {node_text(result)}"

    def _error(self, node: Node, message: str) -> None:
        assert self._file is not None
        line, column = node.start_point
        self._report(
            TypeCheckError(
                message, file=self._file.path, line=line + 1, column=column + 1
            )
        )

    def _report(self, error: TypeCheckError) -> None:
        self.errors.append(error)
        self.error_handler(error)


__all__ = [
    "COMPARISON_OPERATORS",
    "ErrorHandler",
    "Importer",
    "PackageChecker",
]
