"""
Semantic analyzer for SimCL.

Builds the chain of lexical scopes that mirrors the program's block and
function structure and registers every declaration in it. Types are only
recorded (``Function`` for functions, ``Unknown`` for everything else);
no type checking happens yet.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from simcl.ast_nodes import ASTNode
from simcl.enums import NodeTypes, SimCLType
from simcl.symbol_table import SymbolTable


@dataclass
class _LeaveScope:
    scope: SymbolTable
    keep: bool = False


class SemanticAnalyzer:
    """
    Walks a Program AST with an explicit current-scope register.

    Responsibilities:
    - Open a scope for the program, every block and every function body
    - Register let bindings, functions and parameters
    - Resolve identifier uses against the scope chain (None if undeclared)
    - Report node kinds it does not know how to handle
    """

    def __init__(self, ast: ASTNode, source_file: Optional[str] = None):
        self.ast = ast
        self.source_file = source_file
        self.warnings: list[str] = []

        self.globals = SymbolTable(None)
        self.current_scope: SymbolTable = self.globals

        # Scope opened for the Program node; kept after analysis as the
        # resolved top-level view for later stages
        self.program_scope: Optional[SymbolTable] = None

    def analyze(self) -> bool:
        """
        Run semantic analysis on the AST.
        Nothing is rejected yet: problems such as undeclared names or
        unknown node kinds are logged and analysis always succeeds.
        """
        try:
            self._analyze_node(self.ast)
        finally:
            self.current_scope = self.globals
        return True

    def _enter_scope(self) -> SymbolTable:
        """Enter a new lexical scope nested in the current one."""
        self.current_scope = SymbolTable(self.current_scope)
        logging.debug(f"Entering scope at depth {self.current_scope.depth}")
        return self.current_scope

    def _exit_scope(self, scope: SymbolTable, keep: bool = False) -> None:
        """Restore the enclosing scope, freeing ``scope`` unless asked to keep it."""
        logging.debug(f"Leaving scope at depth {scope.depth}")
        self.current_scope = scope.parent
        if not keep:
            scope.free()

    def lookup(self, name: str):
        return self.current_scope.lookup(name)

    def _analyze_node(self, root: Optional[ASTNode]) -> None:
        """Analyze a subtree in source order.

        Uses an explicit work stack so long expression chains and deep
        nesting do not hit the interpreter's recursion limit. A
        ``_LeaveScope`` entry closes the scope its node opened once every
        item pushed after it has been processed.
        """
        stack: list = [root]
        while stack:
            node = stack.pop()
            if node is None:
                continue
            if isinstance(node, _LeaveScope):
                self._exit_scope(node.scope, keep=node.keep)
                continue

            node_type = getattr(node, "node_type", None)

            # Program and blocks: new scope around the statement list
            if node_type in (NodeTypes.PROGRAM, NodeTypes.BLOCK):
                is_program = node_type == NodeTypes.PROGRAM
                scope = self._enter_scope()
                if is_program:
                    self.program_scope = scope
                stack.append(_LeaveScope(scope, keep=is_program))
                stack.extend(reversed(node.statements))

            # Let: no type inference yet, the binding is always Unknown
            elif node_type == NodeTypes.LET:
                self.current_scope.add(node.name, SimCLType.UNKNOWN, node.line)
                stack.append(node.value)

            # Function: name goes in the enclosing scope, parameters in a new one
            elif node_type == NodeTypes.FUNCTION:
                self.current_scope.add(node.name, SimCLType.FUNCTION, node.line)
                scope = self._enter_scope()
                for param in node.params:
                    param.symbol = scope.add(param.name, SimCLType.UNKNOWN, param.line)
                stack.append(_LeaveScope(scope))
                stack.append(node.body)

            elif node_type in (NodeTypes.RETURN, NodeTypes.EXPR_STMT):
                stack.extend(reversed(node.children))

            elif node_type == NodeTypes.WHILE:
                stack.append(node.body)
                stack.append(node.condition)

            elif node_type == NodeTypes.SIMULATE:
                stack.append(node.body)

            elif node_type == NodeTypes.BINARY_EXPR:
                stack.append(node.right)
                stack.append(node.left)

            elif node_type == NodeTypes.UNARY_EXPR:
                stack.append(node.operand)

            elif node_type == NodeTypes.CALL_EXPR:
                stack.extend(reversed(node.args))
                stack.append(node.callee)

            # Identifier use: record what it resolves to; undeclared is not an error here
            elif node_type == NodeTypes.IDENTIFIER:
                node.symbol = self.lookup(node.name)
                if node.symbol is None:
                    logging.debug(
                        f"Identifier '{node.name}' on line {node.line} is undeclared"
                    )

            elif node_type in (NodeTypes.NUMBER_LITERAL, NodeTypes.STRING_LITERAL):
                pass

            else:
                message = f"Semantic: unhandled AST node kind {node_type}"
                logging.warning(message)
                self.warnings.append(message)
