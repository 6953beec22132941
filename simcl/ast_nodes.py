import logging
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, ClassVar, Iterator, Optional

from simcl.enums import NodeTypes

if TYPE_CHECKING:
    from simcl.symbol_table import Symbol


MAX_OPERATOR_LENGTH = 3


class ASTNode:
    """Base of every SimCL syntax tree node.

    Each subclass holds only the fields its kind needs. Sibling lists
    (statements, parameters, arguments) are plain Python lists kept in
    source order. A node owns everything reachable through ``children``;
    no node is ever shared between two parents.

    ``children`` lists owned sub-nodes in a fixed order: statement or
    argument list first, then the value slot, then parameters, then the
    left and right operands. ``walk()`` visits every owned node exactly
    once in that order.
    """

    node_type: ClassVar[NodeTypes]
    line: int

    @property
    def children(self) -> list["ASTNode"]:
        return []

    def walk(self) -> Iterator["ASTNode"]:
        stack: list[ASTNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def label(self) -> str:
        return self.node_type.value

    def display_children(self) -> list["ASTNode"]:
        return self.children

    def tree(self, prefix: str = "", is_last: bool = True) -> str:
        lines = []
        stack = [(self, prefix, is_last)]
        while stack:
            node, node_prefix, node_is_last = stack.pop()
            line_content = node.label()
            if node_prefix == "":
                lines.append(line_content)
            else:
                connector = "└── " if node_is_last else "├── "
                lines.append(node_prefix + connector + line_content)
            new_prefix = node_prefix + ("    " if node_is_last else "│   ")
            childs = node.display_children()
            for i in range(len(childs) - 1, -1, -1):
                stack.append((childs[i], new_prefix, i == len(childs) - 1))
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain nested-dict view of the subtree, annotations excluded."""
        # reversed pre-order converts every child before its parent
        converted: dict[int, dict] = {}
        for node in reversed(list(self.walk())):
            result: dict = {"kind": node.node_type.value}
            for f in fields(node):
                if not f.compare:
                    continue
                value = getattr(node, f.name)
                if isinstance(value, ASTNode):
                    value = converted[id(value)]
                elif isinstance(value, list):
                    value = [converted[id(item)] for item in value]
                result[f.name] = value
            converted[id(node)] = result
        return converted[id(self)]

    def __str__(self) -> str:
        return self.tree()

    def __repr__(self):
        return self.__str__()


def _require_name(node: ASTNode, name: Optional[str]) -> None:
    if not name:
        logging.error(f"{node.node_type.value} node constructed without a name")
        raise ValueError(f"{node.node_type.value} node requires a non-empty name")


def _require_operator(node: ASTNode, op: Optional[str]) -> None:
    if not op or len(op) > MAX_OPERATOR_LENGTH:
        logging.error(f"{node.node_type.value} node constructed with operator {op!r}")
        raise ValueError(
            f"{node.node_type.value} node requires an operator of 1 to "
            f"{MAX_OPERATOR_LENGTH} characters, got {op!r}"
        )


def _require_nodes(node: ASTNode, items: list) -> None:
    if any(item is None for item in items):
        logging.error(
            f"{node.node_type.value} node received None in its child list: {items}"
        )
        raise ValueError(
            f"{node.node_type.value} node received None in its child list. "
            "This indicates a bug in a parser rule."
        )


@dataclass(repr=False)
class Program(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.PROGRAM

    statements: list[ASTNode] = field(default_factory=list)
    line: int = 1

    def __post_init__(self):
        _require_nodes(self, self.statements)

    @property
    def children(self) -> list[ASTNode]:
        return list(self.statements)


@dataclass(repr=False)
class Block(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.BLOCK

    statements: list[ASTNode] = field(default_factory=list)
    line: int = 0

    def __post_init__(self):
        _require_nodes(self, self.statements)

    @property
    def children(self) -> list[ASTNode]:
        return list(self.statements)


@dataclass(repr=False)
class Let(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.LET

    name: str
    value: ASTNode
    line: int = 0

    def __post_init__(self):
        _require_name(self, self.name)

    @property
    def children(self) -> list[ASTNode]:
        return [self.value]

    def label(self) -> str:
        return f"{self.node_type.value} {self.name}"


@dataclass(repr=False)
class Identifier(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.IDENTIFIER

    name: str
    line: int = 0
    # filled in by the semantic pass; None means undeclared
    symbol: Optional["Symbol"] = field(default=None, compare=False)

    def __post_init__(self):
        _require_name(self, self.name)

    def label(self) -> str:
        return f"{self.node_type.value} {self.name}"


@dataclass(repr=False)
class Function(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.FUNCTION

    name: str
    params: list[Identifier]
    body: "Block"
    line: int = 0

    def __post_init__(self):
        _require_name(self, self.name)
        _require_nodes(self, self.params)

    @property
    def children(self) -> list[ASTNode]:
        return [self.body, *self.params]

    def display_children(self) -> list[ASTNode]:
        return [self.body]

    def label(self) -> str:
        params = ", ".join(param.name for param in self.params)
        return f"{self.node_type.value} {self.name}({params})"


@dataclass(repr=False)
class Return(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.RETURN

    value: ASTNode
    line: int = 0

    @property
    def children(self) -> list[ASTNode]:
        return [self.value]


@dataclass(repr=False)
class While(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.WHILE

    condition: ASTNode
    body: Block
    line: int = 0

    @property
    def children(self) -> list[ASTNode]:
        return [self.body, self.condition]

    def display_children(self) -> list[ASTNode]:
        return [self.condition, self.body]


@dataclass(repr=False)
class Simulate(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.SIMULATE

    body: Block
    line: int = 0

    @property
    def children(self) -> list[ASTNode]:
        return [self.body]


@dataclass(repr=False)
class ExprStmt(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.EXPR_STMT

    expression: ASTNode
    line: int = 0

    @property
    def children(self) -> list[ASTNode]:
        return [self.expression]


@dataclass(repr=False)
class BinaryExpr(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.BINARY_EXPR

    op: str
    left: ASTNode
    right: ASTNode
    line: int = 0

    def __post_init__(self):
        _require_operator(self, self.op)

    @property
    def children(self) -> list[ASTNode]:
        return [self.left, self.right]

    def label(self) -> str:
        return f"{self.node_type.value} {self.op}"


@dataclass(repr=False)
class UnaryExpr(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.UNARY_EXPR

    op: str
    operand: ASTNode
    line: int = 0

    def __post_init__(self):
        _require_operator(self, self.op)

    @property
    def children(self) -> list[ASTNode]:
        return [self.operand]

    def label(self) -> str:
        return f"{self.node_type.value} {self.op}"


@dataclass(repr=False)
class NumberLiteral(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.NUMBER_LITERAL

    literal: str
    line: int = 0

    def label(self) -> str:
        return f"{self.node_type.value} {self.literal}"


@dataclass(repr=False)
class StringLiteral(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.STRING_LITERAL

    literal: str
    line: int = 0

    def label(self) -> str:
        return f"{self.node_type.value} {self.literal!r}"


@dataclass(repr=False)
class CallExpr(ASTNode):
    node_type: ClassVar[NodeTypes] = NodeTypes.CALL_EXPR

    callee: ASTNode
    args: list[ASTNode] = field(default_factory=list)
    line: int = 0

    def __post_init__(self):
        _require_nodes(self, self.args)

    @property
    def children(self) -> list[ASTNode]:
        return [*self.args, self.callee]

    def display_children(self) -> list[ASTNode]:
        return [self.callee, *self.args]
