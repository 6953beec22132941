from enum import Enum


class NodeTypes(Enum):
    PROGRAM = "Program"
    BLOCK = "Block"
    LET = "Let"
    FUNCTION = "Function"
    RETURN = "Return"
    WHILE = "While"
    SIMULATE = "Simulate"
    EXPR_STMT = "ExprStmt"
    BINARY_EXPR = "BinaryExpr"
    UNARY_EXPR = "UnaryExpr"
    NUMBER_LITERAL = "NumberLiteral"
    STRING_LITERAL = "StringLiteral"
    IDENTIFIER = "Identifier"
    CALL_EXPR = "CallExpr"


class TokenTypes(Enum):
    EOF = "EOF"
    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    STRING = "STRING"

    # keywords
    LET = "LET"
    FUNCTION = "FUNCTION"
    SIMULATE = "SIMULATE"
    RETURN = "RETURN"
    WHILE = "WHILE"

    # reserved type names, not used by the grammar yet
    INT = "INT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    VECTOR = "VECTOR"
    MATRIX = "MATRIX"

    OPEN_BRACE = "OPEN_BRACE"
    CLOSE_BRACE = "CLOSE_BRACE"
    OPEN_PAREN = "OPEN_PAREN"
    CLOSE_PAREN = "CLOSE_PAREN"
    COMMA = "COMMA"
    SEMICOLON = "SEMICOLON"

    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"
    MODULO = "MODULO"
    ASSIGN = "ASSIGN"
    EQUALS = "EQUALS"
    NOT_EQUALS = "NOT_EQUALS"
    LESS_THAN = "LESS_THAN"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"

    UNKNOWN = "UNKNOWN"


class SimCLType(Enum):
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    VECTOR = "vector"
    MATRIX = "matrix"
    FUNCTION = "function"
    VOID = "void"
    UNKNOWN = "unknown"
