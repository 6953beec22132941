import logging
from typing import NoReturn, Optional

from simcl.ast_nodes import (
    ASTNode,
    BinaryExpr,
    Block,
    CallExpr,
    ExprStmt,
    Function,
    Identifier,
    Let,
    NumberLiteral,
    Program,
    Return,
    Simulate,
    StringLiteral,
    UnaryExpr,
    While,
)
from simcl.enums import TokenTypes
from simcl.errors import ParserError
from simcl.lexer import Lexer, Token
from simcl.utils.file_utils import get_column, get_line


class Parser:
    """Recursive-descent parser for SimCL.

    Errors are fail-fast: any grammar violation raises ``ParserError`` and
    no AST is returned. The one exception is a token that cannot start a
    statement inside a statement list; it is skipped with a warning and
    parsing continues with the next token.
    """

    # Tokens that can begin an expression statement
    EXPRESSION_START = {
        TokenTypes.NUMBER,
        TokenTypes.STRING,
        TokenTypes.IDENTIFIER,
        TokenTypes.OPEN_PAREN,
        TokenTypes.ADD,
        TokenTypes.SUBTRACT,
    }

    EQUALITY_OPERATORS = (TokenTypes.EQUALS, TokenTypes.NOT_EQUALS)
    RELATIONAL_OPERATORS = (
        TokenTypes.LESS_THAN,
        TokenTypes.LESS_THAN_OR_EQUAL,
        TokenTypes.GREATER_THAN,
        TokenTypes.GREATER_THAN_OR_EQUAL,
    )
    ADDITIVE_OPERATORS = (TokenTypes.ADD, TokenTypes.SUBTRACT)
    MULTIPLICATIVE_OPERATORS = (
        TokenTypes.MULTIPLY,
        TokenTypes.DIVIDE,
        TokenTypes.MODULO,
    )
    UNARY_OPERATORS = (TokenTypes.ADD, TokenTypes.SUBTRACT)

    # Bracketed expressions and blocks recurse; past this many open levels
    # the source is rejected instead of exhausting the interpreter stack
    MAX_NESTING_DEPTH = 48

    # Human readable names used in "expected ..." messages
    TOKEN_DESCRIPTIONS: dict[TokenTypes, str] = {
        TokenTypes.IDENTIFIER: "identifier",
        TokenTypes.LET: "'let'",
        TokenTypes.FUNCTION: "'function'",
        TokenTypes.SIMULATE: "'simulate'",
        TokenTypes.RETURN: "'return'",
        TokenTypes.WHILE: "'while'",
        TokenTypes.OPEN_BRACE: "'{'",
        TokenTypes.CLOSE_BRACE: "'}'",
        TokenTypes.OPEN_PAREN: "'('",
        TokenTypes.CLOSE_PAREN: "')'",
        TokenTypes.ASSIGN: "'='",
    }

    def __init__(self, lexer: Lexer, filename: str = "<input>"):
        self.lexer = lexer
        self.file = lexer.source
        self.filename = filename
        self.warnings: list[tuple[str, int]] = []
        self.depth = 0
        self.current_token: Token = self.lexer.next()

    def advance(self) -> Token:
        """Move to the next token and return the one just consumed."""
        token = self.current_token
        self.current_token = self.lexer.next()
        return token

    def check(self, token_type: TokenTypes) -> bool:
        return self.current_token.type == token_type

    def consume(self, token_type: TokenTypes) -> Optional[Token]:
        """Consume the current token if it is of the given type."""
        if self.check(token_type):
            return self.advance()
        return None

    def expect(self, token_type: TokenTypes) -> Token:
        """Consume a token of the given type or fail the whole parse."""
        if self.check(token_type):
            return self.advance()
        expected = self.TOKEN_DESCRIPTIONS.get(token_type, token_type.value)
        self.error(
            f"Expected {expected} but found {self._describe(self.current_token)}",
            self.current_token,
            expected,
        )

    def error(
        self, text: str, token: Token, expected: Optional[str] = None
    ) -> NoReturn:
        err = ParserError(text, token.line, expected, token, file=self.filename)
        column = get_column(self.file, token.index)
        err.column = column
        line_text = get_line(self.file, token.line)
        logging.error(
            str(err)
            + f"\n> {line_text.strip()}\n"
            + " " * (column - (len(line_text) - len(line_text.lstrip())) + 2)
            + "^"
            + f"\n({self.filename}:{token.line}:{column})"
        )
        raise err

    def warn(self, text: str, token: Token) -> None:
        logging.warning(f"{self.filename}:{token.line}: {text}")
        self.warnings.append((text, token.line))

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenTypes.EOF:
            return "end of input"
        return f"{token.type.value} '{token.value}'"

    def parse(self) -> Program:
        logging.debug("Parsing tokens...")
        try:
            statements = self._parse_statements(closing=None)
        except RecursionError:
            self.error("Program nested too deeply", self.current_token)
        logging.debug(f"Parsed {len(statements)} top-level statements")
        return Program(statements, 1)

    def _parse_statements(self, closing: Optional[TokenTypes]) -> list[ASTNode]:
        """Parse statements until ``closing`` (or end of input) is current."""
        statements: list[ASTNode] = []
        while not self.check(TokenTypes.EOF) and not (
            closing is not None and self.check(closing)
        ):
            if self.check(TokenTypes.SEMICOLON):  # empty statement
                self.advance()
                continue
            stmt = self._parse_statement()
            if stmt is None:
                bad_tok = self.advance()
                self.warn(
                    f"Skipping unexpected token {self._describe(bad_tok)}", bad_tok
                )
                continue
            statements.append(stmt)
        return statements

    def _parse_statement(self) -> Optional[ASTNode]:
        """Dispatch on the current token; None if it cannot start a statement."""
        token_type = self.current_token.type
        if token_type == TokenTypes.LET:
            return self.parse_let()
        if token_type == TokenTypes.FUNCTION:
            return self.parse_function()
        if token_type == TokenTypes.SIMULATE:
            return self.parse_simulate()
        if token_type == TokenTypes.RETURN:
            return self.parse_return()
        if token_type == TokenTypes.WHILE:
            return self.parse_while()
        if token_type in self.EXPRESSION_START:
            return self.parse_expression_statement()
        return None

    def parse_let(self) -> Let:
        let_token = self.expect(TokenTypes.LET)
        name_token = self.expect(TokenTypes.IDENTIFIER)
        self.expect(TokenTypes.ASSIGN)
        value = self.parse_expression()
        self.consume(TokenTypes.SEMICOLON)
        return Let(name_token.value, value, let_token.line)

    def parse_function(self) -> Function:
        """Parse ``function name(a, b) { ... }``."""
        function_token = self.expect(TokenTypes.FUNCTION)
        name_token = self.expect(TokenTypes.IDENTIFIER)
        self.expect(TokenTypes.OPEN_PAREN)

        params: list[Identifier] = []
        if not self.check(TokenTypes.CLOSE_PAREN):
            while True:
                param_token = self.expect(TokenTypes.IDENTIFIER)
                params.append(Identifier(param_token.value, param_token.line))
                if not self.consume(TokenTypes.COMMA):
                    break
        self.expect(TokenTypes.CLOSE_PAREN)

        body = self.parse_block()
        return Function(name_token.value, params, body, function_token.line)

    def parse_simulate(self) -> Simulate:
        simulate_token = self.expect(TokenTypes.SIMULATE)
        body = self.parse_block()
        return Simulate(body, simulate_token.line)

    def parse_return(self) -> Return:
        return_token = self.expect(TokenTypes.RETURN)
        value = self.parse_expression()
        self.consume(TokenTypes.SEMICOLON)
        return Return(value, return_token.line)

    def parse_while(self) -> While:
        while_token = self.expect(TokenTypes.WHILE)
        condition = self.parse_expression()
        body = self.parse_block()
        return While(condition, body, while_token.line)

    def parse_block(self) -> Block:
        """Parse a block enclosed in braces { ... }."""
        open_brace = self.expect(TokenTypes.OPEN_BRACE)
        self._descend(open_brace)
        statements = self._parse_statements(closing=TokenTypes.CLOSE_BRACE)
        self.expect(TokenTypes.CLOSE_BRACE)
        self.depth -= 1
        return Block(statements, open_brace.line)

    def parse_expression_statement(self) -> ExprStmt:
        expr = self.parse_expression()
        self.consume(TokenTypes.SEMICOLON)
        return ExprStmt(expr, expr.line)

    def _descend(self, token: Token) -> None:
        self.depth += 1
        if self.depth > self.MAX_NESTING_DEPTH:
            self.error(
                f"Nested too deeply: more than {self.MAX_NESTING_DEPTH} open "
                "blocks or bracketed expressions",
                token,
            )

    def parse_expression(self) -> ASTNode:
        self._descend(self.current_token)
        node = self.parse_assignment()
        self.depth -= 1
        return node

    def parse_assignment(self) -> ASTNode:
        """Parse right-associative assignment; the target must be a bare identifier."""
        node = self.parse_equality()
        targets: list[tuple[Identifier, Token]] = []
        while self.check(TokenTypes.ASSIGN):
            assign_token = self.current_token
            if not isinstance(node, Identifier):
                self.error(
                    f"Invalid assignment target: expected identifier but found "
                    f"{node.node_type.value}",
                    assign_token,
                    "identifier",
                )
            self.advance()
            targets.append((node, assign_token))
            node = self.parse_equality()

        # a = b = c groups as a = (b = c)
        for target, assign_token in reversed(targets):
            node = BinaryExpr(assign_token.value, target, node, assign_token.line)
        return node

    def _parse_left_assoc(self, operators: tuple, operand) -> ASTNode:
        node = operand()
        while self.current_token.type in operators:
            op_token = self.advance()
            right = operand()
            node = BinaryExpr(op_token.value, node, right, op_token.line)
        return node

    def parse_equality(self) -> ASTNode:
        return self._parse_left_assoc(self.EQUALITY_OPERATORS, self.parse_relational)

    def parse_relational(self) -> ASTNode:
        return self._parse_left_assoc(self.RELATIONAL_OPERATORS, self.parse_additive)

    def parse_additive(self) -> ASTNode:
        return self._parse_left_assoc(
            self.ADDITIVE_OPERATORS, self.parse_multiplicative
        )

    def parse_multiplicative(self) -> ASTNode:
        return self._parse_left_assoc(self.MULTIPLICATIVE_OPERATORS, self.parse_unary)

    def parse_unary(self) -> ASTNode:
        op_tokens: list[Token] = []
        while self.current_token.type in self.UNARY_OPERATORS:
            op_tokens.append(self.advance())
        node = self.parse_primary()
        for op_token in reversed(op_tokens):
            node = UnaryExpr(op_token.value, node, op_token.line)
        return node

    def parse_primary(self) -> ASTNode:
        token = self.current_token
        if token.type == TokenTypes.NUMBER:
            self.advance()
            return NumberLiteral(token.value, token.line)
        if token.type == TokenTypes.STRING:
            self.advance()
            return StringLiteral(token.value, token.line)
        if token.type == TokenTypes.IDENTIFIER:
            self.advance()
            node = Identifier(token.value, token.line)
            if self.check(TokenTypes.OPEN_PAREN):
                return self.parse_call(node)
            return node
        if token.type == TokenTypes.OPEN_PAREN:
            self.advance()  # skip '('
            expr = self.parse_expression()
            self.expect(TokenTypes.CLOSE_PAREN)
            return expr
        self.error(
            f"Expected expression but found {self._describe(token)}",
            token,
            "expression",
        )

    def parse_call(self, callee: Identifier) -> CallExpr:
        """Parse the argument list of ``callee(arg, ...)``."""
        self.expect(TokenTypes.OPEN_PAREN)
        arguments: list[ASTNode] = []
        if not self.check(TokenTypes.CLOSE_PAREN):
            while True:
                arguments.append(self.parse_expression())
                if not self.consume(TokenTypes.COMMA):
                    break
        self.expect(TokenTypes.CLOSE_PAREN)
        return CallExpr(callee, arguments, callee.line)
