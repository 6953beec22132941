from typing import Optional

from simcl.lexer import Token


class CompilerError(Exception):
    def __init__(self, message, line=None, column=None, file=None, hint=None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.file = file
        self.hint = hint

    def __str__(self):
        loc = ""
        if self.file:
            loc += f"{self.file}:"
        if self.line:
            loc += f"{self.line}:"
        if self.column:
            loc += f"{self.column}:"

        if loc:
            return f"{loc} {self.message}"
        return self.message


class ParserError(CompilerError):
    """Fatal grammar violation. The parse that raised it produced no AST."""

    def __init__(
        self,
        message: str,
        line: int,
        expected: Optional[str] = None,
        found: Optional[Token] = None,
        column: Optional[int] = None,
        file: Optional[str] = None,
    ):
        super().__init__(message, line, column, file)
        self.expected = expected
        self.found = found

    def __str__(self):
        return f"Parser error (line {self.line}): {self.message}"
