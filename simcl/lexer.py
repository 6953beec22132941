import logging
import re
from typing import Iterator, Optional

from simcl.enums import TokenTypes


class Token:
    type: TokenTypes
    value: str
    index: int
    line: int
    end: int

    def __init__(
        self,
        type: TokenTypes,
        value: str,
        index: int,
        line: int,
        end: Optional[int] = None,
    ) -> None:
        self.type = type
        self.value = value
        self.index = index
        self.line = line
        # offset one past the raw lexeme; differs from index + len(value) for strings
        self.end = end if end is not None else index + len(value)

    def __str__(self):
        return f"Token('{self.type.value}', '{self.value}', line {self.line})"

    def __repr__(self):
        return self.__str__()


class Lexer:
    """Pull-based scanner for SimCL source text.

    The lexer holds exactly one current token. Each call to ``next()`` scans
    past whitespace and comments, classifies the next lexeme, replaces
    ``current`` and returns it. Nothing here raises: characters that match
    no rule become ``UNKNOWN`` tokens and are rejected by the parser.
    """

    identifier = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
    number = re.compile(r"(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
    # Newlines are counted separately; other Unicode spaces lex as UNKNOWN
    whitespace = " \t\r\v\f"

    keywords: dict[str, TokenTypes] = {
        "let": TokenTypes.LET,
        "function": TokenTypes.FUNCTION,
        "simulate": TokenTypes.SIMULATE,
        "return": TokenTypes.RETURN,
        "while": TokenTypes.WHILE,
    }

    types: dict[str, TokenTypes] = {
        "int": TokenTypes.INT,
        "float": TokenTypes.FLOAT,
        "double": TokenTypes.DOUBLE,
        "vector": TokenTypes.VECTOR,
        "matrix": TokenTypes.MATRIX,
    }

    keywords = keywords | types

    separators: dict[str, TokenTypes] = {
        "{": TokenTypes.OPEN_BRACE,
        "}": TokenTypes.CLOSE_BRACE,
        "(": TokenTypes.OPEN_PAREN,
        ")": TokenTypes.CLOSE_PAREN,
        ",": TokenTypes.COMMA,
        ";": TokenTypes.SEMICOLON,
    }

    # two-character operators come first so they win over their prefixes
    operators: dict[str, TokenTypes] = {
        "==": TokenTypes.EQUALS,
        "!=": TokenTypes.NOT_EQUALS,
        "<=": TokenTypes.LESS_THAN_OR_EQUAL,
        ">=": TokenTypes.GREATER_THAN_OR_EQUAL,
        "+": TokenTypes.ADD,
        "-": TokenTypes.SUBTRACT,
        "*": TokenTypes.MULTIPLY,
        "/": TokenTypes.DIVIDE,
        "%": TokenTypes.MODULO,
        "=": TokenTypes.ASSIGN,
        "<": TokenTypes.LESS_THAN,
        ">": TokenTypes.GREATER_THAN,
    }

    escapes: dict[str, str] = {
        '"': '"',
        "\\": "\\",
        "n": "\n",
        "t": "\t",
    }

    def __init__(self, source: str = "") -> None:
        self.reset(source)
        self.all_symbols = self.operators | self.separators

    def reset(self, source: str) -> None:
        """Start over at the beginning of ``source`` on line 1."""
        self.source: str = source
        self.pos: int = 0
        self.line: int = 1
        self.current: Token = Token(TokenTypes.EOF, "", 0, 1)

    def next(self) -> Token:
        self._skip_whitespace_and_comments()

        if self.pos >= len(self.source):
            self.current = Token(TokenTypes.EOF, "", self.pos, self.line)
            return self.current

        start = self.pos
        ch = self.source[start]

        match = self.identifier.match(self.source, start)
        if match:
            text = match.group()
            self.pos = match.end()
            token_type = self.keywords.get(text, TokenTypes.IDENTIFIER)
            self.current = Token(token_type, text, start, self.line)
            return self.current

        match = self.number.match(self.source, start)
        if match:
            self.pos = match.end()
            self.current = Token(TokenTypes.NUMBER, match.group(), start, self.line)
            return self.current

        if ch == '"':
            self.current = self._scan_string()
            return self.current

        for symbol, token_type in self.all_symbols.items():
            if self.source.startswith(symbol, start):
                self.pos += len(symbol)
                self.current = Token(token_type, symbol, start, self.line)
                return self.current

        self.pos += 1
        self.current = Token(TokenTypes.UNKNOWN, ch, start, self.line)
        return self.current

    def tokenize(self) -> list[Token]:
        """Scan from the current position and return every token before end-of-stream."""
        logging.debug("tokenizing source")
        return list(self)

    def raw(self, token: Token) -> str:
        """Return the source text a token was scanned from."""
        return self.source[token.index:token.end]

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            if token.type == TokenTypes.EOF:
                return
            yield token

    def _skip_whitespace_and_comments(self) -> None:
        source = self.source
        while self.pos < len(source):
            ch = source[self.pos]
            if ch == "\n":
                self.line += 1
                self.pos += 1
            elif ch in self.whitespace:
                self.pos += 1
            elif source.startswith("//", self.pos):
                end = source.find("\n", self.pos)
                self.pos = len(source) if end == -1 else end
            elif source.startswith("/*", self.pos):
                end = source.find("*/", self.pos + 2)
                if end == -1:
                    logging.warning(
                        f"Unterminated block comment starting on line {self.line}"
                    )
                    stop = len(source)
                else:
                    stop = end + 2
                self.line += source.count("\n", self.pos, stop)
                self.pos = stop
            else:
                break

    def _scan_string(self) -> Token:
        source = self.source
        start = self.pos
        start_line = self.line
        chars: list[str] = []
        self.pos += 1  # opening quote

        while self.pos < len(source):
            ch = source[self.pos]
            if ch == '"':
                self.pos += 1
                return Token(
                    TokenTypes.STRING, "".join(chars), start, start_line, self.pos
                )
            if ch == "\\" and self.pos + 1 < len(source):
                escaped = source[self.pos + 1]
                # unknown escapes keep the escaped character as-is
                chars.append(self.escapes.get(escaped, escaped))
                if escaped == "\n":
                    self.line += 1
                self.pos += 2
                continue
            if ch == "\n":
                self.line += 1
            chars.append(ch)
            self.pos += 1

        logging.warning(f"Unterminated string starting on line {start_line}")
        return Token(TokenTypes.STRING, "".join(chars), start, start_line, self.pos)
