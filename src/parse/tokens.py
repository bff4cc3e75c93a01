from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    NUMBER = auto()  # numeric literal, optionally negative
    STR_LIT = auto()  # quoted string literal, quotes stripped
    IDENTIFIER = auto()  # alphanumeric identifier
    FN_IDENTIFIER = auto()  # name in a function header
    PARAMETER = auto()  # parameter name in a function header

    OPERATOR = auto()  # + - * / ^ = ! % .
    COMPARISON = auto()  # == != < > <= >=
    FLINQ = auto()  # => or flinq
    LLINQ = auto()  # -> or llinq

    COMMA = auto()  # ,
    COLON = auto()  # :
    LEFT_BRACE = auto()  # {
    LEFT_PAREN = auto()  # (
    LEFT_SQUARE_BRACKET = auto()  # [
    RIGHT_BRACE = auto()  # }
    RIGHT_PAREN = auto()  # )
    RIGHT_SQUARE_BRACKET = auto()  # ]
    SEMICOLON = auto()  # ;

    CONST = auto()  # const
    ELSE = auto()  # else
    FUNCTION = auto()  # function
    IF = auto()  # if
    IN = auto()  # in
    LET = auto()  # let
    PRINT = auto()  # print
    THEN = auto()  # then

    EOF = auto()

    def __str__(self):
        return self.name

    __repr__ = __str__


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __str__(self):
        return f"<{self.kind}: {repr(self.text)} at {self.line}:{self.column}>"

    __repr__ = __str__


KEYWORDS = {
    "const": TokenKind.CONST,
    "else": TokenKind.ELSE,
    "flinq": TokenKind.FLINQ,
    "function": TokenKind.FUNCTION,
    "if": TokenKind.IF,
    "in": TokenKind.IN,
    "let": TokenKind.LET,
    "llinq": TokenKind.LLINQ,
    "print": TokenKind.PRINT,
    "then": TokenKind.THEN,
}

SYNTAX = {
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "[": TokenKind.LEFT_SQUARE_BRACKET,
    "]": TokenKind.RIGHT_SQUARE_BRACKET,
    ";": TokenKind.SEMICOLON,
}

# single-character operators; "=", "-", "!", "<" and ">" may also start a
# two-character token and are resolved with one character of lookahead
OPERATORS = {"+", "-", "*", "/", "^", "=", "!", "%", "."}

TWO_CHAR_TOKENS = {
    "=>": TokenKind.FLINQ,
    "->": TokenKind.LLINQ,
    "==": TokenKind.COMPARISON,
    "!=": TokenKind.COMPARISON,
    ">=": TokenKind.COMPARISON,
    "<=": TokenKind.COMPARISON,
}

COMPARISONS = {"<", ">"}

# token kinds that can end an operand; a "-" after one of them is a
# subtraction, anywhere else a "-" directly before a digit starts a number
OPERAND_END_KINDS = {
    TokenKind.NUMBER,
    TokenKind.STR_LIT,
    TokenKind.IDENTIFIER,
    TokenKind.RIGHT_PAREN,
    TokenKind.RIGHT_BRACE,
    TokenKind.RIGHT_SQUARE_BRACKET,
}
