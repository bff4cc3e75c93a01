from typing import Optional

from common.errors import FlinqError

from parse.tokens import TokenKind


class LexError(FlinqError):
    stage = "lex"

    def __init__(self, msg: str, line: int, column: int):
        super().__init__(f"{line}:{column}: {msg}")
        self.msg = msg
        self.line = line
        self.column = column


class ParseError(FlinqError):
    stage = "parse"

    def __init__(
        self, msg: str, found_kind: Optional[TokenKind], line: int, column: int
    ):
        super().__init__(f"{line}:{column}: {msg}")
        self.msg = msg
        self.found_kind = found_kind
        self.line = line
        self.column = column
