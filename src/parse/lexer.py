from dataclasses import dataclass
from typing import Callable

from common.errors import InternalError

from parse.errors import LexError
from parse.tokens import (
    COMPARISONS,
    KEYWORDS,
    OPERAND_END_KINDS,
    OPERATORS,
    SYNTAX,
    TWO_CHAR_TOKENS,
    Token,
    TokenKind,
)

LINE_SEPARATOR = "\r"


@dataclass
class LexerState:
    line: int
    col: int
    pos: int


class Lexer:
    def __init__(self):
        self._src = ""
        self._line = 1
        self._col = 1
        self._pos = 0
        self._tokens: list[Token] = []

    def lex(self, src: str):
        self._src = src
        self._reset()
        while self._lex_next():
            pass
        self._tokens.append(Token(TokenKind.EOF, "", self._line, self._col))
        return self._tokens

    def _reset(self):
        self._line = 1
        self._col = 1
        self._pos = 0
        self._tokens = []

    # Lexes one token into the token list, together with the structured
    # continuation of "function" and "print". Returns False at end of input.
    def _lex_next(self) -> bool:
        self._skip_ignored()
        if self._is_done():
            return False

        tok = self._lex_any()
        self._tokens.append(tok)
        if tok.kind == TokenKind.FUNCTION:
            self._lex_fn_header()
        elif tok.kind == TokenKind.PRINT:
            self._lex_print_args()
        return True

    def _lex_any(self) -> Token:
        line, col = self._line, self._col
        backup = self._save()
        c = self._next()

        if c.isalpha():
            self._restore(backup)
            return self._lex_word()
        elif c.isdecimal():
            self._restore(backup)
            return self._lex_num_lit()
        elif c == '"':
            self._restore(backup)
            return self._lex_str_lit()
        elif c in SYNTAX:
            return Token(SYNTAX[c], c, line, col)
        elif c == "-" and self._starts_negative_num():
            self._restore(backup)
            return self._lex_num_lit()
        elif c + self._peek() in TWO_CHAR_TOKENS:
            pair = c + self._next()
            return Token(TWO_CHAR_TOKENS[pair], pair, line, col)
        elif c in OPERATORS:
            return Token(TokenKind.OPERATOR, c, line, col)
        elif c in COMPARISONS:
            return Token(TokenKind.COMPARISON, c, line, col)
        else:
            raise LexError(f"invalid character {repr(c)}", line, col)

    def _starts_negative_num(self):
        # the "-" itself has already been consumed
        if not self._peek().isdecimal():
            return False
        return not self._tokens or self._tokens[-1].kind not in OPERAND_END_KINDS

    def _lex_word(self):
        line, col = self._line, self._col
        word = self._accept_run(str.isalnum)
        return Token(KEYWORDS.get(word, TokenKind.IDENTIFIER), word, line, col)

    def _lex_num_lit(self):
        line, col = self._line, self._col
        sign = "-" if self._accept_char("-") else ""
        whole = self._accept_run(str.isdecimal)
        if self._accept_char("."):
            frac = self._accept_run(str.isdecimal)
            return Token(TokenKind.NUMBER, f"{sign}{whole}.{frac}", line, col)
        else:
            return Token(TokenKind.NUMBER, f"{sign}{whole}", line, col)

    def _lex_str_lit(self):
        line, col = self._line, self._col
        self._ignore()  # ignore opening quote
        text = self._accept_run(lambda c: c != '"')
        if self._is_done():
            raise LexError("unterminated string literal", line, col)
        self._ignore()  # ignore closing quote
        return Token(TokenKind.STR_LIT, text, line, col)

    # FnHeader = name "(" [ { param "," } param ] ")" ( "=>" | "flinq" )
    #
    # The parentheses and commas are checked here and not emitted; the parser
    # only sees FN_IDENTIFIER { PARAMETER } FLINQ.
    def _lex_fn_header(self):
        self._accept_run(str.isspace)
        line, col = self._line, self._col
        name = self._accept_run(str.isalnum)
        if not name or not name[0].isalpha():
            raise LexError("expected function name after 'function'", line, col)
        self._tokens.append(Token(TokenKind.FN_IDENTIFIER, name, line, col))

        self._accept_run(str.isspace)
        self._expect_char("(", "expected '(' after function name")
        self._accept_run(str.isspace)
        if not self._accept_char(")"):
            while True:
                self._accept_run(str.isspace)
                line, col = self._line, self._col
                param = self._accept_run(str.isalnum)
                if not param or not param[0].isalpha():
                    raise LexError("expected parameter name", line, col)
                self._tokens.append(Token(TokenKind.PARAMETER, param, line, col))
                self._accept_run(str.isspace)
                if self._accept_char(")"):
                    break
                self._expect_char(",", "expected ',' or ')' in parameter list")

        self._accept_run(str.isspace)
        line, col = self._line, self._col
        if self._src.startswith("=>", self._pos):
            self._ignore()
            self._ignore()
            self._tokens.append(Token(TokenKind.FLINQ, "=>", line, col))
        elif self._accept_run(str.isalnum) == "flinq":
            self._tokens.append(Token(TokenKind.FLINQ, "flinq", line, col))
        else:
            raise LexError("expected '=>' after function parameters", line, col)

    # PrintArgs = "(" { token } ")", lexed until the parentheses balance
    def _lex_print_args(self):
        self._accept_run(str.isspace)
        line, col = self._line, self._col
        self._expect_char("(", "expected '(' after print")
        self._tokens.append(Token(TokenKind.LEFT_PAREN, "(", line, col))

        depth = 1
        while depth:
            start = len(self._tokens)
            if not self._lex_next():
                raise LexError("expected ')' to close print", line, col)
            for tok in self._tokens[start:]:
                if tok.kind == TokenKind.LEFT_PAREN:
                    depth += 1
                elif tok.kind == TokenKind.RIGHT_PAREN:
                    depth -= 1

    def _skip_ignored(self):
        while True:
            self._accept_run(str.isspace)
            if self._src.startswith("//", self._pos):
                self._lex_line_comment()
            else:
                return

    def _lex_line_comment(self):
        while not self._is_done() and self._peek() != LINE_SEPARATOR:
            self._ignore()

    def _expect_char(self, c: str, msg: str):
        if not self._accept_char(c):
            raise LexError(msg, self._line, self._col)

    def _accept_char(self, c: str):
        if self._peek() == c:
            self._ignore()
            return True
        return False

    def _accept_run(self, pred: Callable[[str], bool]):
        chars: list[str] = []
        while not self._is_done():
            c = self._peek()
            if pred(c):
                self._next()
                chars.append(c)
            else:
                break
        return "".join(chars)

    def _peek(self):
        if self._is_done():
            return ""
        return self._src[self._pos]

    def _next(self):
        if self._is_done():
            raise InternalError("lexer: next called on finished lexer")
        c = self._src[self._pos]
        self._pos += 1
        if c == LINE_SEPARATOR:
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return c

    _ignore = _next  # alias for clarity

    def _save(self):
        return LexerState(self._line, self._col, self._pos)

    def _restore(self, state: LexerState):
        self._line = state.line
        self._col = state.col
        self._pos = state.pos

    def _is_done(self):
        return self._pos >= len(self._src)
