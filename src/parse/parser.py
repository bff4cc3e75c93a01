import logging
from typing import Optional

from common.errors import InternalError

from parse import nodes
from parse.errors import ParseError
from parse.registry import Registry
from parse.tokens import Token, TokenKind

logger = logging.getLogger(__name__)


class Parser:
    def __init__(self, registry: Registry):
        self._registry = registry
        self._tokens: list[Token] = []
        self._pos = 0
        self._declaring_fn: Optional[str] = None
        self._pending_fns: list[nodes.FnDefinition] = []
        self._pending_consts: list[tuple[str, nodes.ExprNode]] = []

    # Statement = Expr [ ";" ] EOF
    #
    # Declarations made by the statement are only registered once the whole
    # statement has parsed, so a statement that fails leaves no trace.
    def parse(self, tokens: list[Token]) -> nodes.ExprNode:
        self._tokens = tokens
        self._reset()

        expr = self._parse_expr()
        self._accept(TokenKind.SEMICOLON)
        if not self._is_done():
            tok = self._peek()
            raise ParseError(
                f"unexpected token {tok.kind} after end of statement",
                tok.kind,
                tok.line,
                tok.column,
            )

        for decl in self._pending_fns:
            self._registry.define_fn(decl)
            logger.debug("registered function %s", decl.name)
        for name, val in self._pending_consts:
            self._registry.define_const(name, val)
            logger.debug("registered constant %s", name)
        return expr

    def _reset(self):
        self._pos = 0
        self._declaring_fn = None
        self._pending_fns = []
        self._pending_consts = []

    # Expr = Term { ( "+" | "-" ) Term }
    def _parse_expr(self) -> nodes.ExprNode:
        left = self._parse_term()
        while tok := self._accept_op("+", "-"):
            right = self._parse_term()
            left = nodes.BinaryOpExpr(tok.line, tok.column, left, tok.text, right)
        return left

    # Term = Factor { ( "*" | "/" ) Factor }
    def _parse_term(self) -> nodes.ExprNode:
        left = self._parse_factor()
        while tok := self._accept_op("*", "/"):
            right = self._parse_factor()
            left = nodes.BinaryOpExpr(tok.line, tok.column, left, tok.text, right)
        return left

    # Factor = Primary { "^" Primary }
    def _parse_factor(self) -> nodes.ExprNode:
        left = self._parse_primary()
        while tok := self._accept_op("^"):
            right = self._parse_primary()
            left = nodes.BinaryOpExpr(tok.line, tok.column, left, tok.text, right)
        return left

    # Primary = "(" Expr ")" |
    #   "-" Primary |
    #   number |
    #   string |
    #   identifier [ "(" [ ArgList ] ")" ] |
    #   LetExpr |
    #   IfExpr |
    #   FnDefinition |
    #   ConstDecl |
    #   PrintStmt;
    def _parse_primary(self) -> nodes.ExprNode:
        tok = self._next()
        if tok.kind == TokenKind.LEFT_PAREN:
            expr = self._parse_expr()
            self._expect(TokenKind.RIGHT_PAREN)
            return expr
        elif tok.kind == TokenKind.OPERATOR and tok.text == "-":
            # -x => 0 - x
            operand = self._parse_primary()
            zero = nodes.LitExpr(tok.line, tok.column, 0.0)
            return nodes.BinaryOpExpr(tok.line, tok.column, zero, "-", operand)
        elif tok.kind == TokenKind.NUMBER:
            try:
                return nodes.LitExpr(tok.line, tok.column, float(tok.text))
            except ValueError:
                raise ParseError(
                    f"invalid number literal {repr(tok.text)}",
                    tok.kind,
                    tok.line,
                    tok.column,
                )
        elif tok.kind == TokenKind.STR_LIT:
            return nodes.LitExpr(tok.line, tok.column, tok.text)
        elif tok.kind == TokenKind.IDENTIFIER:
            if self._lookahead(TokenKind.LEFT_PAREN):
                return self._parse_call_expr(tok)
            return nodes.AccessExpr(tok.line, tok.column, tok.text)

        self._backup()
        if tok.kind == TokenKind.LET:
            return self._parse_let_expr()
        elif tok.kind == TokenKind.IF:
            return self._parse_if_expr()
        elif tok.kind == TokenKind.FUNCTION:
            return self._parse_fn_definition()
        elif tok.kind == TokenKind.CONST:
            return self._parse_const_decl()
        elif tok.kind == TokenKind.PRINT:
            return self._parse_print_stmt()
        else:
            raise ParseError(
                f"unexpected token {tok.kind} at start of expression",
                tok.kind,
                tok.line,
                tok.column,
            )

    # CallExpr = identifier "(" [ ArgList ] ")"
    # ArgList  = { Expr "," } Expr
    #
    # Built-ins take precedence over user functions of the same name.
    def _parse_call_expr(self, name_tok: Token):
        name = name_tok.text
        self._expect(TokenKind.LEFT_PAREN)
        args: list[nodes.ExprNode] = []
        while not self._accept(TokenKind.RIGHT_PAREN):
            if args:
                self._expect(TokenKind.COMMA)
            args.append(self._parse_expr())

        line, col = name_tok.line, name_tok.column
        if self._registry.is_built_in(name):
            return nodes.BuiltInCallExpr(line, col, name, tuple(args))
        elif self._registry.is_defined_fn(name) or name == self._declaring_fn:
            return nodes.UserCallExpr(line, col, name, tuple(args))
        else:
            raise ParseError(
                f"undefined function: {name}", name_tok.kind, line, col
            )

    # LetExpr      = "let" ( LetBinding | LetGroup ) "in" Expr
    # LetBinding   = identifier "=" Expr
    # LetGroup     = "->" "{" [ { LetBinding "," } LetBinding ] "}"
    def _parse_let_expr(self):
        tok = self._expect(TokenKind.LET)
        if self._accept(TokenKind.LLINQ):
            self._expect(TokenKind.LEFT_BRACE)
            bindings: list[tuple[str, nodes.ExprNode]] = []
            while not self._accept(TokenKind.RIGHT_BRACE):
                if bindings:
                    self._expect(TokenKind.COMMA)
                bindings.append(self._parse_let_binding())
            self._expect(TokenKind.IN)
            body = self._parse_expr()
            return nodes.LetGroupExpr(tok.line, tok.column, tuple(bindings), body)
        else:
            name, val = self._parse_let_binding()
            self._expect(TokenKind.IN)
            body = self._parse_expr()
            return nodes.LetExpr(tok.line, tok.column, name, val, body)

    def _parse_let_binding(self):
        name = self._expect(TokenKind.IDENTIFIER).text
        self._expect_op("=")
        return name, self._parse_expr()

    # IfExpr    = "if" Condition "then" Expr "else" Expr
    # Condition = "(" Expr comparison Expr ")"
    def _parse_if_expr(self):
        tok = self._expect(TokenKind.IF)
        self._expect(TokenKind.LEFT_PAREN)
        left = self._parse_expr()
        cmp = self._expect(TokenKind.COMPARISON)
        right = self._parse_expr()
        self._expect(TokenKind.RIGHT_PAREN)
        cond = nodes.BinaryOpExpr(cmp.line, cmp.column, left, cmp.text, right)

        self._expect(TokenKind.THEN)
        then_branch = self._parse_expr()
        self._expect(TokenKind.ELSE)
        else_branch = self._parse_expr()
        return nodes.IfExpr(tok.line, tok.column, cond, then_branch, else_branch)

    # FnDefinition = "function" fn_identifier { parameter } "=>" Expr
    #
    # The lexer has already checked the parenthesised parameter list.
    def _parse_fn_definition(self):
        tok = self._expect(TokenKind.FUNCTION)
        name_tok = self._expect(TokenKind.FN_IDENTIFIER)
        name = name_tok.text
        if self._registry.is_defined_fn(name) or any(
            fn.name == name for fn in self._pending_fns
        ):
            raise ParseError(
                f"function already defined: {name}",
                name_tok.kind,
                name_tok.line,
                name_tok.column,
            )

        param_names: list[str] = []
        while param := self._accept(TokenKind.PARAMETER):
            if param.text in param_names:
                raise ParseError(
                    f"duplicate parameter {param.text} in function {name}",
                    param.kind,
                    param.line,
                    param.column,
                )
            param_names.append(param.text)
        self._expect(TokenKind.FLINQ)

        enclosing, self._declaring_fn = self._declaring_fn, name
        try:
            body = self._parse_expr()
        finally:
            self._declaring_fn = enclosing

        self._pending_fns.append(
            nodes.FnDefinition(tok.line, tok.column, name, tuple(param_names), body)
        )
        return nodes.EndMarker(tok.line, tok.column)

    # ConstDecl = "const" identifier "=" Expr
    def _parse_const_decl(self):
        tok = self._expect(TokenKind.CONST)
        name = self._expect(TokenKind.IDENTIFIER).text
        self._expect_op("=")
        val = self._parse_expr()
        self._pending_consts.append((name, val))
        return nodes.EndMarker(tok.line, tok.column)

    # PrintStmt = "print" "(" Expr ")"
    #
    # The printed expression is checked for syntax and then dropped; print
    # produces no output.
    def _parse_print_stmt(self):
        tok = self._expect(TokenKind.PRINT)
        self._expect(TokenKind.LEFT_PAREN)
        expr = self._parse_expr()
        self._expect(TokenKind.RIGHT_PAREN)
        logger.debug("discarding print expression %s", expr)
        return nodes.EndMarker(tok.line, tok.column)

    def _accept(self, *args: TokenKind) -> Optional[Token]:
        tok = self._peek()
        if tok.kind in args:
            self._ignore()
            return tok
        return None

    def _accept_op(self, *ops: str) -> Optional[Token]:
        tok = self._peek()
        if tok.kind == TokenKind.OPERATOR and tok.text in ops:
            self._ignore()
            return tok
        return None

    def _lookahead(self, *args: TokenKind):
        return self._peek().kind in args

    def _expect(self, *args: TokenKind):
        expected = ", ".join(map(str, args))
        tok = self._next()
        if tok.kind not in args:
            raise ParseError(
                f"unexpected token {tok.kind}; expected one of {expected}",
                tok.kind,
                tok.line,
                tok.column,
            )
        return tok

    def _expect_op(self, op: str):
        tok = self._next()
        if tok.kind != TokenKind.OPERATOR or tok.text != op:
            raise ParseError(
                f"unexpected token {tok.kind} {repr(tok.text)}; expected {repr(op)}",
                tok.kind,
                tok.line,
                tok.column,
            )
        return tok

    def _peek(self):
        # reading past the end keeps returning the EOF token
        return self._tokens[min(self._pos, len(self._tokens) - 1)]

    def _next(self):
        tok = self._peek()
        self._pos += 1
        return tok

    _ignore = _next  # alias for clarity

    def _backup(self, n: Optional[int] = 1):
        if self._pos < n:
            raise InternalError("parser: backup out of range")
        self._pos -= n

    def _is_done(self):
        return self._peek().kind == TokenKind.EOF
