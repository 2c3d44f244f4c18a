"""
Recursive Descent Parser for Lox

Structure:
- Lexer: lazy token stream from source
- Parser: recursive descent for statements, precedence climbing (Pratt) for
  expressions, over a two-token window (current + lookahead)
- AST: frozen dataclasses from `tree`

Parsing stops at the first error; there is no panic-mode recovery.
"""

from enum import IntEnum
from typing import Iterable, Iterator, List, Optional

from .lexer import LexError, Lexer
from .token_types import TT, Tok, eof_token
from .tree import (
    Block,
    BoolLiteral,
    Call,
    Expr,
    ExprStmt,
    FunctionLiteral,
    Grouping,
    Ident,
    IfStmt,
    Infix,
    NilLiteral,
    NumberLiteral,
    Prefix,
    PrintExpr,
    PrintStmt,
    ReturnStmt,
    Stmt,
    StringLiteral,
    VarDecl,
    WhileStmt,
)

MAX_ARGUMENTS = 255

# ============================================================================
# Errors
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None, line: Optional[int] = None):
        self.message = message
        self.token = token
        self.line = line if line is not None else (token.line if token else 0)
        where = f" at {token.display()}" if token is not None else ""
        super().__init__(f"[line {self.line}] Error{where}: {message}")

class EmptySource(ParseError):
    def __init__(self, token: Optional[Tok] = None):
        super().__init__("Source contains no tokens.", None, token.line if token else 1)

class UnexpectedToken(ParseError):
    def __init__(self, expected: str, found: Tok):
        self.expected = expected
        self.found = found
        super().__init__(f"Expect {expected}.", found)

class InvalidAssignmentTarget(ParseError):
    def __init__(self, token: Tok):
        super().__init__("Invalid assignment target.", token)

class TooManyArguments(ParseError):
    def __init__(self, token: Tok, what: str = "arguments"):
        super().__init__(f"Can't have more than {MAX_ARGUMENTS} {what}.", token)

class LexicalError(ParseError):
    """A scanner failure surfaced through the parser."""
    def __init__(self, error: LexError):
        self.lex_error = error
        super().__init__(error.message, None, error.line)

# ============================================================================
# Precedence
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 1
    ASSIGNMENT = 2
    OR = 3
    AND = 4
    EQUALITY = 5
    COMPARISON = 6
    SUM = 7
    PRODUCT = 8
    UNARY = 9
    CALL = 10


INFIX_PRECEDENCE = {
    TT.EQUAL: Precedence.ASSIGNMENT,
    TT.OR: Precedence.OR,
    TT.AND: Precedence.AND,
    TT.EQUAL_EQUAL: Precedence.EQUALITY,
    TT.BANG_EQUAL: Precedence.EQUALITY,
    TT.LESS: Precedence.COMPARISON,
    TT.LESS_EQUAL: Precedence.COMPARISON,
    TT.GREATER: Precedence.COMPARISON,
    TT.GREATER_EQUAL: Precedence.COMPARISON,
    TT.PLUS: Precedence.SUM,
    TT.MINUS: Precedence.SUM,
    TT.STAR: Precedence.PRODUCT,
    TT.SLASH: Precedence.PRODUCT,
    TT.LEFT_PAREN: Precedence.CALL,
}

LITERAL_TOKENS = {TT.NUMBER, TT.STRING, TT.TRUE, TT.FALSE, TT.NIL}

# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=), right associative, identifier targets only
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (<, <=, >, >=)
    6. sum (+, -)
    7. product (*, /)
    8. unary (-, !)
    9. call (callee(args))
    """

    def __init__(self, tokens: Iterable[Tok]):
        self._stream: Iterator[Tok] = iter(tokens)
        self._last_line = 1
        self.current = self._pull()
        self.lookahead = self._pull()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _pull(self) -> Tok:
        try:
            tok = next(self._stream)
        except StopIteration:
            return eof_token(self._last_line)
        except LexError as exc:
            raise LexicalError(exc) from exc

        self._last_line = tok.line
        return tok

    def peek(self) -> Tok:
        """Look one token past the current one"""
        return self.lookahead

    def advance(self) -> Tok:
        """Consume current token and move the window forward"""
        prev = self.current
        if prev.type != TT.EOF:
            self.current = self.lookahead
            self.lookahead = self._pull()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, expected: str) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise UnexpectedToken(expected, self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse_program(self) -> List[Stmt]:
        """Parse entire program"""
        if self.check(TT.EOF):
            raise EmptySource(self.current)

        stmts: List[Stmt] = []
        while not self.check(TT.EOF):
            stmts.append(self.parse_statement())

        return stmts

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Stmt:
        if self.check(TT.PRINT):
            return self.parse_print_stmt()
        if self.check(TT.VAR):
            return self.parse_var_decl()
        if self.check(TT.LEFT_BRACE):
            return self.parse_block()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()

        # `fun name(...) {...}` declarations need no trailing semicolon
        if self.check(TT.FUN) and self.peek().type == TT.IDENTIFIER:
            return ExprStmt(self.parse_function(self.advance()))

        return self.parse_expr_stmt()

    def parse_expr_stmt(self) -> ExprStmt:
        expr = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.SEMICOLON, "';' after expression")
        return ExprStmt(expr)

    def parse_print_stmt(self) -> PrintStmt:
        self.expect(TT.PRINT, "'print'")
        value = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.SEMICOLON, "';' after value")
        return PrintStmt(value)

    def parse_var_decl(self) -> VarDecl:
        """Parse variable declaration: var name [= expr];"""
        self.expect(TT.VAR, "'var'")
        name = self.expect(TT.IDENTIFIER, "variable name")

        initializer = None
        if self.match(TT.EQUAL):
            initializer = self.parse_expression(Precedence.LOWEST)

        self.expect(TT.SEMICOLON, "';' after variable declaration")
        return VarDecl(name.lexeme, initializer)

    def parse_block(self) -> Block:
        """Parse block statement: { stmt* }"""
        self.expect(TT.LEFT_BRACE, "'{' before block")
        stmts = self.parse_block_statements()
        self.expect(TT.RIGHT_BRACE, "'}' after block")
        return Block(tuple(stmts))

    def parse_block_statements(self) -> List[Stmt]:
        """
        Statements up to (not including) the closing brace. Shared by block
        statements and function bodies; the caller owns both braces.
        """
        stmts: List[Stmt] = []
        while not self.check(TT.RIGHT_BRACE, TT.EOF):
            stmts.append(self.parse_statement())
        return stmts

    def parse_if_stmt(self) -> IfStmt:
        """Parse if statement: if (expr) stmt [else stmt]"""
        self.expect(TT.IF, "'if'")
        self.expect(TT.LEFT_PAREN, "'(' after 'if'")
        cond = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.RIGHT_PAREN, "')' after if condition")

        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TT.ELSE):
            else_branch = self.parse_statement()

        return IfStmt(cond, then_branch, else_branch)

    def parse_while_stmt(self) -> WhileStmt:
        """Parse while loop: while (expr) stmt"""
        self.expect(TT.WHILE, "'while'")
        self.expect(TT.LEFT_PAREN, "'(' after 'while'")
        cond = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.RIGHT_PAREN, "')' after condition")
        return WhileStmt(cond, self.parse_statement())

    def parse_for_stmt(self) -> Block:
        """
        Parse for loop and desugar it:
        for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }
        """
        self.expect(TT.FOR, "'for'")
        self.expect(TT.LEFT_PAREN, "'(' after 'for'")

        init: Optional[Stmt]
        if self.match(TT.SEMICOLON):
            init = None
        elif self.check(TT.VAR):
            init = self.parse_var_decl()
        else:
            init = self.parse_expr_stmt()

        cond = None
        if not self.check(TT.SEMICOLON):
            cond = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.SEMICOLON, "';' after loop condition")

        incr = None
        if not self.check(TT.RIGHT_PAREN):
            incr = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.RIGHT_PAREN, "')' after for clauses")

        body = self.parse_statement()

        loop_body: List[Stmt] = [body]
        if incr is not None:
            loop_body.append(ExprStmt(incr))
        loop = WhileStmt(cond, Block(tuple(loop_body)))

        if init is None:
            return Block((loop,))
        return Block((init, loop))

    def parse_return_stmt(self) -> ReturnStmt:
        """Parse return statement: return [expr];"""
        ret_tok = self.expect(TT.RETURN, "'return'")

        value: Expr = NilLiteral()
        if not self.check(TT.SEMICOLON):
            value = self.parse_expression(Precedence.LOWEST)

        self.expect(TT.SEMICOLON, "';' after return value")
        return ReturnStmt(value, ret_tok.line)

    # ========================================================================
    # Expressions (precedence climbing)
    # ========================================================================

    def parse_expression(self, min_precedence: Precedence = Precedence.LOWEST) -> Expr:
        """
        Parse the next expression whose outermost operator binds tighter than
        `min_precedence`.
        """
        left = self.parse_prefix()

        while True:
            precedence = INFIX_PRECEDENCE.get(self.current.type)
            if precedence is None or precedence <= min_precedence:
                return left

            op = self.advance()

            if op.type == TT.LEFT_PAREN:
                left = self.finish_call(left)
            elif op.type == TT.EQUAL:
                if not isinstance(left, Ident):
                    raise InvalidAssignmentTarget(op)
                # Right associative: recurse one level below assignment
                value = self.parse_expression(Precedence.LOWEST)
                left = Infix(TT.EQUAL, left, value, op.line)
            else:
                right = self.parse_expression(precedence)
                left = Infix(op.type, left, right, op.line)

    def parse_prefix(self) -> Expr:
        """
        Parse prefix terms:
        - Literals (numbers, strings, true, false, nil)
        - Identifiers
        - Parenthesized expressions
        - Unary - and !
        - Function literals
        - print as an expression
        """
        tok = self.current

        if tok.type in LITERAL_TOKENS:
            self.advance()
            return self._literal(tok)

        if tok.type == TT.IDENTIFIER:
            self.advance()
            return Ident(tok.lexeme, tok.line)

        if tok.type == TT.LEFT_PAREN:
            self.advance()
            inner = self.parse_expression(Precedence.LOWEST)
            self.expect(TT.RIGHT_PAREN, "')' after expression")
            return Grouping(inner)

        if tok.type in (TT.MINUS, TT.BANG):
            self.advance()
            operand = self.parse_expression(Precedence.UNARY)
            return Prefix(tok.type, operand, tok.line)

        if tok.type == TT.FUN:
            return self.parse_function(self.advance())

        if tok.type == TT.PRINT:
            self.advance()
            return PrintExpr(self.parse_expression(Precedence.LOWEST))

        raise UnexpectedToken("expression", tok)

    def _literal(self, tok: Tok) -> Expr:
        match tok.type:
            case TT.NUMBER:
                return NumberLiteral(tok.literal)
            case TT.STRING:
                return StringLiteral(tok.literal)
            case TT.TRUE:
                return BoolLiteral(True)
            case TT.FALSE:
                return BoolLiteral(False)
            case _:
                return NilLiteral()

    def finish_call(self, callee: Expr) -> Call:
        """Parse call arguments after the opening paren"""
        if self.check(TT.RIGHT_PAREN):
            paren = self.advance()
            return Call(callee, None, paren.line)

        args: List[Expr] = []
        while True:
            if len(args) >= MAX_ARGUMENTS:
                raise TooManyArguments(self.current)
            args.append(self.parse_expression(Precedence.LOWEST))

            if not self.match(TT.COMMA):
                break

        paren = self.expect(TT.RIGHT_PAREN, "')' after arguments")
        return Call(callee, tuple(args), paren.line)

    def parse_function(self, fun_tok: Tok) -> FunctionLiteral:
        """Parse function literal after `fun`: [name](params) { body }"""
        name = None
        if self.check(TT.IDENTIFIER):
            name = self.advance().lexeme

        self.expect(TT.LEFT_PAREN, "'(' after 'fun'")
        params = self.parse_param_list()
        self.expect(TT.RIGHT_PAREN, "')' after parameters")

        self.expect(TT.LEFT_BRACE, "'{' before function body")
        body = self.parse_block_statements()
        self.expect(TT.RIGHT_BRACE, "'}' after function body")

        return FunctionLiteral(name, tuple(params), tuple(body), fun_tok.line)

    def parse_param_list(self) -> List[str]:
        """Parse function parameter list"""
        params: List[str] = []

        while not self.check(TT.RIGHT_PAREN, TT.EOF):
            if len(params) >= MAX_ARGUMENTS:
                raise TooManyArguments(self.current, "parameters")
            param = self.expect(TT.IDENTIFIER, "parameter name")
            params.append(param.lexeme)

            if not self.match(TT.COMMA):
                break

        return params


def parse_source(source: str) -> List[Stmt]:
    """Parse Lox source code to a statement list."""
    parser = Parser(Lexer(source).tokens())
    return parser.parse_program()


def parse_expr_fragment(source: str) -> Expr:
    """
    Parse a standalone expression.
    Used by the `parse`/`evaluate` commands and the REPL echo.
    """
    parser = Parser(Lexer(source).tokens())
    if parser.check(TT.EOF):
        raise EmptySource(parser.current)

    expr = parser.parse_expression(Precedence.LOWEST)

    # Ensure we've consumed the entire fragment
    if not parser.check(TT.EOF):
        raise UnexpectedToken("end of expression", parser.current)
    return expr
