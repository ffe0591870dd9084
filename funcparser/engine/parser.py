from typing import Any, Callable, List, Mapping, Optional

from .compiler import Compiler, Program
from .executor import Executor
from .scanner import Scanner, Token, TokenKind
from .symbols import SymbolTable
from ..backends.torch_executor import TorchExecutor
from ..config import ParserConfig
from ..errors import FunctionParserError, LexicalError, ParseSyntaxError, SemanticError
from ..logger import LOGGER


class FunctionParser:
    """
    Recursive descent parser compiling a formula into a postfix Program.

    Parsing happens once; execute() then reruns the program against the
    current variable bindings as often as needed.

        expr           := additive
        additive       := multiplicative (('+'|'-') multiplicative)*
        multiplicative := exponent (('*'|'/') exponent)*
        exponent       := primary ('^' exponent)?
        primary        := '(' expr ')' | unary
        unary          := '-' primary | simple
        simple         := NUMBER | IDENT ['(' expr (',' expr)* ')']
    """

    def __init__(self, source: str, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.source = source
        self.scanner = Scanner(source)
        self.symbols = SymbolTable(default_functions=self.config.default_functions)
        for name, value in self.config.constants.items():
            self.symbols.add_constant(name, value)

        self.compiler = Compiler()
        self.executor = Executor(self.compiler.program)
        self.token = Token(TokenKind.END)
        self.error: Optional[FunctionParserError] = None
        self._result = 0.0

    # Registration

    def register_unary_function(self, name: str, fn: Callable[[float], float]):
        """
        Register `fn` as a one-argument function. Calls are not guarded:
        natives should return nan/inf on domain errors the way numpy ufuncs
        do, since an exception raised by `fn` propagates out of execute().
        """
        self.symbols.add_function(name, 1, fn)

    def register_binary_function(self, name: str, fn: Callable[[float, float], float]):
        """Two-argument counterpart of register_unary_function()."""
        self.symbols.add_function(name, 2, fn)

    def register_constant(self, name: str, value: float):
        self.symbols.add_constant(name, value)

    # Token handling

    def consume(self):
        tok = self.scanner.next_token()
        while tok.kind is TokenKind.WHITESPACE:
            tok = self.scanner.next_token()
        if tok.kind is TokenKind.ERROR:
            raise LexicalError(self.scanner.error)
        self.token = tok

    def is_here(self, kind: TokenKind) -> bool:
        return self.token.kind is kind

    def expect(self, kind: TokenKind, advance: bool = True) -> str:
        text = self.token.text
        if not self.is_here(kind):
            # integers are fine wherever a float literal is expected
            relaxed = kind is TokenKind.FLOAT and self.is_here(TokenKind.INTEGER)
            if not relaxed:
                raise ParseSyntaxError(f"expected {kind} but found {self.token.kind}")
        if advance:
            self.consume()
        return text

    # Grammar

    def expr(self):
        self.additive()

    def additive(self):
        self.multiplicative()
        while self.is_here(TokenKind.PLUS) or self.is_here(TokenKind.MINUS):
            op = self.token.kind
            self.consume()
            self.multiplicative()
            self.compiler.binary(op)

    def multiplicative(self):
        self.exponent()
        while self.is_here(TokenKind.STAR) or self.is_here(TokenKind.SLASH):
            op = self.token.kind
            self.consume()
            self.exponent()
            self.compiler.binary(op)

    def exponent(self):
        self.primary()
        if self.is_here(TokenKind.CARET):
            self.consume()
            self.exponent()  # right associative
            self.compiler.binary(TokenKind.CARET)

    def primary(self):
        if self.is_here(TokenKind.LPAREN):
            self.consume()
            self.expr()
            self.expect(TokenKind.RPAREN)
        else:
            self.unary()

    def unary(self):
        if self.is_here(TokenKind.MINUS):
            self.consume()
            self.primary()
            self.compiler.negate()
        else:
            self.simple()

    def simple(self):
        tok = self.token

        if tok.kind in (TokenKind.INTEGER, TokenKind.FLOAT):
            self.compiler.constant(float(self.expect(TokenKind.FLOAT)))
            return

        if tok.kind is TokenKind.IDENT:
            self.consume()
            if self.is_here(TokenKind.LPAREN):
                self.function_call(tok.text)
            else:
                self.variable(tok.text)
            return

        raise ParseSyntaxError(f"unexpected value (found {tok.text or tok.kind})")

    def function_call(self, name: str):
        count = 0
        while True:
            self.consume()  # '(' first, ',' afterwards
            self.expr()
            count += 1
            if not self.is_here(TokenKind.COMMA):
                break
        self.expect(TokenKind.RPAREN)

        func = self.symbols.function(name)
        if func is None:
            raise SemanticError(f"unknown function '{name}'")
        if func.arity != count:
            raise SemanticError(
                f"wrong number of arguments for function '{name}' "
                f"(expected {func.arity}, got {count})"
            )
        self.compiler.call(func)

    def variable(self, name: str):
        value = self.symbols.constant(name)
        if value is not None:
            self.compiler.constant(value)
        else:
            self.compiler.variable(self.symbols.variable(name))

    # Public API

    def parse(self) -> bool:
        self.compiler.clear()
        try:
            self.consume()
            self.expr()
            if not self.is_here(TokenKind.END):
                raise ParseSyntaxError(
                    f"syntax error near '{self.token.text}' at end of input"
                )
        except RecursionError:
            self._fail(ParseSyntaxError("expression nested too deeply"))
        except FunctionParserError as e:
            self._fail(e)

        self.executor = Executor(self.compiler.assemble())
        self.scanner.reset()
        self.token = Token(TokenKind.END)
        return not self.failed

    def _fail(self, e: FunctionParserError):
        if self.error is None:
            self.error = e
        LOGGER.error(f"Failed to parse '{self.source}'", e)
        self.compiler.clear()

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def program(self) -> Program:
        return self.compiler.program

    def variable_names(self) -> List[str]:
        return self.symbols.variable_names()

    def bind_variable(self, name: str, table: Any, key: Any = None):
        var = self.symbols.variables.get(name)
        if var is None:
            LOGGER.warn(f"no such variable '{name}'")
            return
        var.bind(table, key)

    def execute(self) -> float:
        self._result = self.executor.execute()
        return self._result

    @property
    def result(self) -> float:
        return self._result

    def get_result(self) -> float:
        return self._result

    def evaluate_batch(self, values: Optional[Mapping[str, Any]] = None):
        executor = TorchExecutor(
            self.program, dtype=self.config.dtype, device=self.config.device
        )
        return executor.execute(values)
