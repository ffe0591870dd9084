from enum import Enum
from typing import Any, Iterator, List, NamedTuple, Tuple

from .scanner import TokenKind
from .symbols import Function, Variable
from ..logger import LOGGER


class Opcode(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    NEG = "neg"
    CALL = "call"
    PUSH_VAR = "var"
    PUSH_CONST = "const"


class Instruction(NamedTuple):
    opcode: Opcode
    operand: Any = None

    def __str__(self):
        if self.opcode is Opcode.CALL:
            return f"{self.operand.name}/{self.operand.arity}"
        if self.opcode is Opcode.PUSH_VAR:
            return self.operand.name
        if self.opcode is Opcode.PUSH_CONST:
            return f"{self.operand:g}"
        return self.opcode.value


class Program:
    """Immutable postfix instruction sequence."""

    def __init__(self, instructions=()):
        self._instructions: Tuple[Instruction, ...] = tuple(instructions)

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self._instructions

    def __len__(self):
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __getitem__(self, i):
        return self._instructions[i]

    def __bool__(self):
        return bool(self._instructions)

    def dump(self) -> str:
        return " ".join(str(ins) for ins in self._instructions)

    def __repr__(self):
        return f"Program({self.dump()!r})"


class Compiler:
    """
    Collects instructions emitted by the parser and finalizes them into a
    Program.
    """

    BINARY_OPS = {
        TokenKind.PLUS: Opcode.ADD,
        TokenKind.MINUS: Opcode.SUB,
        TokenKind.STAR: Opcode.MUL,
        TokenKind.SLASH: Opcode.DIV,
        TokenKind.CARET: Opcode.POW,
    }

    def __init__(self):
        self._pending: List[Instruction] = []
        self.program = Program()

    def clear(self):
        self._pending = []

    def _emit(self, ins: Instruction):
        LOGGER.debug(f"emit {ins}")
        self._pending.append(ins)

    def binary(self, kind: TokenKind):
        if kind not in Compiler.BINARY_OPS:
            raise ValueError(f"Unsupported operator {kind}")
        self._emit(Instruction(Compiler.BINARY_OPS[kind]))

    def negate(self):
        self._emit(Instruction(Opcode.NEG))

    def call(self, func: Function):
        self._emit(Instruction(Opcode.CALL, func))

    def variable(self, var: Variable):
        self._emit(Instruction(Opcode.PUSH_VAR, var))

    def constant(self, value: float):
        self._emit(Instruction(Opcode.PUSH_CONST, float(value)))

    def assemble(self) -> Program:
        self.program = Program(self._pending)
        self._pending = []
        LOGGER.debug(f"assembled {len(self.program)} instructions: {self.program.dump()}")
        return self.program
