import numpy as np

from typing import List

from .compiler import Opcode, Program


class Executor:
    """
    Stack machine running a compiled Program. Arithmetic is done on numpy
    float64 scalars so division by zero and domain errors give inf/nan.
    """

    _binary_ops = {
        Opcode.ADD: np.add,
        Opcode.SUB: np.subtract,
        Opcode.MUL: np.multiply,
        Opcode.DIV: np.divide,
        Opcode.POW: np.power,
    }

    def __init__(self, program: Program):
        self.program = program
        self._stack: List[np.float64] = []

    def execute(self) -> float:
        if not self.program:
            return 0.0

        stack = self._stack
        stack.clear()

        with np.errstate(all="ignore"):
            for opcode, operand in self.program:
                if opcode is Opcode.PUSH_CONST:
                    stack.append(np.float64(operand))
                elif opcode is Opcode.PUSH_VAR:
                    stack.append(np.float64(operand.value()))
                elif opcode is Opcode.NEG:
                    stack.append(-stack.pop())
                elif opcode is Opcode.CALL:
                    # last popped operand is the first argument
                    args = stack[-operand.arity :]
                    del stack[-operand.arity :]
                    stack.append(operand(*args))
                else:
                    rhs = stack.pop()
                    lhs = stack.pop()
                    stack.append(Executor._binary_ops[opcode](lhs, rhs))

            return float(stack.pop())
