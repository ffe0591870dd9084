import numpy as np
import torch

from typing import Any, Callable, Dict, List, Mapping, Optional

from ..engine.compiler import Opcode, Program
from ..engine.symbols import Function


class TorchExecutor:
    """
    Runs a compiled Program on tensors, so a whole batch of variable values
    is evaluated in one pass over the instructions.
    """

    # native callable -> torch equivalent
    _torch_functions = {
        np.log: torch.log,
        np.log10: torch.log10,
        np.exp: torch.exp,
        np.sqrt: torch.sqrt,
        np.sin: torch.sin,
        np.cos: torch.cos,
        np.tan: torch.tan,
        np.power: torch.pow,
        np.abs: torch.abs,
        np.sinh: torch.sinh,
        np.cosh: torch.cosh,
        np.tanh: torch.tanh,
        np.arctan2: torch.atan2,
        np.maximum: torch.maximum,
        np.minimum: torch.minimum,
    }

    _binary_ops = {
        Opcode.ADD: torch.add,
        Opcode.SUB: torch.sub,
        Opcode.MUL: torch.mul,
        Opcode.DIV: torch.div,
        Opcode.POW: torch.pow,
    }

    def __init__(
        self,
        program: Program,
        functions: Optional[Dict[str, Callable[..., torch.Tensor]]] = None,
        dtype: torch.dtype = torch.float64,
        device: torch.device = torch.device("cpu"),
    ):
        self.program = program
        self.functions = dict(functions or {})
        self.dtype = dtype
        self.device = device

    def _tensor(self, v) -> torch.Tensor:
        return torch.as_tensor(v, dtype=self.dtype, device=self.device)

    def execute(self, values: Optional[Mapping[str, Any]] = None) -> torch.Tensor:
        values = values or {}
        if not self.program:
            return self._tensor(0.0)

        stack: List[torch.Tensor] = []
        for opcode, operand in self.program:
            if opcode is Opcode.PUSH_CONST:
                stack.append(self._tensor(operand))
            elif opcode is Opcode.PUSH_VAR:
                if operand.name in values:
                    stack.append(self._tensor(values[operand.name]))
                else:
                    stack.append(self._tensor(operand.value()))
            elif opcode is Opcode.NEG:
                stack.append(torch.neg(stack.pop()))
            elif opcode is Opcode.CALL:
                args = stack[-operand.arity :]
                del stack[-operand.arity :]
                stack.append(self._call(operand, args))
            else:
                rhs = stack.pop()
                lhs = stack.pop()
                stack.append(TorchExecutor._binary_ops[opcode](lhs, rhs))

        return stack.pop()

    def _call(self, func: Function, args: List[torch.Tensor]) -> torch.Tensor:
        if func.name in self.functions:
            return self._tensor(self.functions[func.name](*args))
        torch_fn = TorchExecutor._torch_functions.get(func.fn)
        if torch_fn is not None:
            return torch_fn(*args)
        return self._elementwise(func, args)

    def _elementwise(self, func: Function, args: List[torch.Tensor]) -> torch.Tensor:
        args = torch.broadcast_tensors(*args)
        flat = [a.reshape(-1).tolist() for a in args]
        with np.errstate(all="ignore"):
            out = [float(func(*vals)) for vals in zip(*flat)]
        return self._tensor(out).reshape(args[0].shape)
