import numpy as np

from typing import Any, Callable, Dict, List, Optional

from ..errors import UnboundVariableError


class Function:
    """Native callable with a fixed arity of one or two arguments."""

    ARITIES = (1, 2)

    def __init__(self, name: str, arity: int, fn: Callable[..., float]):
        if arity not in Function.ARITIES:
            raise ValueError(f"Unsupported arity {arity} for function '{name}'")
        if not callable(fn):
            raise TypeError(f"Function '{name}' is not callable")
        self.name = name
        self.arity = arity
        self.fn = fn

    def __call__(self, *args):
        return self.fn(*args)

    def __repr__(self):
        return f"Function({self.name!r}, arity={self.arity})"


class Variable:
    """
    Named slot read through a caller-owned table. The table is only indexed
    at execution time, so mutating it between runs changes the results.
    """

    def __init__(self, name: str):
        self.name = name
        self._table = None
        self._key = None

    def bind(self, table: Any, key: Any = None):
        self._table = table
        self._key = self.name if key is None else key

    @property
    def bound(self) -> bool:
        return self._table is not None

    def value(self):
        if self._table is None:
            raise UnboundVariableError(self.name)
        return self._table[self._key]

    def __repr__(self):
        return f"Variable({self.name!r})"


DEFAULT_FUNCTIONS = {
    "log": (1, np.log),
    "log10": (1, np.log10),
    "exp": (1, np.exp),
    "sqrt": (1, np.sqrt),
    "sin": (1, np.sin),
    "cos": (1, np.cos),
    "tan": (1, np.tan),
    "pow": (2, np.power),
}


class SymbolTable:

    def __init__(self, default_functions: bool = True):
        self.constants: Dict[str, float] = {}
        self.variables: Dict[str, Variable] = {}
        self.functions: Dict[str, Function] = {}

        if default_functions:
            for name, (arity, fn) in DEFAULT_FUNCTIONS.items():
                self.add_function(name, arity, fn)

    def add_function(self, name: str, arity: int, fn: Callable[..., float]) -> Function:
        func = Function(name, arity, fn)
        self.functions[name] = func
        return func

    def add_constant(self, name: str, value: float):
        self.constants[name] = float(value)

    def constant(self, name: str) -> Optional[float]:
        return self.constants.get(name)

    def function(self, name: str) -> Optional[Function]:
        return self.functions.get(name)

    def variable(self, name: str) -> Variable:
        """Return the variable called `name`, creating it on first reference."""
        if name not in self.variables:
            self.variables[name] = Variable(name)
        return self.variables[name]

    def variable_names(self) -> List[str]:
        return list(self.variables)
