from .config import ParserConfig
from .errors import (
    FunctionParserError,
    LexicalError,
    ParseSyntaxError,
    SemanticError,
    UnboundVariableError,
)
from .logger import LOGGER
from .engine import FunctionParser, Program
from .backends import TorchExecutor, axis, sweep


def evaluate(expr, values=None, constants=None):
    """Parse `expr` and evaluate it once, reading variables from the `values` mapping."""
    values = values or {}
    parser = FunctionParser(expr, ParserConfig(constants=constants))
    if not parser.parse():
        raise parser.error
    for name in parser.variable_names():
        if name in values:
            parser.bind_variable(name, values)
    return parser.execute()
