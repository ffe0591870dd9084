from .scanner import Scanner, Token, TokenKind
from .symbols import Function, SymbolTable, Variable
from .compiler import Compiler, Instruction, Opcode, Program
from .executor import Executor
from .parser import FunctionParser
