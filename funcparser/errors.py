class FunctionParserError(Exception):
    """Base class for every error raised while compiling an expression."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class LexicalError(FunctionParserError):
    pass


class ParseSyntaxError(FunctionParserError):
    pass


class SemanticError(FunctionParserError):
    pass


class UnboundVariableError(FunctionParserError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"variable '{name}' is not bound")
        self.name = name
