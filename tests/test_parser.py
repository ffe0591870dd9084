import math

import numpy as np
import pytest

from funcparser import (
    LOGGER,
    FunctionParser,
    LexicalError,
    ParseSyntaxError,
    ParserConfig,
    SemanticError,
    UnboundVariableError,
)
from funcparser.engine.scanner import TokenKind


def run(source, **kwargs):
    parser = FunctionParser(source, **kwargs)
    assert parser.parse(), parser.error
    return parser.execute()


@pytest.mark.parametrize(
    "source, expected",
    [
        ("2+3*4", 14.0),
        ("2^3^2", 512.0),
        ("-2^2", 4.0),
        ("(1+2)*3", 9.0),
        ("10-4-3", 3.0),
        ("8/4/2", 1.0),
        ("2*-3", -6.0),
        ("--2", 2.0),
        ("-(2+3)", -5.0),
        ("2^-1", 0.5),
        ("1.5e1 * 2", 30.0),
        ("pow(2, 10)", 1024.0),
        ("sqrt(16) + log10(100)", 6.0),
        ("exp(0)", 1.0),
        (" 5*5*5 ", 125.0),
    ],
)
def test_arithmetic(source, expected):
    assert run(source) == pytest.approx(expected)


def test_postfix_program():
    parser = FunctionParser("2+3*4")
    parser.parse()
    assert parser.program.dump() == "2 3 4 * +"


def test_right_associative_power_program():
    parser = FunctionParser("a^b^c")
    parser.parse()
    assert parser.program.dump() == "a b c ^ ^"


def test_function_call_program():
    parser = FunctionParser("pow(x, 2) + sin(y)")
    parser.parse()
    assert parser.program.dump() == "x 2 pow/2 y sin/1 +"


def test_registered_constant_is_inlined():
    parser = FunctionParser("2*pi")
    parser.register_constant("pi", math.pi)
    assert parser.parse()
    assert parser.execute() == pytest.approx(2 * math.pi)
    assert parser.variable_names() == []


def test_constants_from_config():
    assert run("e^1", config=ParserConfig(constants={"e": math.e})) == pytest.approx(math.e)


def test_variable_listed_once():
    parser = FunctionParser("x+x*x")
    parser.parse()
    assert parser.variable_names() == ["x"]


def test_variables_in_discovery_order():
    parser = FunctionParser("y + x*y + z")
    parser.parse()
    assert parser.variable_names() == ["y", "x", "z"]


def test_rebinding_changes_result_without_reparse():
    parser = FunctionParser("x*2")
    parser.parse()
    cell = {"x": 3.0}
    parser.bind_variable("x", cell)
    assert parser.execute() == 6.0
    cell["x"] = 5.0
    assert parser.execute() == 10.0


def test_bind_with_explicit_key():
    parser = FunctionParser("x - y")
    parser.parse()
    values = [0.0, 2.0]
    parser.bind_variable("x", values, 1)
    parser.bind_variable("y", values, 0)
    assert parser.execute() == 2.0
    values[0] = 5.0
    assert parser.execute() == -3.0


def test_bind_numpy_array():
    parser = FunctionParser("sin(t)")
    parser.parse()
    values = np.zeros(1)
    parser.bind_variable("t", values, 0)
    assert parser.execute() == 0.0
    values[0] = math.pi / 2
    assert parser.execute() == pytest.approx(1.0)


def test_result_is_cached():
    parser = FunctionParser("x+1")
    parser.parse()
    cell = {"x": 1.0}
    parser.bind_variable("x", cell)
    parser.execute()
    cell["x"] = 10.0
    assert parser.result == 2.0
    assert parser.get_result() == 2.0
    assert parser.execute() == 11.0
    assert parser.get_result() == 11.0


def test_bind_unknown_variable_warns():
    LOGGER.drain()
    parser = FunctionParser("x")
    parser.parse()
    parser.bind_variable("q", {"q": 1.0})
    assert ("WARNING", "no such variable 'q'") in LOGGER.drain()
    assert parser.variable_names() == ["x"]


def test_unbound_variable_raises_on_execute():
    parser = FunctionParser("x+1")
    parser.parse()
    with pytest.raises(UnboundVariableError):
        parser.execute()


@pytest.mark.parametrize(
    "source, error",
    [
        ("pow(2)", SemanticError),
        ("sin(1, 2)", SemanticError),
        ("foo(1)", SemanticError),
        (".e5", LexicalError),
        ("2 $ 3", LexicalError),
        ("1e+", LexicalError),
        ("3.4.5", ParseSyntaxError),
        ("(1+2", ParseSyntaxError),
        ("1+", ParseSyntaxError),
        ("sin()", ParseSyntaxError),
        ("2 3", ParseSyntaxError),
        ("*2", ParseSyntaxError),
        ("", ParseSyntaxError),
    ],
)
def test_parse_failures(source, error):
    parser = FunctionParser(source)
    assert not parser.parse()
    assert parser.failed
    assert isinstance(parser.error, error)


def test_failure_is_logged():
    LOGGER.drain()
    parser = FunctionParser("pow(2)")
    parser.parse()
    msgs = LOGGER.drain()
    assert msgs[-1][0] == "ERROR"
    assert "wrong number of arguments for function 'pow'" in msgs[-1][1]


def test_failed_parse_executes_empty_program():
    parser = FunctionParser("1+")
    assert not parser.parse()
    assert len(parser.program) == 0
    assert parser.execute() == 0.0


def test_empty_source_executes_to_zero():
    parser = FunctionParser("   ")
    parser.parse()
    assert parser.execute() == 0.0


def test_error_state_is_sticky():
    parser = FunctionParser("1+")
    parser.parse()
    first = parser.error
    assert not parser.parse()
    assert parser.error is first


def test_reparse_reuses_variables():
    parser = FunctionParser("x+1")
    parser.parse()
    var = parser.symbols.variables["x"]
    assert parser.parse()
    assert parser.symbols.variables["x"] is var
    assert parser.program.dump() == "x 1 +"


@pytest.mark.parametrize(
    "source, check",
    [
        ("1/0", lambda v: v == math.inf),
        ("-1/0", lambda v: v == -math.inf),
        ("0/0", math.isnan),
        ("sqrt(0-1)", math.isnan),
        ("log(0)", lambda v: v == -math.inf),
        ("(0-8)^(1/3)", math.isnan),
    ],
)
def test_ieee_edge_cases(source, check):
    assert check(run(source))


def test_register_functions():
    parser = FunctionParser("double(3) + hyp(3, 4)")
    parser.register_unary_function("double", lambda v: 2 * v)
    parser.register_binary_function("hyp", math.hypot)
    assert parser.parse()
    assert parser.execute() == 11.0


def test_binary_function_argument_order():
    parser = FunctionParser("sub(10, 4)")
    parser.register_binary_function("sub", lambda a, b: a - b)
    parser.parse()
    assert parser.execute() == 6.0


def test_without_default_functions():
    parser = FunctionParser("sin(1)", ParserConfig(default_functions=False))
    assert not parser.parse()
    assert isinstance(parser.error, SemanticError)


def test_float_expectation_accepts_integer():
    parser = FunctionParser("7")
    parser.consume()
    assert parser.expect(TokenKind.FLOAT) == "7"
    assert parser.is_here(TokenKind.END)


def test_expect_rejects_other_tokens():
    parser = FunctionParser("x")
    parser.consume()
    with pytest.raises(ParseSyntaxError):
        parser.expect(TokenKind.FLOAT)


@pytest.mark.parametrize(
    "source",
    [
        "(" * 400 + "1" + ")" * 400,
        "-" * 600 + "1",
        "2^" * 1500 + "1",
    ],
)
def test_deep_nesting_fails_without_raising(source):
    LOGGER.drain()
    parser = FunctionParser(source)
    assert parser.parse() is False
    assert parser.failed
    assert isinstance(parser.error, ParseSyntaxError)
    assert "nested too deeply" in str(parser.error)
    assert len(parser.program) == 0
    assert parser.execute() == 0.0
    assert LOGGER.drain()[-1][0] == "ERROR"


def test_partial_parse_keeps_discovered_variables_but_no_program():
    parser = FunctionParser("x+")
    assert not parser.parse()
    assert parser.variable_names() == ["x"]
    assert len(parser.program) == 0
    assert parser.execute() == 0.0


def test_constant_registered_after_parse_stays_a_variable():
    parser = FunctionParser("2*pi")
    parser.parse()
    parser.register_constant("pi", math.pi)
    assert parser.variable_names() == ["pi"]
    assert parser.program.dump() == "2 pi *"
    parser.bind_variable("pi", {"pi": 3.0})
    assert parser.execute() == 6.0


def test_raising_native_propagates_from_execute():
    parser = FunctionParser("msqrt(x)")
    parser.register_unary_function("msqrt", math.sqrt)
    parser.parse()
    cell = {"x": 4.0}
    parser.bind_variable("x", cell)
    assert parser.execute() == 2.0
    cell["x"] = -1.0
    with pytest.raises(ValueError):
        parser.execute()
