import math
import random
import re
import string
import warnings

import pytest

from mathrepl.errors import EvaluationError
from mathrepl.evaluator import evaluate
from mathrepl.symbols import SymbolTable
from mathrepl.value import Real, Value


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", Real(1.0)),
        pytest.param("-1", Real(-1.0)),
        pytest.param("+1", Real(1.0)),
        pytest.param("1+2", Real(3.0)),
        pytest.param("(1+2)", Real(3.0)),
        pytest.param("-(1+2)", Real(-3.0)),
        pytest.param("(((1)))", Real(1.0)),
        pytest.param("1 * 4 + 5", Real(9.0)),
        pytest.param("1 + 4 * 5", Real(21.0)),
        pytest.param("10 / 5 / 2 / 2", Real(0.5)),
        pytest.param("10 - 5 - 2", Real(3.0)),
        pytest.param("10 + 2 * (5 + 3 - 1)", Real(24.0)),
        pytest.param("1+2*3\n", Real(7.0)),
        pytest.param("(1+2)*3\n", Real(9.0)),
        pytest.param("2^3^2\n", Real(512.0)),
        pytest.param("(2^3)^2", Real(64.0)),
        pytest.param("-2^2", Real(-4.0)),
        pytest.param("2^-1", Real(0.5)),
        pytest.param("2*-3", Real(-6.0)),
        pytest.param("1 - -1", Real(2.0)),
        pytest.param("--1", Real(1.0)),
        pytest.param("+-+1", Real(-1.0)),
        pytest.param("0^0", Real(1.0)),
        # factorial
        pytest.param("5!\n", Real(120.0)),
        pytest.param("0!\n", Real(1.0)),
        pytest.param("3!!", Real(720.0)),
        pytest.param("-3!", Real(-6.0)),
        pytest.param("2*3!", Real(12.0)),
        pytest.param("2^3!", Real(64.0)),
        pytest.param("(1+2)!", Real(6.0)),
        # number literals
        pytest.param("1.5e1", Real(15.0)),
        pytest.param("1.", Real(1.0)),
        pytest.param("2E-1*10", Real(2.0)),
        pytest.param("0x10", Real(16.0)),
        pytest.param("0x1p4", Real(16.0)),
        # whitespace
        pytest.param("\t 1 +\t2   ", Real(3.0)),
        pytest.param("7\nthis part is never read", Real(7.0)),
        # built-in constants
        pytest.param("2 * pi / pi", Real(2.0)),
        pytest.param("e^0", Real(1.0)),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: Value) -> None:
    assert evaluate(code, SymbolTable()) == expected_ret_val


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("pi\n", math.pi),
        pytest.param("e", math.e),
        pytest.param("0.5!", math.gamma(1.5)),
        pytest.param("2^0.5", math.sqrt(2.0)),
        pytest.param("1/3", 1 / 3),
    ],
)
def test_eval_approximate(code: str, expected: float) -> None:
    result = evaluate(code, SymbolTable())
    assert isinstance(result, Real)
    assert math.isclose(result.v, expected)


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("10^400"),
        pytest.param("0^-1"),
        pytest.param("200!"),
        pytest.param("1e999"),
        pytest.param("0x1p99999"),
    ],
)
def test_overflow_is_infinite(code: str) -> None:
    assert evaluate(code, SymbolTable()) == Real(math.inf)


def test_same_line_twice_gives_same_result() -> None:
    symbols = SymbolTable()
    first = evaluate("2 * (pi + 1)! / e\n", symbols)
    second = evaluate("2 * (pi + 1)! / e\n", symbols)
    assert first == second

    with pytest.raises(EvaluationError) as first_error:
        evaluate("1 + (2 / 0)", symbols)
    with pytest.raises(EvaluationError) as second_error:
        evaluate("1 + (2 / 0)", symbols)
    assert first_error.value == second_error.value


def test_failed_evaluation_keeps_symbols() -> None:
    symbols = SymbolTable()
    names = symbols.names()
    with pytest.raises(EvaluationError):
        evaluate("pi + foo", symbols)
    assert symbols.names() == names
    assert evaluate("pi", symbols) == Real(math.pi)


def eval_py(code: str) -> float | str:
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            res = eval(code, {"__builtins__": {}})
    except Exception as e:
        return str(e)
    if isinstance(res, (int, float)):
        return float(res)
    return f"not a number: {res!r}"


def eval_my(code: str) -> float | str:
    try:
        res = evaluate(code, SymbolTable())
    except EvaluationError as e:
        return e.errmsg
    assert isinstance(res, Real)
    return res.v


def test_agrees_with_python_on_random_expressions() -> None:
    rng = random.Random(1729)
    alphabet = string.digits + "()+-*/ "
    checked = 0
    for _ in range(2000):
        code = "".join(rng.choices(alphabet, k=10))

        if re.findall(r"\*\s*\*", code):
            continue  # avoid generating powers (10**4)

        if re.findall(r"/\s*/", code):
            continue  # avoid generating int devision (10 // 3)

        if re.findall(r"(?<![0-9])0[0-9]", code):
            continue  # python rejects leading zeros (007)

        res_py = eval_py(code)
        res_my = eval_my(code)
        if isinstance(res_py, float):
            assert isinstance(res_my, float), f"{code!r}: py={res_py} my={res_my}"
            assert math.isclose(res_my, res_py, rel_tol=1e-9, abs_tol=1e-9), f"{code!r}: py={res_py} my={res_my}"
        else:
            assert isinstance(res_my, str), f"{code!r}: py={res_py} my={res_my}"
        checked += 1
    assert checked > 500


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("(-0)^-1", -math.inf),
        pytest.param("(-0)^-3", -math.inf),
        pytest.param("(-0)^-2", math.inf),
        pytest.param("(-0)^-0.5", math.inf),
        pytest.param("0^-1", math.inf),
    ],
)
def test_zero_base_negative_exponent_keeps_sign(code: str, expected: float) -> None:
    assert evaluate(code, SymbolTable()) == Real(expected)
