"""
Statement Driver Tests

Tests for the tokenize-parse-evaluate loop and the host functions.
"""

import io
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pesl.interpreter import StatementDriver, build_namespace
from pesl.interpreter.natives import to_exit_code
from pesl.interpreter.results import (
    Completed, Exited, TokenizeFailure, ParseFailure, EvalFailure, is_failure,
)
from pesl.api.types import UNDEFINED


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def ctx(out):
    return build_namespace(out)


@pytest.fixture
def driver():
    return StatementDriver()


class TestStatementDriver:
    """Sequential statement execution."""

    def test_completes_when_stream_exhausted(self, driver, ctx, out):
        outcome = driver.run("let x = 5 println(x)", ctx, fatal=True)
        assert isinstance(outcome, Completed)
        assert outcome.statements == 2
        assert outcome.last_value is UNDEFINED
        assert out.getvalue() == "5\n"

    def test_empty_source(self, driver, ctx):
        outcome = driver.run("   ", ctx, fatal=False)
        assert outcome == Completed(0, None)

    def test_values_observed_in_order(self, driver, ctx):
        seen = []
        driver.run("1 2; 3", ctx, fatal=False, on_value=lambda v: seen.append(v.stringify()))
        assert seen == ["1", "2", "3"]

    def test_tokenize_failure_runs_nothing(self, driver, ctx, out):
        outcome = driver.run("println(1) @", ctx, fatal=True)
        assert isinstance(outcome, TokenizeFailure)
        assert outcome.index == 11
        assert outcome.fatal
        assert out.getvalue() == ""

    def test_parse_failure_keeps_earlier_effects(self, driver, ctx):
        outcome = driver.run("let x = 1 let = 2 let y = 3", ctx, fatal=True)
        assert isinstance(outcome, ParseFailure)
        assert outcome.token.lexeme == "="
        assert ctx.has_key("x")
        assert not ctx.has_key("y")

    def test_eval_failure_keeps_earlier_effects(self, driver, ctx):
        outcome = driver.run("let x = 1 missing let y = 2", ctx, fatal=False)
        assert isinstance(outcome, EvalFailure)
        assert not outcome.fatal
        assert outcome.payload.stringify() == "missing is not defined"
        assert ctx.get_key("x").stringify() == "1"
        assert not ctx.has_key("y")

    def test_failed_statement_stops_value_stream(self, driver, ctx):
        seen = []
        driver.run("1 missing 3", ctx, fatal=False, on_value=seen.append)
        assert len(seen) == 1

    def test_namespace_shared_between_runs(self, driver, ctx, out):
        driver.run("let x = 1", ctx, fatal=False)
        driver.run("println(x + 1)", ctx, fatal=False)
        assert out.getvalue() == "2\n"

    def test_only_semicolons(self, driver, ctx):
        assert driver.run(";; ;", ctx, fatal=True) == Completed(0, None)

    def test_parse_nesting_overflow(self, driver, ctx, out):
        source = "println(1) " + "-" * 5000 + "1"
        outcome = driver.run(source, ctx, fatal=True)
        assert isinstance(outcome, ParseFailure)
        assert outcome.message == "Maximum nesting depth exceeded"
        assert outcome.token.lexeme == "-"
        assert outcome.fatal
        assert out.getvalue() == "1\n"

    def test_echo_overflow_is_eval_failure(self, driver, ctx):
        driver.run("let a = []; let i = 0; while (i < 3000) { a = [a]; i = i + 1 }", ctx, fatal=True)
        outcome = driver.run("a", ctx, fatal=False, on_value=lambda v: v.stringify())
        assert isinstance(outcome, EvalFailure)
        assert outcome.report() == ["Maximum recursion depth exceeded"]

    def test_is_failure(self, driver, ctx):
        assert is_failure(driver.run("@", ctx, fatal=True))
        assert not is_failure(driver.run("1", ctx, fatal=True))


class TestFailureReports:
    """Structured diagnostics for each failure kind."""

    def test_tokenize_report(self, driver, ctx):
        outcome = driver.run("let x = #", ctx, fatal=True)
        assert outcome.report() == ["Unexpected character '#'", "At index 8"]

    def test_parse_report(self, driver, ctx):
        outcome = driver.run("let = 1", ctx, fatal=True)
        assert outcome.report() == [
            "Expected variable name after 'let'",
            "At token ASSIGN('=') [4, 5]",
        ]

    def test_eval_report(self, driver, ctx):
        outcome = driver.run("println(1, 2)", ctx, fatal=True)
        assert outcome.report() == ["Expected between 0 and 1 arguments, got 2"]


# =============================================================================
# Host Functions
# =============================================================================

class TestPrintln:
    """println([arg])"""

    def test_no_arguments_prints_blank_line(self, driver, ctx, out):
        driver.run("println()", ctx, fatal=True)
        assert out.getvalue() == "\n"

    def test_prints_stringified_argument(self, driver, ctx, out):
        driver.run('println("hi") println(0.5) println([1, true])', ctx, fatal=True)
        assert out.getvalue() == "hi\n0.5\n[1, true]\n"

    def test_returns_undefined(self, driver, ctx):
        outcome = driver.run("println()", ctx, fatal=True)
        assert outcome.last_value is UNDEFINED

    def test_two_arguments_is_arity_failure(self, driver, ctx, out):
        outcome = driver.run("println(1, 2)", ctx, fatal=True)
        assert isinstance(outcome, EvalFailure)
        assert out.getvalue() == ""

    def test_defaults_to_current_stdout(self, driver, capsys):
        driver.run("println(7)", build_namespace(), fatal=True)
        assert capsys.readouterr().out == "7\n"


class TestExit:
    """exit([code])"""

    def test_no_arguments_exits_zero(self, driver, ctx):
        assert driver.run("exit()", ctx, fatal=True) == Exited(0)

    def test_code_is_truncated(self, driver, ctx):
        assert driver.run("exit(3.9)", ctx, fatal=True) == Exited(3)
        assert driver.run("exit(-2.5)", ctx, fatal=True) == Exited(-2)

    def test_nothing_runs_after_exit(self, driver, ctx, out):
        outcome = driver.run("println(1) exit(3) println(2)", ctx, fatal=False)
        assert outcome == Exited(3)
        assert out.getvalue() == "1\n"

    def test_exit_from_inside_function(self, driver, ctx):
        outcome = driver.run("let quit = function() { exit(5) } quit() 1", ctx, fatal=True)
        assert outcome == Exited(5)

    def test_non_numeric_code_is_eval_failure(self, driver, ctx):
        outcome = driver.run('exit("x")', ctx, fatal=False)
        assert isinstance(outcome, EvalFailure)
        assert outcome.payload.stringify() == "Expected number, got string"

    def test_too_many_arguments(self, driver, ctx):
        assert isinstance(driver.run("exit(1, 2)", ctx, fatal=True), EvalFailure)

    @pytest.mark.parametrize("value,expected", [
        (np.float64(7.0), 7),
        (np.float64("nan"), 0),
        (np.float64("inf"), 2147483647),
        (np.float64("-inf"), -2147483648),
    ])
    def test_to_exit_code(self, value, expected):
        assert to_exit_code(value) == expected
