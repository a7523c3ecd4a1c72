"""
PESL Evaluator Tests

Tests for statement evaluation, the object model and contexts.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pesl.api.context import Context
from pesl.api.types import PESLObject, PESLFunction, ObjectType, UNDEFINED, format_number
from pesl.compiler import parse_all
from pesl.errors import EvalError, ArityError, validate_argument_count


def run(source, ctx=None):
    """Evaluate every statement and return the last value."""
    ctx = ctx if ctx is not None else Context()
    result = UNDEFINED
    for statement in parse_all(source):
        result = statement.evaluate(ctx)
    return result


def text(source, ctx=None):
    return run(source, ctx).stringify()


class TestBasicExecution:
    """Test basic statement evaluation."""

    def test_let_defines_and_returns_value(self):
        ctx = Context()
        assert text("let x = 42", ctx) == "42"
        assert ctx.get_key("x").as_number() == 42.0

    def test_arithmetic(self):
        assert text("10 + 20 * 2") == "50"
        assert text("(10 + 20) * 2") == "60"
        assert text("7 / 2") == "3.5"
        assert text("-3 + 1") == "-2"

    def test_remainder_follows_dividend(self):
        assert text("7 % 3") == "1"
        assert text("-7 % 3") == "-1"

    def test_division_by_zero(self):
        assert text("1 / 0") == "Infinity"
        assert text("-1 / 0") == "-Infinity"
        assert text("0 / 0") == "NaN"

    def test_string_concatenation(self):
        assert text('"a" + 1') == "a1"
        assert text('1 + "a"') == "1a"
        assert text('"x" + true') == "xtrue"

    def test_comparison_and_equality(self):
        assert text("1 < 2") == "true"
        assert text("2 <= 1") == "false"
        assert text('"a" == "a"') == "true"
        assert text('1 == "1"') == "false"
        assert text("undefined == undefined") == "true"
        assert text("[1, 2] == [1, 2]") == "true"

    def test_logical_operators_short_circuit(self):
        assert text("false && missing") == "false"
        assert text("true || missing") == "true"
        assert text("!false") == "true"

    def test_assignment_updates_existing_name(self):
        ctx = Context()
        run("let x = 1 x = x + 1", ctx)
        assert ctx.get_key("x").stringify() == "2"

    def test_statements_see_earlier_effects(self):
        assert text("let a = 2 let b = a * 3 b") == "6"


class TestControlFlow:
    """Test control flow statements."""

    def test_if_true(self):
        assert text("if (1 < 2) { \"yes\" } else { \"no\" }") == "yes"

    def test_if_false_without_else(self):
        assert run("if (false) { 1 }") is UNDEFINED

    def test_else_if(self):
        assert text("let n = 0 if (n > 0) { 1 } else if (n == 0) { 2 } else { 3 }") == "2"

    def test_while_loop(self):
        ctx = Context()
        run("let i = 0 let total = 0 while (i < 5) { total = total + i i = i + 1 }", ctx)
        assert ctx.get_key("total").stringify() == "10"

    def test_block_scope_does_not_leak(self):
        ctx = Context()
        run("if (true) { let inner = 1 }", ctx)
        assert not ctx.has_key("inner")


class TestFunctions:
    """Test function literals and calls."""

    def test_call_and_return(self):
        assert text("let add = function(a, b) { return a + b } add(2, 3)") == "5"

    def test_implicit_result_is_last_statement(self):
        assert text("let f = function() { 7 } f()") == "7"

    def test_missing_arguments_are_undefined(self):
        assert text("let f = function(a, b) { return b } f(1)") == "undefined"

    def test_too_many_arguments(self):
        with pytest.raises(ArityError):
            run("let f = function(a) { return a } f(1, 2)")

    def test_recursion(self):
        source = """
            let fact = function(n) {
                if (n <= 1) { return 1 }
                return n * fact(n - 1)
            }
            fact(10)
        """
        assert text(source) == "3628800"

    def test_closure_keeps_defining_scope(self):
        source = """
            let counter = function() {
                let count = 0
                return function() { count = count + 1 return count }
            }
            let next = counter()
            next()
            next()
        """
        assert text(source) == "2"

    def test_method_call_binds_this(self):
        assert text("let m = {v: 3, get: function() { return this.v }} m.get()") == "3"

    def test_function_stringify_uses_let_name(self):
        assert text("let f = function() { 1 } f") == "<function f>"

    def test_runaway_recursion_is_an_eval_error(self):
        with pytest.raises(EvalError) as info:
            run("let f = function(n) { return f(n + 1) } f(0)")
        assert info.value.payload.stringify() == "Maximum recursion depth exceeded"


class TestCollections:
    """Test arrays and maps."""

    def test_array_index_and_assign(self):
        assert text("let a = [1, 2, 3] a[1] = 20 a") == "[1, 20, 3]"

    def test_array_out_of_bounds(self):
        with pytest.raises(EvalError) as info:
            run("[1][1]")
        assert "out of bounds" in info.value.message

    def test_map_members(self):
        assert text('let m = {a: 1} m.b = 2 m["c"] = 3 m') == "{a: 1, b: 2, c: 3}"
        assert text("{a: 1}.missing") == "undefined"


class TestEvaluationErrors:
    """Evaluation failures carry a PESL payload."""

    def test_undefined_name(self):
        with pytest.raises(EvalError) as info:
            run("missing")
        assert info.value.payload.stringify() == "missing is not defined"

    def test_assign_to_undeclared(self):
        with pytest.raises(EvalError):
            run("y = 1")

    def test_arithmetic_type_error(self):
        with pytest.raises(EvalError) as info:
            run("1 - true")
        assert info.value.message == "Expected number, got boolean"

    def test_condition_must_be_boolean(self):
        with pytest.raises(EvalError):
            run("if (1) { 2 }")

    def test_call_non_function(self):
        with pytest.raises(EvalError) as info:
            run("let x = 1 x()")
        assert info.value.message == "Cannot call number"


# =============================================================================
# Object Model
# =============================================================================

class TestObjects:
    """Tests for PESLObject."""

    @pytest.mark.parametrize("value,expected", [
        (1.0, "1"),
        (-4.0, "-4"),
        (0.5, "0.5"),
        (1e20, "1e+20"),
        (float("nan"), "NaN"),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_stringify_variants(self):
        assert UNDEFINED.stringify() == "undefined"
        assert PESLObject.string("hi").stringify() == "hi"
        assert PESLObject.boolean(True).stringify() == "true"
        items = PESLObject.array([PESLObject.number(1), PESLObject.string("a")])
        assert items.stringify() == "[1, a]"
        assert PESLObject.map({"k": UNDEFINED}).stringify() == "{k: undefined}"

    def test_stringify_self_containing_array(self):
        assert text("let a = [1] a[0] = a a") == "[[...]]"

    def test_stringify_self_containing_map(self):
        assert text("let m = {v: 1} m.self = m m") == "{v: 1, self: {...}}"

    def test_shared_element_is_not_a_cycle(self):
        assert text("let a = [1]; [a, a]") == "[[1], [1]]"

    def test_equals_self_containing(self):
        assert text("let a = [1] a[0] = a a == a") == "true"
        assert text("let a = [1] a[0] = a let b = [1] b[0] = b a == b") == "true"
        assert text("let a = [1] a[0] = a a == [a, 2]") == "false"

    def test_as_number(self):
        assert PESLObject.number(3).as_number() == 3.0
        with pytest.raises(EvalError) as info:
            PESLObject.string("x").as_number()
        assert info.value.message == "Expected number, got string"

    def test_type_tags(self):
        assert PESLObject.number(1).type == ObjectType.NUMBER
        assert PESLObject.boolean(False).type == ObjectType.BOOLEAN
        assert PESLObject.array([]).type_name == "array"

    def test_native_method_requires_receiver(self):
        function = PESLFunction.native("m", lambda args, this: this, is_method=True)
        target = PESLObject.function(function)
        with pytest.raises(EvalError):
            target.call([])
        receiver = PESLObject.string("r")
        assert target.call([], receiver) is receiver


class TestArity:
    """Tests for argument count validation."""

    def test_in_range(self):
        validate_argument_count([], 0, 1)
        validate_argument_count([UNDEFINED], 0, 1)

    def test_out_of_range(self):
        with pytest.raises(ArityError) as info:
            validate_argument_count([UNDEFINED, UNDEFINED], 0, 1)
        assert info.value.message == "Expected between 0 and 1 arguments, got 2"
        assert isinstance(info.value, EvalError)

    def test_exact_and_open_ranges(self):
        with pytest.raises(ArityError) as info:
            validate_argument_count([], 1, 1)
        assert info.value.message == "Expected exactly 1 arguments, got 0"
        validate_argument_count([UNDEFINED] * 5, 1, None)


# =============================================================================
# Contexts
# =============================================================================

class TestContext:
    """Tests for the namespace."""

    def test_let_and_get(self):
        ctx = Context()
        ctx.let_key("x", PESLObject.number(1))
        assert "x" in ctx
        assert ctx.get_key("x").stringify() == "1"

    def test_child_sees_parent_and_assigns_through(self):
        ctx = Context()
        ctx.let_key("x", PESLObject.number(1))
        child = ctx.push()
        child.set_key("x", PESLObject.number(2))
        assert ctx.get_key("x").stringify() == "2"
        assert "x" not in child

    def test_child_let_shadows(self):
        ctx = Context()
        ctx.let_key("x", PESLObject.number(1))
        child = ctx.push()
        child.let_key("x", PESLObject.number(2))
        assert ctx.get_key("x").stringify() == "1"

    def test_missing_name(self):
        with pytest.raises(EvalError):
            Context().set_key("nope", UNDEFINED)
