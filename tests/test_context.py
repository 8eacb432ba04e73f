"""
Unit tests for contexts: static built-ins, extensible contexts and chains.
"""

import math

import pytest
from mathexpr import (
    parse, Arity, Function, Builtins, BUILTINS, Context, ChainedContext, chained,
    BUILTIN_CONSTANTS, BUILTIN_FUNCTIONS,
    UnknownVariable, UnknownFunction, NumberArgs, TooFewArguments,
)


SHARED_EXPRESSIONS = [
    "1 + 2 * 3",
    "sin(pi / 6) + cos(0)",
    "sqrt(2) * exp(1) - ln(10)",
    "atan2(1, 2) + max(3, 1, 2) - min(-1, 4)",
    "round(2.5) + signum(-4) + floor(1.7) + ceil(1.2)",
    "abs(tanh(0.5)) + asinh(1) + acosh(2) + atanh(0.5)",
    "asin(0.5) + acos(0.5) + atan(2) + sinh(1) + cosh(1) + tan(1)",
    "e^2 - 3!",
]


class TestBuiltins:
    """Test the static built-in context."""

    def test_constants(self):
        """pi and e are defined; nothing else is."""
        assert BUILTINS.get_var("pi") == math.pi
        assert BUILTINS.get_var("e") == math.e
        assert BUILTINS.get_var("x") is None
        assert BUILTINS.get_var("PI") is None

    def test_function_descriptors(self):
        """get_func returns the catalog descriptor."""
        func = BUILTINS.get_func("atan2")
        assert isinstance(func, Function)
        assert func.arity == Arity.exact(2)
        assert BUILTINS.get_func("max").arity == Arity.at_least(1)
        assert BUILTINS.get_func("nope") is None

    def test_every_catalog_function_dispatches(self):
        """The hand-matched dispatch covers the whole catalog."""
        for name, func in BUILTIN_FUNCTIONS.items():
            args = [0.25] * max(func.arity.minimum, 1)
            assert float(BUILTINS.eval_func(name, args)) == pytest.approx(float(func(args)), nan_ok=True)

    def test_unknown_function(self):
        """Unmatched names raise UnknownFunction."""
        with pytest.raises(UnknownFunction):
            BUILTINS.eval_func("gamma", [1.0])

    def test_arity_checked(self):
        """Arity is checked by the static dispatch."""
        with pytest.raises(NumberArgs):
            BUILTINS.eval_func("cos", [])
        with pytest.raises(TooFewArguments):
            BUILTINS.eval_func("min", [])

    def test_stateless(self):
        """Instances are interchangeable."""
        assert Builtins().get_var("pi") == BUILTINS.get_var("pi")

    def test_catalog_read_only(self):
        """The shared catalog cannot be modified."""
        with pytest.raises(TypeError):
            BUILTIN_CONSTANTS["pi"] = 3.0
        with pytest.raises(TypeError):
            BUILTIN_FUNCTIONS["sin"] = None


class TestStaticDynamicParity:
    """The static and dynamic contexts agree on the built-in catalog."""

    @pytest.mark.parametrize("source", SHARED_EXPRESSIONS)
    def test_same_result(self, source):
        """Both realizations evaluate identically."""
        expr = parse(source)
        assert expr.eval(BUILTINS) == expr.eval(Context())

    @pytest.mark.parametrize("source", ["atan2(1)", "max()", "nope(1)", "x"])
    def test_same_errors(self, source):
        """Both realizations raise the same error type."""
        expr = parse(source)
        with pytest.raises(Exception) as static_info:
            expr.eval(BUILTINS)
        with pytest.raises(Exception) as dynamic_info:
            expr.eval(Context())
        assert type(static_info.value) is type(dynamic_info.value)


class TestContext:
    """Test the extensible context."""

    def test_starts_with_builtins(self):
        """Context() contains the built-in catalog."""
        ctx = Context()
        assert ctx.get_var("pi") == math.pi
        assert ctx.get_func("sqrt") is BUILTIN_FUNCTIONS["sqrt"]

    def test_empty(self):
        """Context.empty() contains nothing."""
        ctx = Context.empty()
        assert ctx.get_var("pi") is None
        assert ctx.get_func("sin") is None
        assert len(ctx.constants) == 0
        assert len(ctx.functions) == 0

    def test_with_constant(self):
        """Constants are stored as floats."""
        ctx = Context().with_constant("answer", 42)
        assert ctx.get_var("answer") == 42.0
        assert isinstance(ctx.get_var("answer"), float)
        assert parse("answer / 2").eval(ctx) == 21.0

    def test_zero_constant(self):
        """A constant of zero is still defined."""
        ctx = Context.empty().with_constant("z", 0.0)
        assert parse("z").eval(ctx) == 0.0

    def test_redefine_constant(self):
        """Later definitions replace earlier ones."""
        ctx = Context().with_constant("pi", 3.0)
        assert parse("pi").eval(ctx) == 3.0

    def test_builder_chaining(self):
        """Builder methods return the context itself."""
        ctx = Context()
        assert ctx.with_constant("a", 1.0) is ctx
        assert ctx.with_unary("twice", lambda x: 2 * x) is ctx
        assert ctx.without("a") is ctx

    def test_with_unary(self):
        """Unary functions take exactly one argument."""
        ctx = Context().with_unary("double", lambda x: 2 * x)
        assert parse("double(21)").eval(ctx) == 42.0
        with pytest.raises(NumberArgs) as exc_info:
            parse("double(1, 2)").eval(ctx)
        assert exc_info.value.name == "double"

    def test_with_binary(self):
        """Binary functions take exactly two arguments."""
        ctx = Context().with_binary("hypot", math.hypot)
        assert parse("hypot(3, 4)").eval(ctx) == 5.0
        with pytest.raises(NumberArgs) as exc_info:
            parse("hypot(3)").eval(ctx)
        assert exc_info.value.expected == 2

    def test_with_function_exact_arity(self):
        """An int arity is exact."""
        ctx = Context().with_function(
            "clamp", 3, lambda x, lo, hi: min(max(x, lo), hi), "clamp x to [lo, hi]"
        )
        assert parse("clamp(5, 0, 1)").eval(ctx) == 1.0
        assert ctx.get_func("clamp").doc == "clamp x to [lo, hi]"
        with pytest.raises(NumberArgs):
            parse("clamp(5, 0)").eval(ctx)

    def test_with_function_zero_arity(self):
        """Zero-argument functions are callable as name()."""
        ctx = Context().with_function("answer", 0, lambda: 42.0)
        assert parse("answer() + 1").eval(ctx) == 43.0

    def test_with_nary(self):
        """Variadic functions enforce their minimum."""
        ctx = Context().with_nary("total", lambda *xs: sum(xs), minimum=2)
        assert parse("total(1, 2, 3, 4)").eval(ctx) == 10.0
        with pytest.raises(TooFewArguments) as exc_info:
            parse("total(1)").eval(ctx)
        assert exc_info.value.minimum == 2

    def test_with_function_arity_object(self):
        """An Arity instance is used as given."""
        ctx = Context.empty().with_function("mean", Arity.at_least(1), lambda *xs: sum(xs) / len(xs))
        assert parse("mean(1, 2, 3)").eval(ctx) == 2.0
        assert str(ctx.get_func("mean").arity) == "1+"

    def test_without(self):
        """without() removes constants and functions."""
        ctx = Context().without("pi").without("sin")
        with pytest.raises(UnknownVariable):
            parse("pi").eval(ctx)
        with pytest.raises(UnknownFunction):
            parse("sin(0)").eval(ctx)
        assert parse("cos(0)").eval(ctx) == 1.0

    def test_without_missing_name(self):
        """Removing an undefined name is a no-op."""
        ctx = Context.empty().without("nothing")
        assert len(ctx.constants) == 0

    def test_views_read_only(self):
        """constants and functions are read-only views."""
        ctx = Context()
        with pytest.raises(TypeError):
            ctx.constants["x"] = 1.0
        with pytest.raises(TypeError):
            ctx.functions["f"] = None

    def test_views_track_changes(self):
        """Views reflect later registrations."""
        ctx = Context.empty()
        constants = ctx.constants
        ctx.with_constant("k", 1.0)
        assert constants["k"] == 1.0

    def test_contexts_independent(self):
        """Each Context has its own tables."""
        a = Context().with_constant("x", 1.0)
        b = Context()
        assert b.get_var("x") is None
        assert a.get_var("x") == 1.0

    def test_same_expression_many_contexts(self):
        """An Expression is reusable across contexts."""
        expr = parse("x * 2")
        assert expr.eval(Context().with_constant("x", 1.0)) == 2.0
        assert expr.eval(Context().with_constant("x", 5.0)) == 10.0


class TestArity:
    """Test arity descriptors."""

    def test_negative_rejected(self):
        """Arity cannot be negative."""
        with pytest.raises(ValueError):
            Arity.exact(-1)

    def test_coerce(self):
        """Ints coerce to exact arity."""
        assert Arity.coerce(2) == Arity.exact(2)
        assert Arity.coerce(Arity.at_least(1)) == Arity.at_least(1)

    def test_str(self):
        """Arity renders compactly."""
        assert str(Arity.exact(2)) == "2"
        assert str(Arity.at_least(0)) == "0+"


class TestChainedContext:
    """Test chained contexts."""

    def test_outer_shadows_inner(self):
        """pi = 1 in the outer context; cos still comes from the built-ins."""
        ctx = chained(Context.empty().with_constant("pi", 1.0), BUILTINS)
        assert parse("pi + cos(0)").eval(ctx) == 2.0

    def test_falls_through(self):
        """Names missing from outer come from inner."""
        ctx = ChainedContext(Context.empty().with_constant("g", 9.81), BUILTINS)
        assert ctx.get_var("e") == math.e
        assert ctx.get_var("g") == 9.81
        assert ctx.get_var("nope") is None

    def test_function_shadowing(self):
        """Outer functions shadow inner ones of the same name."""
        outer = Context.empty().with_unary("sin", lambda x: 100.0)
        ctx = chained(outer, BUILTINS)
        assert parse("sin(0) + cos(0)").eval(ctx) == 101.0
        assert ctx.get_func("sin") is outer.get_func("sin")

    def test_outer_arity_applies(self):
        """A shadowing function's own arity is checked."""
        outer = Context.empty().with_binary("max", lambda a, b: a if a > b else b)
        ctx = chained(outer, BUILTINS)
        with pytest.raises(NumberArgs):
            parse("max(1, 2, 3)").eval(ctx)

    def test_unknown_function_through_chain(self):
        """A name unknown to every layer raises UnknownFunction."""
        ctx = chained(Context.empty(), Context.empty())
        with pytest.raises(UnknownFunction):
            parse("f(1)").eval(ctx)

    def test_three_layers(self):
        """chained(a, b, c) searches a, then b, then c."""
        a = Context.empty().with_constant("x", 1.0)
        b = Context.empty().with_constant("x", 2.0).with_constant("y", 20.0)
        c = Context.empty().with_constant("y", 30.0).with_constant("z", 300.0)
        ctx = chained(a, b, c)
        assert parse("x + y + z").eval(ctx) == 321.0

    def test_zero_in_outer_shadows(self):
        """A zero-valued outer constant still shadows."""
        ctx = chained(Context.empty().with_constant("e", 0.0), BUILTINS)
        assert parse("e").eval(ctx) == 0.0

    def test_later_changes_visible(self):
        """Chains hold references, not copies."""
        inner = Context.empty()
        ctx = chained(Context.empty(), inner)
        inner.with_constant("late", 7.0)
        assert parse("late").eval(ctx) == 7.0
