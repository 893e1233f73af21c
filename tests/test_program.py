"""Tests for the program tree, bind and the collection combinators."""

from __future__ import annotations

import itertools

import pytest

from efftree import run
from efftree.effects import all_choices
from efftree.handler import handler
from efftree.program import Operation, Program, Pure, bind, operation, pure
from efftree._collection_combinators import apply, collect_all, sequence


class TestConstruction:
    def test_pure_carries_value(self):
        assert pure(3) == Pure(3)
        assert Pure(3).value == 3

    def test_operation_defaults_to_identity_continuation(self):
        node = operation("read")
        assert node.params == ()
        assert node.continue_with("answer") == Pure("answer")

    def test_operation_params_become_tuple(self):
        assert operation("log", ["a", "b"]).params == ("a", "b")

    def test_single_string_params_rejected(self):
        with pytest.raises(TypeError):
            operation("print", "hi")
        with pytest.raises(TypeError):
            Operation("print", b"hi")  # type: ignore[arg-type]

    def test_operation_name_must_be_str(self):
        with pytest.raises(TypeError):
            Operation(42)  # type: ignore[arg-type]

    def test_building_an_operation_performs_nothing(self):
        calls: list[str] = []
        operation("print", ["x"], lambda _: calls.append("resumed") or Pure(None))
        assert calls == []

    def test_continuation_is_reusable(self):
        node = operation("decide", (), lambda b: Pure("yes" if b else "no"))
        assert node.continue_with(True) == Pure("yes")
        assert node.continue_with(False) == Pure("no")
        assert node.continue_with(True) == Pure("yes")

    def test_lift_keeps_programs_and_wraps_values(self):
        node = operation("x")
        assert Program.lift(node) is node
        assert Program.lift(5) == Pure(5)

    def test_repr_shows_name_and_params(self):
        assert repr(operation("ask", ["k"])) == "Operation('ask', ('k',))"


class TestBind:
    def test_leaf_applies_continuation(self):
        assert bind(pure(2), lambda x: pure(x * 10)) == Pure(20)

    def test_plain_results_are_lifted(self):
        assert bind(pure(2), lambda x: x + 1) == Pure(3)

    def test_operation_keeps_name_and_params(self, trace):
        program = bind(operation("ask", ["k"]), lambda v: operation("log", [v]))
        assert isinstance(program, Operation)
        assert program.name == "ask"
        assert trace(program, ["hello", None]) == (
            (("ask", ("k",)), ("log", ("hello",))),
            None,
        )

    def test_binder_must_be_callable(self):
        with pytest.raises(TypeError):
            bind(pure(1), 42)  # type: ignore[arg-type]

    def test_map_and_flat_map(self, trace):
        program = operation("read").map(lambda v: v + 1).flat_map(lambda v: operation("log", [v]))
        assert trace(program, [41]) == ((("read", ()), ("log", (42,))), None)

    def test_rshift_is_flat_map(self):
        assert (pure(2) >> (lambda v: pure(v * 3))) == Pure(6)


def _sample_tree() -> Program[tuple[bool, bool]]:
    return bind(
        operation("decide"),
        lambda a: bind(
            operation("log", [a]),
            lambda _: bind(operation("decide"), lambda b: pure((a, b))),
        ),
    )


def _f(value):
    return bind(operation("tick", [value]), lambda t: pure((value, t)))


def _g(value):
    return operation("emit", [value])


_ANSWERS = [list(combo) for combo in itertools.product([True, False], [None], [True, False], [7], ["ack"])]

_collector = handler(
    log=lambda message, resume: resume(),
    tick=lambda value, resume: resume(len(str(value))),
    emit=lambda value, resume: resume(("emitted", value)),
)


def _evaluate_all(program):
    return run(all_choices(_collector(program)))


class TestMonadLaws:
    @pytest.mark.parametrize("answers", _ANSWERS)
    def test_left_identity(self, trace, answers):
        assert trace(bind(pure(3), _f), answers) == trace(_f(3), answers)

    @pytest.mark.parametrize("answers", _ANSWERS)
    def test_right_identity(self, trace, answers):
        assert trace(bind(_sample_tree(), pure), answers) == trace(_sample_tree(), answers)

    @pytest.mark.parametrize("answers", _ANSWERS)
    def test_associativity(self, trace, answers):
        left = bind(bind(_sample_tree(), _f), _g)
        right = bind(_sample_tree(), lambda a: bind(_f(a), _g))
        assert trace(left, answers) == trace(right, answers)

    def test_associativity_after_full_evaluation(self):
        left = bind(bind(_sample_tree(), _f), _g)
        right = bind(_sample_tree(), lambda a: bind(_f(a), _g))
        assert _evaluate_all(left) == _evaluate_all(right)
        assert len(_evaluate_all(left)) == 4


class TestCombinators:
    def test_collect_all_in_order(self, trace):
        program = collect_all([pure(1), operation("ask", ["a"]), 3])
        assert trace(program, ["A"]) == ((("ask", ("a",)),), [1, "A", 3])

    def test_collect_all_empty(self):
        assert collect_all([]) == Pure([])

    def test_collect_all_runs_effects_left_to_right(self, trace):
        program = collect_all([operation("first"), operation("second")])
        operations, value = trace(program, [1, 2])
        assert [name for name, _ in operations] == ["first", "second"]
        assert value == [1, 2]

    def test_sequence_empty_is_none(self):
        assert sequence() == Pure(None)

    def test_sequence_keeps_last_value(self, trace):
        program = sequence(pure(1), operation("x"), pure(3))
        assert trace(program) == ((("x", ()),), 3)

    def test_apply_runs_function_then_arguments(self, trace):
        program = apply(pure(lambda a, b: a + b), pure(1), operation("ask", ["b"]))
        assert trace(program, [41]) == ((("ask", ("b",)),), 42)

    def test_apply_binds_program_result(self, trace):
        program = apply(pure(lambda x: operation("log", [x])), pure("hi"))
        assert trace(program) == ((("log", ("hi",)),), None)

    def test_apply_with_effectful_function(self, trace):
        program = apply(operation("pick"), pure(10))
        assert trace(program, [lambda x: x * 2]) == ((("pick", ()),), 20)

    def test_program_list_and_tuple(self):
        assert Program.list(1, pure(2)) == Pure([1, 2])
        assert Program.tuple(1, pure(2)) == Pure((1, 2))

    def test_program_collect_all_and_traverse(self):
        assert Program.collect_all([pure(1), 2]) == Pure([1, 2])
        assert Program.traverse([1, 2, 3], lambda v: pure(v * v)) == Pure([1, 4, 9])
