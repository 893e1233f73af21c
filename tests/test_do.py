"""Tests for the @do builder and its replay-based multi-shot resumption."""

from __future__ import annotations

import pytest

from efftree import ReplayDivergenceError, collect_all, do, handler, run
from efftree.do import DoYieldFunction, build_program
from efftree.kleisli import KleisliProgram
from efftree.program import Operation, Pure, operation


@do
def add_two_reads():
    a = yield operation("read")
    b = yield operation("read")
    return a + b


@do
def two_points():
    a = yield operation("first")
    b = yield operation("second")
    return (a, b)


@do
def scaled(factor: int, value: int):
    extra = yield operation("read")
    return factor * value + extra


class TestBuilder:
    def test_returns_kleisli_program(self):
        assert isinstance(add_two_reads, DoYieldFunction)
        assert isinstance(add_two_reads, KleisliProgram)

    def test_each_yield_is_a_suspension_point(self, trace):
        assert trace(add_two_reads(), [1, 2]) == ((("read", ()), ("read", ())), 3)

    def test_plain_function_becomes_leaf(self):
        @do
        def constant():
            return 7

        assert constant() == Pure(7)

    def test_generator_without_yield_reached_is_leaf(self):
        @do
        def finishes_early():
            return "done"
            yield  # pragma: no cover

        assert finishes_early() == Pure("done")

    def test_yielded_plain_value_is_a_leaf(self):
        @do
        def echo():
            x = yield 5
            return x * 2

        assert echo() == Pure(10)

    def test_nested_programs_are_flattened(self, trace):
        @do
        def outer():
            first = yield add_two_reads()
            second = yield operation("read")
            return first, second

        operations, value = trace(outer(), [1, 2, 3])
        assert [name for name, _ in operations] == ["read", "read", "read"]
        assert value == (3, 3)

    def test_returned_program_is_continued(self, trace):
        @do
        def ends_with_log():
            value = yield operation("read")
            return operation("log", [value])

        assert trace(ends_with_log(), ["x"]) == ((("read", ()), ("log", ("x",))), None)

    def test_build_program_lifts_non_generators(self):
        assert build_program(lambda a, b: a + b, (1, 2)) == Pure(3)

    def test_build_program_replays_history(self, trace):
        def body():
            a = yield operation("first")
            b = yield operation("second")
            return a, b

        program = build_program(body, history=("x",))
        assert isinstance(program, Operation)
        assert program.name == "second"
        assert trace(program, ["y"]) == ((("second", ()),), ("x", "y"))

    def test_build_program_with_every_answer_recorded_is_leaf(self):
        def body():
            a = yield operation("first")
            b = yield operation("second")
            return a, b

        assert build_program(body, history=("x", "y")) == Pure(("x", "y"))

    def test_build_program_with_extra_answers_diverges(self):
        def body():
            a = yield operation("first")
            return a

        with pytest.raises(ReplayDivergenceError) as exc_info:
            build_program(body, history=("x", "y"))
        assert exc_info.value.consumed == 1
        assert exc_info.value.expected == 2


class TestMultiShot:
    def test_resuming_twice_equals_separate_programs(self):
        def second_from(a):
            return operation("second").map(lambda b: (a, b))

        twice = handler(
            first=lambda resume: collect_all([resume("x"), resume("y")]),
            second=lambda resume: resume("s"),
        )
        assert run(twice(two_points())) == [("x", "s"), ("y", "s")]
        assert run(twice(two_points())) == [run(twice(second_from("x"))), run(twice(second_from("y")))]

    def test_continuations_are_independent(self, trace):
        program = two_points()
        assert isinstance(program, Operation)
        assert trace(program.continue_with(1), ["a"]) == ((("second", ()),), (1, "a"))
        assert trace(program.continue_with(2), ["b"]) == ((("second", ()),), (2, "b"))
        assert trace(program.continue_with(1), ["c"]) == ((("second", ()),), (1, "c"))

    def test_replay_reruns_prefix(self):
        runs: list[str] = []

        @do
        def counted():
            runs.append("start")
            a = yield operation("first")
            return a

        program = counted()
        assert runs == ["start"]
        assert program.continue_with(1) == Pure(1)
        assert runs == ["start", "start"]
        assert program.continue_with(2) == Pure(2)
        assert runs == ["start", "start", "start"]

    def test_divergent_body_raises(self):
        flag = {"stop": False}

        @do
        def divergent():
            if flag["stop"]:
                return "early"
            a = yield operation("first")
            return a

        program = divergent()
        flag["stop"] = True
        with pytest.raises(ReplayDivergenceError) as exc_info:
            program.continue_with(1)
        assert exc_info.value.expected == 1
        assert exc_info.value.consumed == 0
        assert "divergent" in str(exc_info.value)


class TestKleisliHelpers:
    def test_metadata_is_preserved(self):
        assert scaled.__name__ == "scaled"
        assert scaled.original_generator is scaled.original_func

    def test_partial(self, trace):
        double = scaled.partial(2)
        assert trace(double(5), [1]) == ((("read", ()),), 11)
        assert trace(double.partial(value=4)(), [0]) == ((("read", ()),), 8)

    def test_fmap(self, trace):
        assert trace(scaled.fmap(str)(2, 5), [1]) == ((("read", ()),), "11")

    def test_and_then_k(self, trace):
        logged = scaled.and_then_k(lambda v: operation("log", [v]))
        assert trace(logged(2, 5), [1]) == ((("read", ()), ("log", (11,))), None)
        assert trace((scaled >> (lambda v: v + 1))(2, 5), [1]) == ((("read", ()),), 12)

    def test_fmap_requires_callable(self):
        with pytest.raises(TypeError):
            scaled.fmap(3)  # type: ignore[arg-type]

    def test_methods_bind_self(self, trace):
        class Greeter:
            def __init__(self, greeting: str) -> None:
                self.greeting = greeting

            @do
            def greet(self, name: str):
                punctuation = yield operation("ask", ["punctuation"])
                return f"{self.greeting}, {name}{punctuation}"

        operations, value = trace(Greeter("Hello").greet("Ada"), ["!"])
        assert operations == (("ask", ("punctuation",)),)
        assert value == "Hello, Ada!"
