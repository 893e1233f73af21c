from __future__ import annotations

import pytest

from efftree import Operation, do, run
from efftree.effects import (
    Log,
    Print,
    collect_print_handler,
    print_handler,
    reverse_print_handler,
)


@do
def abc():
    yield Print("A")
    yield Print("B")
    yield Print("C")
    return "done"


class TestPrint:
    def test_natural_order(self, sink):
        assert run(abc(), [print_handler(sink.append)]) == "done"
        assert sink == ["A", "B", "C"]

    def test_reverse_order(self, sink):
        result = run(abc(), [reverse_print_handler(), print_handler(sink.append)])
        assert result == "done"
        assert sink == ["C", "B", "A"]

    def test_reverse_handler_alone_leaves_prints_for_outer_handler(self):
        residual = reverse_print_handler()(abc())
        assert isinstance(residual, Operation)
        assert residual.params == ("C",)

    def test_collect(self):
        assert run(abc(), [collect_print_handler()]) == ("done", ("A", "B", "C"))

    def test_collect_without_prints(self):
        @do
        def silent():
            return 1

        assert run(silent(), [collect_print_handler()]) == (1, ())

    def test_other_effects_are_forwarded(self, sink):
        @do
        def mixed():
            yield Print("shown")
            yield Log("not mine")
            return "ok"

        residual = print_handler(sink.append)(mixed())
        assert isinstance(residual, Operation)
        assert residual.name == "log"
        assert sink == ["shown"]

    def test_sink_must_be_callable(self):
        with pytest.raises(TypeError):
            print_handler("stdout")  # type: ignore[arg-type]
