"""Effect handlers over program trees.

This example walks through the main ideas:
- output printed in natural and reversed order by swapping a handler
- state threaded through a program without mutable storage
- search strategies over the same nondeterministic program
- cooperative flows resumed by a virtual-clock scheduler
- unhandled effects reported by name

Run with: uv run python examples/basic_effects.py
"""

import math

from efftree import (
    Get,
    Now,
    Print,
    Put,
    Wait,
    all_choices,
    backtrack,
    choose,
    choose_in,
    do,
    guard,
    operation,
    par,
    pick_max,
    print_handler,
    reverse_print_handler,
    run,
    run_scheduled,
    run_state,
    sync_run,
)


# ============================================================================
# Output
# ============================================================================


@do
def abc():
    yield Print("A")
    yield Print("B")
    yield Print("C")


def output_demo():
    print("natural order:")
    run(abc(), [print_handler()])
    print("reversed:")
    run(abc(), [reverse_print_handler(), print_handler()])


# ============================================================================
# State
# ============================================================================


@do
def add_ten():
    x = yield Get()
    yield Put(x + 10)
    return (yield Get())


def state_demo():
    print(f"state from 5: {run(run_state(add_ten(), 5))}")


# ============================================================================
# Choice
# ============================================================================


@do
def difference():
    x = yield choose(15, 30)
    y = yield choose(5, 10)
    return x - y


@do
def pythagorean(low, high):
    a = yield choose_in(low, high - 1)
    b = yield choose_in(a + 1, high)
    c = math.isqrt(a * a + b * b)
    yield guard(c * c == a * a + b * b)
    return (a, b, c)


def choice_demo():
    print(f"every difference: {run(difference(), [all_choices])}")
    print(f"largest difference: {run(difference(), [pick_max])}")
    print(f"first triple in [4, 15]: {run(pythagorean(4, 15), [backtrack])}")


# ============================================================================
# Cooperative flows
# ============================================================================


@do
def slow(label, delay):
    yield Wait(delay)
    yield Print(f"{label} done")
    return label


@do
def race():
    pair = yield par(slow("left", 2.0), slow("right", 1.0))
    finished_at = yield Now()
    return pair, finished_at


def scheduler_demo():
    result = run_scheduled(race(), [print_handler()])
    print(f"par result: {result.value}")


# ============================================================================
# Unhandled effects
# ============================================================================


def unhandled_demo():
    result = sync_run(operation("frobnicate"), [print_handler()])
    print(f"unhandled: {result.error}")


def main():
    output_demo()
    state_demo()
    choice_demo()
    scheduler_demo()
    unhandled_demo()


if __name__ == "__main__":
    main()
