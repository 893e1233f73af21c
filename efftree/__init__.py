"""
efftree - programs as trees of operations, interpreted by handlers.

A program is a tree: ``Pure`` leaves and ``Operation`` nodes that name an
effect and carry a continuation. ``bind`` grafts trees, ``@do`` writes them
as generators, and handlers interpret one layer of operations at a time,
forwarding the rest outward.

The runtime logs through loguru and is disabled by default; call
``logger.enable("efftree")`` to see scheduler and runner traces.
"""

from loguru import logger

from efftree._collection_combinators import apply, collect_all, sequence
from efftree._vendor import Err, Ok, Result
from efftree.do import build_program, do
from efftree.effects import (
    Ask,
    Decide,
    Exit,
    Fail,
    Fork,
    Get,
    Log,
    Modify,
    Now,
    Print,
    Put,
    Random,
    Read,
    Suspend,
    Tell,
    Wait,
    all_choices,
    backtrack,
    choose,
    choose_in,
    collect_print_handler,
    first_solution,
    guard,
    logger_handler,
    par,
    pick_max,
    pick_min,
    print_handler,
    random_handler,
    reader_handler,
    reverse_print_handler,
    run_state,
    state_handler,
    suspend_handler,
    writer_handler,
)
from efftree.errors import (
    EffectTreeError,
    MissingEnvKeyError,
    NoResultError,
    ReplayDivergenceError,
    SchedulerStepLimitError,
    UnhandledEffectError,
)
from efftree.handler import Handler, compose, handle, handler
from efftree.kleisli import KleisliProgram
from efftree.program import Operation, Program, Pure, bind, operation, pure
from efftree.run import RunResult, async_run, handlers_preset, run, run_scheduled, sync_run
from efftree.scheduler import AsyncioHost, Host, Scheduler

logger.disable("efftree")

__all__ = [
    # Program tree
    "Program",
    "Pure",
    "Operation",
    "pure",
    "operation",
    "bind",
    "apply",
    "collect_all",
    "sequence",
    # Builder
    "do",
    "build_program",
    "KleisliProgram",
    # Handlers
    "Handler",
    "handler",
    "handle",
    "compose",
    # Running
    "run",
    "sync_run",
    "run_scheduled",
    "async_run",
    "handlers_preset",
    "RunResult",
    "Result",
    "Ok",
    "Err",
    "Host",
    "Scheduler",
    "AsyncioHost",
    # Errors
    "EffectTreeError",
    "UnhandledEffectError",
    "ReplayDivergenceError",
    "NoResultError",
    "SchedulerStepLimitError",
    "MissingEnvKeyError",
    # Effects
    "Print",
    "print_handler",
    "reverse_print_handler",
    "collect_print_handler",
    "Log",
    "Tell",
    "writer_handler",
    "logger_handler",
    "Read",
    "Ask",
    "reader_handler",
    "Random",
    "random_handler",
    "Decide",
    "Fail",
    "choose",
    "choose_in",
    "guard",
    "backtrack",
    "pick_max",
    "pick_min",
    "all_choices",
    "first_solution",
    "Get",
    "Put",
    "Modify",
    "state_handler",
    "run_state",
    "Suspend",
    "Wait",
    "Exit",
    "Fork",
    "Now",
    "par",
    "suspend_handler",
]
