"""
Effect libraries built on the program tree and handlers.

Each module defines operation constructors and ready-made handlers:

- output: Print with natural-order, reverse-order and collecting handlers
- writer: Log/Tell collected purely or sent to loguru
- reader: Read/Ask answered from an environment
- chance: Random answered from a seeded generator
- choice: Decide/Fail with backtracking, maximising and enumerating strategies
- state: Get/Put/Modify in state-passing style
- suspend: Suspend/Wait/Exit/Fork/par/Now for cooperative concurrency
"""

from efftree.effects.chance import RANDOM, Random, random_handler
from efftree.effects.choice import (
    DECIDE,
    FAIL,
    Decide,
    Fail,
    all_choices,
    backtrack,
    choose,
    choose_in,
    first_solution,
    guard,
    pick_max,
    pick_min,
)
from efftree.effects.output import (
    PRINT,
    Print,
    collect_print_handler,
    print_handler,
    reverse_print_handler,
)
from efftree.effects.reader import ASK, READ, Ask, Read, reader_handler
from efftree.effects.state import GET, PUT, Get, Modify, Put, run_state, state_handler
from efftree.effects.suspend import (
    NOT_AVAILABLE,
    NOW,
    SUSPEND,
    Exit,
    Fork,
    Now,
    Suspend,
    Wait,
    par,
    suspend_handler,
)
from efftree.effects.writer import LOG, Log, Tell, logger_handler, writer_handler

__all__ = [
    # Effect names
    "ASK",
    "DECIDE",
    "FAIL",
    "GET",
    "LOG",
    "NOW",
    "PRINT",
    "PUT",
    "RANDOM",
    "READ",
    "SUSPEND",
    # Constructors
    "Ask",
    "Decide",
    "Exit",
    "Fail",
    "Fork",
    "Get",
    "Log",
    "Modify",
    "Now",
    "Print",
    "Put",
    "Random",
    "Read",
    "Suspend",
    "Tell",
    "Wait",
    "choose",
    "choose_in",
    "guard",
    "par",
    "NOT_AVAILABLE",
    # Handlers
    "all_choices",
    "backtrack",
    "collect_print_handler",
    "first_solution",
    "logger_handler",
    "pick_max",
    "pick_min",
    "print_handler",
    "random_handler",
    "reader_handler",
    "reverse_print_handler",
    "run_state",
    "state_handler",
    "suspend_handler",
    "writer_handler",
]
